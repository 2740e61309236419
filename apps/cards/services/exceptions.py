"""Domain-specific exceptions for card management."""
from apps.core.exceptions import (
    ConflictError,
    EntityNotFound,
    InvalidTransition,
    ValidationFailed,
)


class CardNotFoundError(EntityNotFound):
    default_detail = 'Card not found.'
    default_code = 'card_not_found'


class DuplicateCardCodeError(ConflictError):
    default_detail = 'A card with this code already exists.'
    default_code = 'duplicate_card_code'


class CardHasTransactionsError(ConflictError):
    default_detail = 'Cards with transactions cannot be deleted.'
    default_code = 'card_has_transactions'


class CardSuspendedError(InvalidTransition):
    default_detail = 'Card is blocked or expired.'
    default_code = 'card_suspended'


class EstablishmentMismatchError(ValidationFailed):
    default_detail = "Establishment does not belong to the card's franchisee."
    default_code = 'establishment_mismatch'
