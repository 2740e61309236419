"""Domain-specific exceptions for the ledger."""
from apps.core.exceptions import (
    ConflictError,
    EntityNotFound,
    ScopeForbidden,
    ValidationFailed,
)


class InvalidAmountError(ValidationFailed):
    default_detail = 'Amount must be a positive value with at most two decimal places.'
    default_code = 'invalid_amount'


class TransactionNotFoundError(EntityNotFound):
    default_detail = 'Transaction not found.'
    default_code = 'transaction_not_found'


class CommissionNotFoundError(EntityNotFound):
    default_detail = 'Commission not found.'
    default_code = 'commission_not_found'


class DuplicateCommissionError(ConflictError):
    default_detail = 'A commission already exists for this transaction.'
    default_code = 'duplicate_commission'


class CardBoundElsewhereError(ScopeForbidden):
    default_detail = 'Card is bound to another establishment.'
    default_code = 'card_bound_elsewhere'
