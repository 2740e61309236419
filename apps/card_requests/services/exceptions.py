"""Domain-specific exceptions for card requests."""
from apps.core.exceptions import EntityNotFound, InvalidTransition, ValidationFailed


class CardRequestNotFoundError(EntityNotFound):
    default_detail = 'Card request not found.'
    default_code = 'card_request_not_found'


class InvalidRequestDatesError(ValidationFailed):
    default_detail = 'Request dates must match reached statuses and be in forward order.'
    default_code = 'invalid_request_dates'


class RequestNotCancellableError(InvalidTransition):
    default_detail = 'Only pending requests can be cancelled.'
    default_code = 'request_not_cancellable'
