"""
Error taxonomy shared by every ledger app.

Each class is a DRF APIException so services can raise it directly and the
project exception handler renders it with a stable ``code``. App-specific
errors subclass one of these kinds and only override the message and
``default_code``.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class LedgerError(APIException):
    """Base class for all domain errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Internal server error.'
    default_code = 'internal'
    kind = 'internal'


class ValidationFailed(LedgerError):
    """Malformed or out-of-range input, rejected before any side effect."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'validation'
    kind = 'validation'


class EntityNotFound(LedgerError):
    """Referenced entity does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'
    kind = 'not_found'


class ScopeForbidden(LedgerError):
    """Entity is outside the actor's scope, or the role lacks the capability."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'
    kind = 'forbidden'


class InvalidTransition(LedgerError):
    """A state machine was asked for a status unreachable from the current one."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Invalid status transition.'
    default_code = 'invalid_transition'
    kind = 'invalid_transition'

    def __init__(self, current=None, target=None, *, entity='entity', detail=None, code=None):
        self.current = current
        self.target = target
        if detail is None and current is not None and target is not None:
            detail = f'Cannot move {entity} from {_label(current)} to {_label(target)}.'
        super().__init__(detail=detail, code=code)


class InsufficientBalance(LedgerError):
    """A usage amount exceeds the card's stored value."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'Insufficient balance.'
    default_code = 'insufficient_balance'
    kind = 'insufficient_balance'

    def __init__(self, available=None, requested=None, detail=None, code=None):
        self.available = available
        self.requested = requested
        if detail is None and available is not None and requested is not None:
            detail = f'Insufficient balance: available {available}, requested {requested}.'
        super().__init__(detail=detail, code=code)


class ConflictError(LedgerError):
    """Uniqueness violation or a dependent row blocking a delete."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with the current state of the resource.'
    default_code = 'conflict'
    kind = 'conflict'


class InternalError(LedgerError):
    """Unexpected store or infrastructure failure."""


def _label(value):
    return getattr(value, 'value', value)
