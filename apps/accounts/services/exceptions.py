"""Domain-specific exceptions for accounts services."""
from rest_framework import status

from apps.core.exceptions import LedgerError, ScopeForbidden


class AccountProvisioningError(Exception):
    """Raised when an account cannot be created for an organisation."""
    pass


class InvalidCredentialsError(LedgerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid email or password.'
    default_code = 'invalid_credentials'
    kind = 'unauthenticated'


class InactiveAccountError(ScopeForbidden):
    """The account, or the organisation it acts for, is deactivated."""
    default_detail = 'Account is deactivated.'
    default_code = 'inactive_account'
