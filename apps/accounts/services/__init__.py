"""
Accounts services: login and the provisioning of organisation accounts.
"""

from .exceptions import (
    AccountProvisioningError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .user_authentication import authenticate_user, issue_tokens
from .account_management import provision_account

__all__ = [
    # Exceptions
    'AccountProvisioningError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    # Authentication
    'authenticate_user',
    'issue_tokens',
    # Provisioning
    'provision_account',
]
