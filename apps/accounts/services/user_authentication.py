"""
Login for franchise network accounts.

The access token carries the caller's role and organisation ids so clients
can tell which part of the network they act for without an extra request.
Authorisation never trusts these claims: every request rebuilds its
ScopePredicate from the database row.
"""
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import UserRole
from apps.franchises.models import OrganisationStatus

from .exceptions import InactiveAccountError, InvalidCredentialsError

logger = logging.getLogger(__name__)

User = get_user_model()


def _organisation_of(user):
    if user.role == UserRole.FRANCHISEE:
        return user.franchisee
    if user.role == UserRole.ESTABLISHMENT:
        return user.establishment
    return None


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check credentials and stamp ``last_login``.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Account or its franchisee/establishment is inactive
    """
    try:
        user = (
            User.objects
            .select_for_update(of=('self',))
            .select_related('franchisee', 'establishment')
            .get(email__iexact=email)
        )
    except User.DoesNotExist:
        logger.info('Login refused for unknown email %s', email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.check_password(password):
        logger.info('Login refused for %s: wrong password', user.email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    organisation = _organisation_of(user)
    if organisation is not None and organisation.status != OrganisationStatus.ACTIVE:
        raise InactiveAccountError(f"{organisation.name} is inactive")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user


def issue_tokens(user) -> dict:
    """Refresh/access pair with the role and organisation ids as claims."""
    refresh = RefreshToken.for_user(user)
    for claim, value in (
        ('role', user.role),
        ('franchisor_id', user.franchisor_id),
        ('franchisee_id', user.franchisee_id),
        ('establishment_id', user.establishment_id),
    ):
        refresh[claim] = str(value) if value else None

    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }
