"""Account provisioning for franchise network organisations."""

from django.db import transaction, IntegrityError
from django.contrib.auth import get_user_model

from apps.accounts.models import UserRole

from .exceptions import AccountProvisioningError

User = get_user_model()

ROLE_LINKS = {
    UserRole.FRANCHISOR: 'franchisor',
    UserRole.FRANCHISEE: 'franchisee',
    UserRole.ESTABLISHMENT: 'establishment',
}


@transaction.atomic
def provision_account(
    *,
    email: str,
    password: str,
    role: str,
    organisation,
    full_name: str = "",
) -> User:
    """
    Create the login account of a franchisor, franchisee or establishment.

    Args:
        email: Login email (unique)
        password: Initial password (will be hashed)
        role: One of UserRole
        organisation: Franchisor, Franchisee or Establishment matching the role
        full_name: Optional display name

    Returns:
        Created User instance

    Raises:
        AccountProvisioningError: If the role is unknown, the organisation is
            missing or the email is already taken
    """
    link = ROLE_LINKS.get(role)
    if link is None:
        raise AccountProvisioningError(f"Unknown role: {role}")
    if organisation is None:
        raise AccountProvisioningError(f"A {link} is required for role {role}")

    if User.objects.filter(email__iexact=email).exists():
        raise AccountProvisioningError(f"An account with email {email} already exists")

    try:
        with transaction.atomic():
            return User.objects.create_user(
                email=email,
                password=password,
                role=role,
                full_name=full_name,
                **{link: organisation},
            )
    except IntegrityError:
        raise AccountProvisioningError(f"An account with email {email} already exists")
