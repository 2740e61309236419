"""
Shared fixtures: a small franchise network.

    franchisor
    ├── franchisee (15% commission)
    │   ├── establishment
    │   └── sibling_establishment
    └── other_franchisee (10% commission)
        └── other_establishment
"""
from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.accounts.scope import scope_for
from apps.cards.models import Card
from apps.franchises.models import Establishment, Franchisee, Franchisor


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Organisations
# =============================================================================

@pytest.fixture
def franchisor(db):
    return Franchisor.objects.create(
        name='Cartão Mais',
        cnpj='11.111.111/0001-11',
        email='hq@cartaomais.example',
    )


@pytest.fixture
def franchisee(franchisor):
    return Franchisee.objects.create(
        franchisor=franchisor,
        name='Franquia Centro',
        cnpj='22.222.222/0001-22',
        email='centro@cartaomais.example',
        region='Sudeste',
        commission_rate=Decimal('15.00'),
    )


@pytest.fixture
def other_franchisee(franchisor):
    return Franchisee.objects.create(
        franchisor=franchisor,
        name='Franquia Norte',
        cnpj='33.333.333/0001-33',
        email='norte@cartaomais.example',
        region='Norte',
        commission_rate=Decimal('10.00'),
    )


@pytest.fixture
def establishment(franchisee):
    return Establishment.objects.create(
        franchisee=franchisee,
        name='Padaria Central',
        cnpj='44.444.444/0001-44',
        email='padaria@example.com',
        category='Bakery',
    )


@pytest.fixture
def sibling_establishment(franchisee):
    return Establishment.objects.create(
        franchisee=franchisee,
        name='Mercado da Esquina',
        cnpj='55.555.555/0001-55',
        email='mercado@example.com',
        category='Grocery',
    )


@pytest.fixture
def other_establishment(other_franchisee):
    return Establishment.objects.create(
        franchisee=other_franchisee,
        name='Café do Porto',
        cnpj='66.666.666/0001-66',
        email='cafe@example.com',
        category='Cafe',
    )


# =============================================================================
# Accounts
# =============================================================================

@pytest.fixture
def franchisor_user(franchisor):
    return User.objects.create_user(
        email='admin@cartaomais.example',
        password='TestPass123!',
        role=UserRole.FRANCHISOR,
        franchisor=franchisor,
        full_name='Network Admin',
    )


@pytest.fixture
def franchisee_user(franchisee):
    return User.objects.create_user(
        email='manager@centro.example',
        password='TestPass123!',
        role=UserRole.FRANCHISEE,
        franchisee=franchisee,
    )


@pytest.fixture
def other_franchisee_user(other_franchisee):
    return User.objects.create_user(
        email='manager@norte.example',
        password='TestPass123!',
        role=UserRole.FRANCHISEE,
        franchisee=other_franchisee,
    )


@pytest.fixture
def establishment_user(establishment):
    return User.objects.create_user(
        email='caixa@padaria.example',
        password='TestPass123!',
        role=UserRole.ESTABLISHMENT,
        establishment=establishment,
    )


@pytest.fixture
def sibling_establishment_user(sibling_establishment):
    return User.objects.create_user(
        email='caixa@mercado.example',
        password='TestPass123!',
        role=UserRole.ESTABLISHMENT,
        establishment=sibling_establishment,
    )


@pytest.fixture
def franchisor_client(franchisor_user):
    return _client_for(franchisor_user)


@pytest.fixture
def franchisee_client(franchisee_user):
    return _client_for(franchisee_user)


@pytest.fixture
def other_franchisee_client(other_franchisee_user):
    return _client_for(other_franchisee_user)


@pytest.fixture
def establishment_client(establishment_user):
    return _client_for(establishment_user)


@pytest.fixture
def sibling_establishment_client(sibling_establishment_user):
    return _client_for(sibling_establishment_user)


# =============================================================================
# Scopes
# =============================================================================

@pytest.fixture
def franchisor_scope(franchisor_user):
    return scope_for(franchisor_user)


@pytest.fixture
def franchisee_scope(franchisee_user):
    return scope_for(franchisee_user)


@pytest.fixture
def other_franchisee_scope(other_franchisee_user):
    return scope_for(other_franchisee_user)


@pytest.fixture
def establishment_scope(establishment_user):
    return scope_for(establishment_user)


@pytest.fixture
def sibling_establishment_scope(sibling_establishment_user):
    return scope_for(sibling_establishment_user)


# =============================================================================
# Cards
# =============================================================================

@pytest.fixture
def card(franchisee):
    """Fresh unfunded card of ``franchisee``, not yet bound to an establishment."""
    return Card.objects.create(code='CM-0001', franchisee=franchisee)


@pytest.fixture
def other_card(other_franchisee):
    return Card.objects.create(code='CM-9001', franchisee=other_franchisee)
