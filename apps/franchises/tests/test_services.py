"""
Service layer tests for the franchise network.

Tests cover:
- Franchisor-only franchisee creation
- Commission rate validation and updates
- Establishment creation scoped to the calling franchisee
- Establishment edits, approval and deletion guards
- Audit rows for creates
"""
from decimal import Decimal
from unittest.mock import patch

import pytest

from apps.accounts.models import User, UserRole
from apps.audit.models import AuditAction, AuditLog
from apps.cards.models import Card
from apps.core.exceptions import ConflictError, InvalidTransition, ScopeForbidden, ValidationFailed
from apps.franchises.models import Establishment, ExternalLinkage, Franchisee, OrganisationStatus
from apps.franchises.services import (
    DuplicateDocumentError,
    EstablishmentNotFoundError,
    FranchiseeNotFoundError,
    InvalidCommissionRateError,
    OrganisationInUseError,
    create_establishment,
    create_franchisee,
    delete_establishment,
    delete_franchisee,
    get_establishment,
    get_franchisee,
    list_establishments,
    list_franchisees,
    set_establishment_status,
    update_commission_rate,
    update_establishment,
    update_franchisee,
    validate_commission_rate,
)


@pytest.fixture(autouse=True)
def no_gateway_calls():
    """Keep scheduled gateway linkage from running in these tests."""
    with patch('apps.franchises.services.network_management.schedule_external_linkage') as scheduled:
        yield scheduled


# =============================================================================
# Commission Rate
# =============================================================================

class TestValidateCommissionRate:

    @pytest.mark.parametrize('rate,expected', [
        ('0', Decimal('0.00')),
        ('15', Decimal('15.00')),
        (Decimal('12.5'), Decimal('12.50')),
        (100, Decimal('100.00')),
    ])
    def test_valid(self, rate, expected):
        assert validate_commission_rate(rate) == expected

    @pytest.mark.parametrize('rate', ['-1', '100.01', 'abc', None, '1.234'])
    def test_invalid(self, rate):
        with pytest.raises(InvalidCommissionRateError):
            validate_commission_rate(rate)


# =============================================================================
# Franchisees
# =============================================================================

@pytest.mark.django_db
class TestFranchiseeManagement:

    def test_create_franchisee(self, franchisor_user, franchisor_scope, franchisor, no_gateway_calls):
        franchisee = create_franchisee(
            actor=franchisor_user,
            scope=franchisor_scope,
            name='Franquia Sul',
            cnpj='77.777.777/0001-77',
            email='sul@example.com',
            region='Sul',
            commission_rate='12.5',
        )

        assert franchisee.franchisor == franchisor
        assert franchisee.commission_rate == Decimal('12.50')
        assert franchisee.external_linkage == ExternalLinkage.UNLINKED
        no_gateway_calls.assert_called_once_with(franchisee)
        assert AuditLog.objects.filter(
            entity='Franchisee', entity_id=str(franchisee.id), action=AuditAction.CREATE,
        ).exists()

    def test_create_franchisee_with_login(self, franchisor_user, franchisor_scope):
        franchisee = create_franchisee(
            actor=franchisor_user,
            scope=franchisor_scope,
            name='Franquia Sul',
            cnpj='77.777.777/0001-77',
            email='sul@example.com',
            login_password='SulPass123!',
        )

        account = User.objects.get(email='sul@example.com')
        assert account.role == UserRole.FRANCHISEE
        assert account.franchisee == franchisee
        assert account.check_password('SulPass123!')

    def test_create_franchisee_login_email_taken(self, franchisor_user, franchisor_scope, franchisee_user):
        with pytest.raises(ConflictError):
            create_franchisee(
                actor=franchisor_user,
                scope=franchisor_scope,
                name='Franquia Sul',
                cnpj='77.777.777/0001-77',
                email=franchisee_user.email,
                login_password='SulPass123!',
            )

    def test_franchisee_cannot_create_franchisee(self, franchisee_user, franchisee_scope):
        with pytest.raises(ScopeForbidden):
            create_franchisee(
                actor=franchisee_user,
                scope=franchisee_scope,
                name='Rogue',
                cnpj='88.888.888/0001-88',
                email='rogue@example.com',
            )

    def test_duplicate_cnpj(self, franchisor_user, franchisor_scope, franchisee):
        with pytest.raises(DuplicateDocumentError):
            create_franchisee(
                actor=franchisor_user,
                scope=franchisor_scope,
                name='Copy',
                cnpj=franchisee.cnpj,
                email='copy@example.com',
            )

    def test_get_franchisee_existence_before_scope(self, franchisee_scope, other_franchisee):
        with pytest.raises(FranchiseeNotFoundError):
            get_franchisee(franchisee_id='00000000-0000-0000-0000-000000000000', scope=franchisee_scope)
        with pytest.raises(ScopeForbidden):
            get_franchisee(franchisee_id=other_franchisee.id, scope=franchisee_scope)

    def test_list_franchisees_scoped(self, franchisee_scope, franchisor_scope, franchisee, other_franchisee):
        assert list(list_franchisees(scope=franchisee_scope)) == [franchisee]
        assert list_franchisees(scope=franchisor_scope).count() == 2
        assert list(list_franchisees(scope=franchisor_scope, region='norte')) == [other_franchisee]

    def test_update_commission_rate(self, franchisor_user, franchisor_scope, franchisee):
        updated = update_commission_rate(
            franchisee_id=franchisee.id, rate='20', actor=franchisor_user, scope=franchisor_scope,
        )

        assert updated.commission_rate == Decimal('20.00')
        franchisee.refresh_from_db()
        assert franchisee.commission_rate == Decimal('20.00')

    def test_franchisee_cannot_change_own_rate(self, franchisee_user, franchisee_scope, franchisee):
        with pytest.raises(ScopeForbidden):
            update_franchisee(
                franchisee_id=franchisee.id,
                actor=franchisee_user,
                scope=franchisee_scope,
                commission_rate=Decimal('50'),
            )

    def test_franchisee_edits_own_contact(self, franchisee_user, franchisee_scope, franchisee):
        updated = update_franchisee(
            franchisee_id=franchisee.id,
            actor=franchisee_user,
            scope=franchisee_scope,
            phone='11999990000',
        )

        assert updated.phone == '11999990000'
        assert updated.commission_rate == Decimal('15.00')


# =============================================================================
# Establishments
# =============================================================================

@pytest.mark.django_db
class TestEstablishmentManagement:

    def test_franchisee_creates_for_itself(self, franchisee_user, franchisee_scope, franchisee):
        establishment = create_establishment(
            actor=franchisee_user,
            scope=franchisee_scope,
            name='Farmácia Boa',
            cnpj='99.999.999/0001-99',
            email='farmacia@example.com',
        )

        assert establishment.franchisee == franchisee

    def test_franchisee_cannot_create_for_another(self, franchisee_user, franchisee_scope, other_franchisee):
        with pytest.raises(ScopeForbidden):
            create_establishment(
                actor=franchisee_user,
                scope=franchisee_scope,
                franchisee_id=other_franchisee.id,
                name='Farmácia Boa',
                cnpj='99.999.999/0001-99',
                email='farmacia@example.com',
            )

    def test_franchisor_must_name_existing_franchisee(self, franchisor_user, franchisor_scope):
        with pytest.raises(FranchiseeNotFoundError):
            create_establishment(
                actor=franchisor_user,
                scope=franchisor_scope,
                franchisee_id='00000000-0000-0000-0000-000000000000',
                name='Farmácia Boa',
                cnpj='99.999.999/0001-99',
                email='farmacia@example.com',
            )

    def test_establishment_cannot_create(self, establishment_user, establishment_scope):
        with pytest.raises(ScopeForbidden):
            create_establishment(
                actor=establishment_user,
                scope=establishment_scope,
                name='Farmácia Boa',
                cnpj='99.999.999/0001-99',
                email='farmacia@example.com',
            )
        assert not Establishment.objects.filter(cnpj='99.999.999/0001-99').exists()

    def test_get_establishment_scoped(self, establishment_scope, establishment, sibling_establishment):
        assert get_establishment(establishment_id=establishment.id, scope=establishment_scope) == establishment
        with pytest.raises(ScopeForbidden):
            get_establishment(establishment_id=sibling_establishment.id, scope=establishment_scope)
        with pytest.raises(EstablishmentNotFoundError):
            get_establishment(
                establishment_id='00000000-0000-0000-0000-000000000000', scope=establishment_scope,
            )

    def test_list_establishments_scoped(
        self, franchisee_scope, establishment_scope, establishment, sibling_establishment, other_establishment,
    ):
        assert set(list_establishments(scope=franchisee_scope)) == {establishment, sibling_establishment}
        assert list(list_establishments(scope=establishment_scope)) == [establishment]


@pytest.mark.django_db
class TestEstablishmentChanges:

    def test_establishment_edits_own_details(self, establishment_user, establishment_scope, establishment):
        updated = update_establishment(
            establishment_id=establishment.id,
            actor=establishment_user,
            scope=establishment_scope,
            phone='11988887777',
            address='Rua Nova, 10',
        )

        assert updated.phone == '11988887777'
        assert updated.address == 'Rua Nova, 10'
        log = AuditLog.objects.get(entity='Establishment', entity_id=str(establishment.id))
        assert log.action == AuditAction.UPDATE
        assert log.after['address'] == 'Rua Nova, 10'

    def test_status_is_not_an_editable_field(self, franchisee_user, franchisee_scope, establishment):
        with pytest.raises(ValidationFailed):
            update_establishment(
                establishment_id=establishment.id,
                actor=franchisee_user,
                scope=franchisee_scope,
                status=OrganisationStatus.INACTIVE,
            )

    def test_update_out_of_scope(self, establishment_user, establishment_scope, sibling_establishment):
        with pytest.raises(ScopeForbidden):
            update_establishment(
                establishment_id=sibling_establishment.id,
                actor=establishment_user,
                scope=establishment_scope,
                name='Outro Nome',
            )

    def test_franchisor_deactivates_and_approves(self, franchisor_user, franchisor_scope, establishment):
        kwargs = {'establishment_id': establishment.id, 'actor': franchisor_user, 'scope': franchisor_scope}

        deactivated = set_establishment_status(status=OrganisationStatus.INACTIVE, **kwargs)
        assert deactivated.status == OrganisationStatus.INACTIVE

        approved = set_establishment_status(status=OrganisationStatus.ACTIVE, **kwargs)
        assert approved.status == OrganisationStatus.ACTIVE

        assert AuditLog.objects.filter(
            entity='Establishment', entity_id=str(establishment.id), action=AuditAction.STATUS_CHANGE,
        ).count() == 2

    def test_status_already_set(self, franchisor_user, franchisor_scope, establishment):
        with pytest.raises(InvalidTransition) as exc_info:
            set_establishment_status(
                establishment_id=establishment.id,
                status=OrganisationStatus.ACTIVE,
                actor=franchisor_user,
                scope=franchisor_scope,
            )

        assert exc_info.value.current == OrganisationStatus.ACTIVE

    def test_franchisee_cannot_change_status(self, franchisee_user, franchisee_scope, establishment):
        with pytest.raises(ScopeForbidden):
            set_establishment_status(
                establishment_id=establishment.id,
                status=OrganisationStatus.INACTIVE,
                actor=franchisee_user,
                scope=franchisee_scope,
            )

        establishment.refresh_from_db()
        assert establishment.status == OrganisationStatus.ACTIVE


@pytest.mark.django_db
class TestDeletion:

    def test_delete_establishment_with_its_logins(
        self, franchisee_user, franchisee_scope, establishment, establishment_user,
    ):
        delete_establishment(establishment_id=establishment.id, actor=franchisee_user, scope=franchisee_scope)

        assert not Establishment.objects.filter(id=establishment.id).exists()
        assert not User.objects.filter(id=establishment_user.id).exists()
        assert AuditLog.objects.filter(
            entity='Establishment', entity_id=str(establishment.id), action=AuditAction.DELETE,
        ).exists()

    def test_establishment_with_cards_is_kept(self, franchisee_user, franchisee_scope, franchisee, establishment):
        Card.objects.create(code='CM-DEL-1', franchisee=franchisee, establishment=establishment)

        with pytest.raises(OrganisationInUseError) as exc_info:
            delete_establishment(establishment_id=establishment.id, actor=franchisee_user, scope=franchisee_scope)

        assert '1 cards' in str(exc_info.value.detail)
        assert Establishment.objects.filter(id=establishment.id).exists()

    def test_establishment_cannot_delete(self, establishment_user, establishment_scope, establishment):
        with pytest.raises(ScopeForbidden):
            delete_establishment(
                establishment_id=establishment.id, actor=establishment_user, scope=establishment_scope,
            )

    def test_franchisee_cannot_delete_elsewhere(self, franchisee_user, franchisee_scope, other_establishment):
        with pytest.raises(ScopeForbidden):
            delete_establishment(
                establishment_id=other_establishment.id, actor=franchisee_user, scope=franchisee_scope,
            )

    def test_delete_missing_establishment(self, franchisor_user, franchisor_scope):
        with pytest.raises(EstablishmentNotFoundError):
            delete_establishment(
                establishment_id='00000000-0000-0000-0000-000000000000',
                actor=franchisor_user, scope=franchisor_scope,
            )

    def test_delete_franchisee_with_its_logins(
        self, franchisor_user, franchisor_scope, other_franchisee, other_franchisee_user,
    ):
        delete_franchisee(franchisee_id=other_franchisee.id, actor=franchisor_user, scope=franchisor_scope)

        assert not Franchisee.objects.filter(id=other_franchisee.id).exists()
        assert not User.objects.filter(id=other_franchisee_user.id).exists()

    def test_franchisee_with_establishments_is_kept(self, franchisor_user, franchisor_scope, franchisee, establishment):
        with pytest.raises(OrganisationInUseError) as exc_info:
            delete_franchisee(franchisee_id=franchisee.id, actor=franchisor_user, scope=franchisor_scope)

        assert isinstance(exc_info.value, ConflictError)
        assert '1 establishments' in str(exc_info.value.detail)
        assert Franchisee.objects.filter(id=franchisee.id).exists()

    def test_only_franchisor_deletes_franchisees(self, franchisee_user, franchisee_scope, franchisee):
        with pytest.raises(ScopeForbidden):
            delete_franchisee(franchisee_id=franchisee.id, actor=franchisee_user, scope=franchisee_scope)

    def test_delete_missing_franchisee(self, franchisor_user, franchisor_scope):
        with pytest.raises(FranchiseeNotFoundError):
            delete_franchisee(
                franchisee_id='00000000-0000-0000-0000-000000000000',
                actor=franchisor_user, scope=franchisor_scope,
            )
