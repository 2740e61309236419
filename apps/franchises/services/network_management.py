"""
Franchise network service.

Manages franchisees and establishments. Every read and write is scoped by
the caller's ScopePredicate.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet

from apps.accounts.models import UserRole
from apps.accounts.scope import ScopePredicate
from apps.accounts.services import AccountProvisioningError, provision_account
from apps.audit.models import AuditAction
from apps.audit.services import record_audit, snapshot
from apps.core.exceptions import ConflictError, ScopeForbidden, ValidationFailed
from apps.core.state_machine import StateMachine
from apps.franchises.models import Establishment, Franchisee, Franchisor, OrganisationStatus

from .exceptions import (
    DuplicateDocumentError,
    EstablishmentNotFoundError,
    FranchiseeNotFoundError,
    FranchisorNotFoundError,
    InvalidCommissionRateError,
    OrganisationInUseError,
)
from .external_linkage import schedule_external_linkage

logger = logging.getLogger(__name__)

FRANCHISEE_AUDIT_FIELDS = ['name', 'cnpj', 'email', 'phone', 'region', 'commission_rate', 'status']
ESTABLISHMENT_AUDIT_FIELDS = ['name', 'cnpj', 'email', 'phone', 'address', 'category', 'status', 'franchisee_id']
FRANCHISEE_EDITABLE_FIELDS = {'name', 'email', 'phone', 'region', 'status'}
ESTABLISHMENT_EDITABLE_FIELDS = {'name', 'email', 'phone', 'address', 'category'}

# Related records that block a hard delete.
FRANCHISEE_DEPENDENTS = ['establishments', 'cards', 'card_requests', 'displays', 'commissions']
ESTABLISHMENT_DEPENDENTS = ['cards', 'transactions', 'card_requests', 'displays', 'commissions']

establishment_status_machine = StateMachine('establishment', {
    OrganisationStatus.ACTIVE: {OrganisationStatus.INACTIVE},
    OrganisationStatus.INACTIVE: {OrganisationStatus.ACTIVE},
})


def validate_commission_rate(rate) -> Decimal:
    """
    Normalise a commission rate percentage.

    Raises:
        InvalidCommissionRateError: If the rate is not a number in [0, 100]
            with at most two decimal places
    """
    try:
        value = Decimal(str(rate))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidCommissionRateError(f"Invalid commission rate: {rate}")
    if not value.is_finite() or value < 0 or value > 100:
        raise InvalidCommissionRateError(f"Commission rate must be between 0 and 100, got {rate}")
    if value.as_tuple().exponent < -2:
        raise InvalidCommissionRateError("Commission rate allows at most two decimal places")
    return value.quantize(Decimal('0.01'))


def get_franchisee(*, franchisee_id: UUID, scope: ScopePredicate) -> Franchisee:
    """
    Get a franchisee visible to the caller.

    Raises:
        FranchiseeNotFoundError: If franchisee doesn't exist
        ScopeForbidden: If it belongs to another part of the network
    """
    try:
        franchisee = Franchisee.objects.select_related('franchisor').get(id=franchisee_id)
    except Franchisee.DoesNotExist:
        raise FranchiseeNotFoundError(f"Franchisee with ID {franchisee_id} not found")

    scope.require(franchisee_id=franchisee.id, message='This franchisee is outside your scope.')
    return franchisee


def list_franchisees(*, scope: ScopePredicate, search: Optional[str] = None,
                     region: Optional[str] = None, status: Optional[str] = None) -> QuerySet:
    queryset = scope.apply(
        Franchisee.objects.select_related('franchisor'),
        franchisee_lookup='id',
        establishment_lookup=None,
    )
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(cnpj__icontains=search) | Q(email__icontains=search)
        )
    if region:
        queryset = queryset.filter(region__iexact=region)
    if status:
        queryset = queryset.filter(status=status)
    return queryset


@transaction.atomic
def create_franchisee(
    *,
    actor,
    scope: ScopePredicate,
    name: str,
    cnpj: str,
    email: str,
    phone: str = '',
    region: str = '',
    commission_rate=Decimal('10.00'),
    franchisor_id: Optional[UUID] = None,
    login_password: Optional[str] = None,
) -> Franchisee:
    """
    Create a franchisee under the franchisor.

    The gateway customer is requested after commit; its failure never undoes
    the local create.

    Args:
        actor: Franchisor account performing the action
        scope: Caller scope (must be unrestricted)
        name, cnpj, email, phone, region: Franchisee details
        commission_rate: Percentage of usage amounts owed as commission
        franchisor_id: Owning franchisor; defaults to the actor's franchisor
        login_password: If given, a franchisee login is created with ``email``

    Returns:
        Created Franchisee instance

    Raises:
        ScopeForbidden: If the caller is not the franchisor
        InvalidCommissionRateError: If the rate is out of range
        DuplicateDocumentError: If the CNPJ is already registered
        ConflictError: If the login email is already taken
    """
    scope.require_franchisor()
    rate = validate_commission_rate(commission_rate)

    franchisor_id = franchisor_id or actor.franchisor_id
    if franchisor_id is None:
        raise ValidationFailed("A franchisor is required to create a franchisee")
    try:
        franchisor = Franchisor.objects.get(id=franchisor_id)
    except Franchisor.DoesNotExist:
        raise FranchisorNotFoundError(f"Franchisor with ID {franchisor_id} not found")

    if Franchisee.objects.filter(cnpj=cnpj).exists():
        raise DuplicateDocumentError(f"A franchisee with CNPJ {cnpj} already exists")

    try:
        with transaction.atomic():
            franchisee = Franchisee.objects.create(
                franchisor=franchisor,
                name=name,
                cnpj=cnpj,
                email=email,
                phone=phone,
                region=region,
                commission_rate=rate,
            )
    except IntegrityError:
        raise DuplicateDocumentError(f"A franchisee with CNPJ {cnpj} already exists")

    if login_password:
        try:
            provision_account(
                email=email,
                password=login_password,
                role=UserRole.FRANCHISEE,
                organisation=franchisee,
                full_name=name,
            )
        except AccountProvisioningError as e:
            raise ConflictError(str(e))

    record_audit(
        actor=actor,
        action=AuditAction.CREATE,
        entity='Franchisee',
        entity_id=franchisee.id,
        after=snapshot(franchisee, FRANCHISEE_AUDIT_FIELDS),
    )
    schedule_external_linkage(franchisee)

    logger.info('Franchisee %s created with commission rate %s%%', franchisee.id, rate)
    return franchisee


@transaction.atomic
def update_franchisee(*, franchisee_id: UUID, actor, scope: ScopePredicate, **changes) -> Franchisee:
    """
    Update franchisee details.

    Franchisees may edit their own contact details; only the franchisor may
    change the commission rate. Rate changes never touch commissions already
    recorded, which carry their own rate snapshot.

    Raises:
        FranchiseeNotFoundError: If franchisee doesn't exist
        ScopeForbidden: If outside scope, or a franchisee changes its rate
        InvalidCommissionRateError: If the new rate is out of range
    """
    scope.require_manager()
    try:
        franchisee = Franchisee.objects.select_for_update().get(id=franchisee_id)
    except Franchisee.DoesNotExist:
        raise FranchiseeNotFoundError(f"Franchisee with ID {franchisee_id} not found")
    scope.require(franchisee_id=franchisee.id, message='This franchisee is outside your scope.')

    before = snapshot(franchisee, FRANCHISEE_AUDIT_FIELDS)
    update_fields = []

    if 'commission_rate' in changes:
        scope.require_franchisor('Only the franchisor can change commission rates.')
        franchisee.commission_rate = validate_commission_rate(changes.pop('commission_rate'))
        update_fields.append('commission_rate')

    for field, value in changes.items():
        if field not in FRANCHISEE_EDITABLE_FIELDS:
            raise ValidationFailed(f"Field '{field}' cannot be updated")
        setattr(franchisee, field, value)
        update_fields.append(field)

    if not update_fields:
        return franchisee

    franchisee.save(update_fields=update_fields + ['updated_at'])
    record_audit(
        actor=actor,
        action=AuditAction.UPDATE,
        entity='Franchisee',
        entity_id=franchisee.id,
        before=before,
        after=snapshot(franchisee, FRANCHISEE_AUDIT_FIELDS),
    )
    return franchisee


def update_commission_rate(*, franchisee_id: UUID, rate, actor, scope: ScopePredicate) -> Franchisee:
    """Change a franchisee's commission rate for future usages."""
    return update_franchisee(
        franchisee_id=franchisee_id,
        actor=actor,
        scope=scope,
        commission_rate=rate,
    )


def get_establishment(*, establishment_id: UUID, scope: ScopePredicate) -> Establishment:
    """
    Get an establishment visible to the caller.

    Raises:
        EstablishmentNotFoundError: If establishment doesn't exist
        ScopeForbidden: If it belongs to another franchisee or establishment
    """
    try:
        establishment = Establishment.objects.select_related('franchisee').get(id=establishment_id)
    except Establishment.DoesNotExist:
        raise EstablishmentNotFoundError(f"Establishment with ID {establishment_id} not found")

    _require_establishment_scope(scope, establishment)
    return establishment


def list_establishments(*, scope: ScopePredicate, franchisee_id: Optional[UUID] = None,
                        search: Optional[str] = None, status: Optional[str] = None) -> QuerySet:
    queryset = scope.apply(
        Establishment.objects.select_related('franchisee'),
        establishment_lookup='id',
        franchisee_id=franchisee_id,
    )
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(cnpj__icontains=search) | Q(category__icontains=search)
        )
    if status:
        queryset = queryset.filter(status=status)
    return queryset


@transaction.atomic
def create_establishment(
    *,
    actor,
    scope: ScopePredicate,
    name: str,
    cnpj: str,
    email: str,
    franchisee_id: Optional[UUID] = None,
    phone: str = '',
    address: str = '',
    category: str = '',
    login_password: Optional[str] = None,
) -> Establishment:
    """
    Create an establishment under a franchisee.

    Franchisee accounts always create under themselves; the franchisor must
    name the franchisee.

    Raises:
        ScopeForbidden: If called by an establishment or for another franchisee
        FranchiseeNotFoundError: If the franchisee doesn't exist
        DuplicateDocumentError: If the CNPJ is already registered
    """
    scope.require_manager()
    if scope.is_franchisee:
        if franchisee_id and franchisee_id != scope.franchisee_id:
            raise ScopeForbidden("Franchisees can only create establishments for themselves.")
        franchisee_id = scope.franchisee_id
    if franchisee_id is None:
        raise ValidationFailed("A franchisee is required to create an establishment")

    try:
        franchisee = Franchisee.objects.get(id=franchisee_id)
    except Franchisee.DoesNotExist:
        raise FranchiseeNotFoundError(f"Franchisee with ID {franchisee_id} not found")

    if Establishment.objects.filter(cnpj=cnpj).exists():
        raise DuplicateDocumentError(f"An establishment with CNPJ {cnpj} already exists")

    try:
        with transaction.atomic():
            establishment = Establishment.objects.create(
                franchisee=franchisee,
                name=name,
                cnpj=cnpj,
                email=email,
                phone=phone,
                address=address,
                category=category,
            )
    except IntegrityError:
        raise DuplicateDocumentError(f"An establishment with CNPJ {cnpj} already exists")

    if login_password:
        try:
            provision_account(
                email=email,
                password=login_password,
                role=UserRole.ESTABLISHMENT,
                organisation=establishment,
                full_name=name,
            )
        except AccountProvisioningError as e:
            raise ConflictError(str(e))

    record_audit(
        actor=actor,
        action=AuditAction.CREATE,
        entity='Establishment',
        entity_id=establishment.id,
        after=snapshot(establishment, ESTABLISHMENT_AUDIT_FIELDS),
    )
    schedule_external_linkage(establishment)

    logger.info('Establishment %s created for franchisee %s', establishment.id, franchisee.id)
    return establishment


@transaction.atomic
def update_establishment(*, establishment_id: UUID, actor, scope: ScopePredicate, **changes) -> Establishment:
    """
    Update establishment details.

    Any caller that can see the establishment may edit its contact details,
    including the establishment itself. Status goes through
    set_establishment_status.

    Raises:
        EstablishmentNotFoundError: If establishment doesn't exist
        ScopeForbidden: If it is outside the caller's scope
        ValidationFailed: If a field is not editable
    """
    establishment = _lock_establishment(establishment_id)
    _require_establishment_scope(scope, establishment)

    unknown = set(changes) - ESTABLISHMENT_EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Field '{sorted(unknown)[0]}' cannot be updated")
    if not changes:
        return establishment

    before = snapshot(establishment, ESTABLISHMENT_AUDIT_FIELDS)
    for field, value in changes.items():
        setattr(establishment, field, value)
    establishment.save(update_fields=list(changes) + ['updated_at'])

    record_audit(
        actor=actor,
        action=AuditAction.UPDATE,
        entity='Establishment',
        entity_id=establishment.id,
        before=before,
        after=snapshot(establishment, ESTABLISHMENT_AUDIT_FIELDS),
    )
    return establishment


@transaction.atomic
def set_establishment_status(*, establishment_id: UUID, status: str, actor, scope: ScopePredicate) -> Establishment:
    """
    Approve (ACTIVE) or deactivate (INACTIVE) an establishment.

    Logins of an INACTIVE establishment are refused at authentication.

    Raises:
        ScopeForbidden: If the caller is not the franchisor
        EstablishmentNotFoundError: If establishment doesn't exist
        InvalidTransition: If the establishment already has that status
    """
    scope.require_franchisor('Only the franchisor can approve or deactivate establishments.')
    establishment = _lock_establishment(establishment_id)

    before = snapshot(establishment, ESTABLISHMENT_AUDIT_FIELDS)
    establishment.status = establishment_status_machine.transition(establishment.status, status)
    establishment.save(update_fields=['status', 'updated_at'])

    record_audit(
        actor=actor,
        action=AuditAction.STATUS_CHANGE,
        entity='Establishment',
        entity_id=establishment.id,
        before=before,
        after=snapshot(establishment, ESTABLISHMENT_AUDIT_FIELDS),
    )
    logger.info(
        'Establishment %s moved from %s to %s',
        establishment.id, before['status'], establishment.status,
    )
    return establishment


@transaction.atomic
def delete_establishment(*, establishment_id: UUID, actor, scope: ScopePredicate) -> None:
    """
    Delete an establishment that has no cards, transactions or other records.

    Its login accounts are removed with it.

    Raises:
        ScopeForbidden: If called by an establishment or for another franchisee
        EstablishmentNotFoundError: If establishment doesn't exist
        OrganisationInUseError: While dependent records exist
    """
    scope.require_manager('Establishments cannot delete establishments.')
    establishment = _lock_establishment(establishment_id)
    _require_establishment_scope(scope, establishment)

    _require_no_dependents(establishment, ESTABLISHMENT_DEPENDENTS)

    before = snapshot(establishment, ESTABLISHMENT_AUDIT_FIELDS)
    establishment.users.all().delete()
    establishment.delete()
    record_audit(
        actor=actor,
        action=AuditAction.DELETE,
        entity='Establishment',
        entity_id=establishment_id,
        before=before,
    )
    logger.info('Establishment %s deleted by %s', establishment_id, actor)


@transaction.atomic
def delete_franchisee(*, franchisee_id: UUID, actor, scope: ScopePredicate) -> None:
    """
    Delete a franchisee that has no establishments, cards or other records.

    Its login accounts are removed with it.

    Raises:
        ScopeForbidden: If the caller is not the franchisor
        FranchiseeNotFoundError: If franchisee doesn't exist
        OrganisationInUseError: While dependent records exist
    """
    scope.require_franchisor('Only the franchisor can delete franchisees.')
    try:
        franchisee = Franchisee.objects.select_for_update().get(id=franchisee_id)
    except Franchisee.DoesNotExist:
        raise FranchiseeNotFoundError(f"Franchisee with ID {franchisee_id} not found")

    _require_no_dependents(franchisee, FRANCHISEE_DEPENDENTS)

    before = snapshot(franchisee, FRANCHISEE_AUDIT_FIELDS)
    franchisee.users.all().delete()
    franchisee.delete()
    record_audit(
        actor=actor,
        action=AuditAction.DELETE,
        entity='Franchisee',
        entity_id=franchisee_id,
        before=before,
    )
    logger.info('Franchisee %s deleted by %s', franchisee_id, actor)


def _lock_establishment(establishment_id) -> Establishment:
    try:
        return Establishment.objects.select_for_update().get(id=establishment_id)
    except Establishment.DoesNotExist:
        raise EstablishmentNotFoundError(f"Establishment with ID {establishment_id} not found")


def _require_establishment_scope(scope: ScopePredicate, establishment: Establishment) -> None:
    scope.require(
        franchisee_id=establishment.franchisee_id,
        establishment_id=establishment.id,
        message='This establishment is outside your scope.',
    )


def _require_no_dependents(organisation, relations) -> None:
    counts = {
        relation: getattr(organisation, relation).count()
        for relation in relations
    }
    in_use = {relation: count for relation, count in counts.items() if count}
    if in_use:
        details = ', '.join(f'{count} {relation.replace("_", " ")}' for relation, count in in_use.items())
        raise OrganisationInUseError(f"{organisation.name} still has {details}")
