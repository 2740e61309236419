"""
Display unit service.

Status is mostly derived from the establishment binding: binding a unit
installs it, clearing the binding returns it to stock. Explicit status
changes go through the display state machine.
"""
import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, QuerySet
from django.utils import timezone

from apps.accounts.scope import ScopePredicate
from apps.audit.models import AuditAction
from apps.audit.services import record_audit, snapshot
from apps.core.exceptions import ScopeForbidden, ValidationFailed
from apps.displays.models import Display, DisplayStatus, UnitType
from apps.displays.state_machine import DEPLOYED_STATUSES, transition
from apps.franchises.models import Establishment, Franchisee
from apps.franchises.services.exceptions import (
    EstablishmentNotFoundError,
    FranchiseeNotFoundError,
)

from .exceptions import (
    DisplayDeployedError,
    DisplayEstablishmentMismatchError,
    DisplayNotFoundError,
    DisplayNotInstallableError,
)

logger = logging.getLogger(__name__)

DISPLAY_AUDIT_FIELDS = ['unit_type', 'status', 'franchisee_id', 'establishment_id', 'installed_at']
DISPLAY_EDITABLE_FIELDS = {'status', 'unit_type', 'establishment_id', 'installed_at'}


def _require_display_scope(scope: ScopePredicate, display: Display) -> None:
    scope.require(
        franchisee_id=display.franchisee_id,
        establishment_id=display.establishment_id,
        message='This display is outside your scope.',
    )


def _resolve_establishment(establishment_id: UUID, franchisee_id: UUID) -> Establishment:
    try:
        establishment = Establishment.objects.get(id=establishment_id)
    except Establishment.DoesNotExist:
        raise EstablishmentNotFoundError(f"Establishment with ID {establishment_id} not found")
    if establishment.franchisee_id != franchisee_id:
        raise DisplayEstablishmentMismatchError(
            f"Establishment {establishment_id} does not belong to franchisee {franchisee_id}"
        )
    return establishment


def _lock_display(display_id: UUID) -> Display:
    try:
        return Display.objects.select_for_update().get(id=display_id)
    except Display.DoesNotExist:
        raise DisplayNotFoundError(f"Display with ID {display_id} not found")


def get_display(*, display_id: UUID, scope: ScopePredicate) -> Display:
    """
    Raises:
        DisplayNotFoundError: If display doesn't exist
        ScopeForbidden: If display is outside the caller's scope
    """
    try:
        display = Display.objects.select_related('franchisee', 'establishment').get(id=display_id)
    except Display.DoesNotExist:
        raise DisplayNotFoundError(f"Display with ID {display_id} not found")

    _require_display_scope(scope, display)
    return display


def list_displays(
    *,
    scope: ScopePredicate,
    status: Optional[str] = None,
    unit_type: Optional[str] = None,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
) -> QuerySet:
    queryset = scope.apply(
        Display.objects.select_related('franchisee', 'establishment'),
        franchisee_id=franchisee_id,
    )
    if status:
        queryset = queryset.filter(status=status)
    if unit_type:
        queryset = queryset.filter(unit_type=unit_type)
    if establishment_id:
        queryset = queryset.filter(establishment_id=establishment_id)
    return queryset


def summarize_displays(queryset: QuerySet) -> dict:
    """Count plus zero-filled per-status and per-unit-type counts."""
    by_status = {value: 0 for value in DisplayStatus.values}
    for row in queryset.order_by().values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    by_unit_type = {value: 0 for value in UnitType.values}
    for row in queryset.order_by().values('unit_type').annotate(count=Count('id')):
        by_unit_type[row['unit_type']] = row['count']

    return {
        'count': queryset.count(),
        'by_status': by_status,
        'by_unit_type': by_unit_type,
    }


@transaction.atomic
def create_display(
    *,
    actor,
    scope: ScopePredicate,
    unit_type: str = UnitType.COUNTER,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
    installed_at=None,
) -> Display:
    """
    Register a display unit.

    A unit created with an establishment starts INSTALLED (``installed_at``
    defaults to now); otherwise it starts AVAILABLE.

    Raises:
        ScopeForbidden: If called by an establishment or for another franchisee
        FranchiseeNotFoundError: If the franchisee doesn't exist
        DisplayEstablishmentMismatchError: If the establishment belongs elsewhere
    """
    scope.require_manager('Establishments cannot register displays.')

    if scope.is_franchisee:
        if franchisee_id and franchisee_id != scope.franchisee_id:
            raise ScopeForbidden("Franchisees can only register displays for themselves.")
        franchisee_id = scope.franchisee_id
    if franchisee_id is None:
        raise ValidationFailed("A franchisee is required to register a display")

    if not Franchisee.objects.filter(id=franchisee_id).exists():
        raise FranchiseeNotFoundError(f"Franchisee with ID {franchisee_id} not found")

    establishment = None
    if establishment_id:
        establishment = _resolve_establishment(establishment_id, franchisee_id)

    display = Display.objects.create(
        franchisee_id=franchisee_id,
        establishment=establishment,
        unit_type=unit_type,
        status=DisplayStatus.INSTALLED if establishment else DisplayStatus.AVAILABLE,
        installed_at=(installed_at or timezone.now()) if establishment else None,
    )
    record_audit(
        actor=actor,
        action=AuditAction.CREATE,
        entity='Display',
        entity_id=display.id,
        after=snapshot(display, DISPLAY_AUDIT_FIELDS),
    )
    return display


@transaction.atomic
def update_display(*, display_id: UUID, actor, scope: ScopePredicate, **changes) -> Display:
    """
    Update a display's status, type, binding or installation date.

    Without an explicit status, binding an establishment implies INSTALLED
    and clearing the binding implies AVAILABLE. Entering INSTALLED stamps
    ``installed_at`` unless one is supplied; AVAILABLE clears both the
    binding and ``installed_at``.

    Args:
        display_id: UUID of the display
        actor: User performing the update
        scope: Caller scope; establishments may change ``status`` only
        **changes: Any of status, unit_type, establishment_id, installed_at

    Returns:
        Updated Display instance

    Raises:
        DisplayNotFoundError: If display doesn't exist
        ScopeForbidden: If out of scope, or an establishment touches other fields
        ValidationFailed: If an unknown field is supplied
        DisplayNotInstallableError: If INSTALLED would have no establishment
        InvalidTransition: If the status is unreachable from the current one
    """
    unknown = set(changes) - DISPLAY_EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    display = _lock_display(display_id)
    _require_display_scope(scope, display)

    if scope.is_establishment and set(changes) - {'status'}:
        raise ScopeForbidden('Establishments can only change the status of a display.')

    before = snapshot(display, DISPLAY_AUDIT_FIELDS)

    target = changes.get('status')
    if 'establishment_id' in changes:
        establishment_id = changes['establishment_id']
        display.establishment = (
            _resolve_establishment(establishment_id, display.franchisee_id)
            if establishment_id else None
        )
        if target is None:
            target = DisplayStatus.INSTALLED if establishment_id else DisplayStatus.AVAILABLE

    if 'unit_type' in changes:
        display.unit_type = changes['unit_type']

    if target == DisplayStatus.INSTALLED and display.establishment_id is None:
        raise DisplayNotInstallableError(
            "A display cannot be INSTALLED without an establishment"
        )
    if target == DisplayStatus.AVAILABLE and changes.get('establishment_id'):
        raise ValidationFailed("An AVAILABLE display cannot be bound to an establishment")

    if target is not None:
        entering = target != display.status
        display.status = transition(display.status, target)
        if entering and target == DisplayStatus.INSTALLED and changes.get('installed_at') is None:
            display.installed_at = timezone.now()

    if changes.get('installed_at') is not None:
        display.installed_at = changes['installed_at']

    if display.status == DisplayStatus.AVAILABLE:
        display.establishment = None
        display.installed_at = None

    display.save()
    record_audit(
        actor=actor,
        action=AuditAction.STATUS_CHANGE if display.status != before['status'] else AuditAction.UPDATE,
        entity='Display',
        entity_id=display.id,
        before=before,
        after=snapshot(display, DISPLAY_AUDIT_FIELDS),
    )
    if display.status != before['status']:
        logger.info('Display %s moved from %s to %s', display.id, before['status'], display.status)
    return display


@transaction.atomic
def delete_display(*, display_id: UUID, actor, scope: ScopePredicate) -> None:
    """
    Delete a display that is back in stock.

    Raises:
        DisplayNotFoundError: If display doesn't exist
        ScopeForbidden: If caller is an establishment or display is out of scope
        DisplayDeployedError: If the display is INSTALLED or MAINTENANCE
    """
    scope.require_manager('Establishments cannot delete displays.')
    display = _lock_display(display_id)
    _require_display_scope(scope, display)

    if display.status in DEPLOYED_STATUSES:
        raise DisplayDeployedError(
            f"Display is {display.status}; return it to AVAILABLE before deleting"
        )

    before = snapshot(display, DISPLAY_AUDIT_FIELDS)
    display.delete()
    record_audit(
        actor=actor,
        action=AuditAction.DELETE,
        entity='Display',
        entity_id=display_id,
        before=before,
    )
    logger.info('Display %s deleted by %s', display_id, actor)
