"""
Card request lifecycle service.

Establishments open requests and may edit their notes; franchisees and the
franchisor drive the status through the request state machine.
"""
import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, QuerySet, Sum
from django.utils import timezone

from apps.accounts.scope import ScopePredicate
from apps.audit.models import AuditAction
from apps.audit.services import record_audit, snapshot
from apps.card_requests.models import CardRequest, RequestStatus
from apps.card_requests.state_machine import (
    DATE_FIELD_ORDER,
    DATE_FIELD_REACHED_IN,
    STATUS_DATE_FIELDS,
    transition,
)
from apps.core.exceptions import ScopeForbidden, ValidationFailed
from apps.franchises.models import Establishment
from apps.franchises.services.exceptions import EstablishmentNotFoundError

from .exceptions import (
    CardRequestNotFoundError,
    InvalidRequestDatesError,
    RequestNotCancellableError,
)

logger = logging.getLogger(__name__)

REQUEST_AUDIT_FIELDS = ['quantity', 'status', 'notes', 'approved_at', 'shipped_at', 'delivered_at']
MIN_QUANTITY = 1
MAX_QUANTITY = 1000


def _require_request_scope(scope: ScopePredicate, card_request: CardRequest) -> None:
    scope.require(
        franchisee_id=card_request.franchisee_id,
        establishment_id=card_request.establishment_id,
        message='This card request is outside your scope.',
    )


def _lock_request(request_id: UUID) -> CardRequest:
    try:
        return CardRequest.objects.select_for_update().get(id=request_id)
    except CardRequest.DoesNotExist:
        raise CardRequestNotFoundError(f"Card request with ID {request_id} not found")


def get_request(*, request_id: UUID, scope: ScopePredicate) -> CardRequest:
    """
    Raises:
        CardRequestNotFoundError: If request doesn't exist
        ScopeForbidden: If request is outside the caller's scope
    """
    try:
        card_request = (
            CardRequest.objects
            .select_related('establishment', 'franchisee')
            .get(id=request_id)
        )
    except CardRequest.DoesNotExist:
        raise CardRequestNotFoundError(f"Card request with ID {request_id} not found")

    _require_request_scope(scope, card_request)
    return card_request


def list_requests(
    *,
    scope: ScopePredicate,
    status: Optional[str] = None,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
) -> QuerySet:
    queryset = scope.apply(
        CardRequest.objects.select_related('establishment', 'franchisee'),
        franchisee_id=franchisee_id,
    )
    if status:
        queryset = queryset.filter(status=status)
    if establishment_id:
        queryset = queryset.filter(establishment_id=establishment_id)
    return queryset


def summarize_requests(queryset: QuerySet) -> dict:
    """
    Count, total quantity, per-status counts and the average number of days
    from creation to delivery (one decimal, None when nothing was delivered).
    """
    totals = queryset.aggregate(count=Count('id'), total_quantity=Sum('quantity'))

    by_status = {value: 0 for value in RequestStatus.values}
    for row in queryset.order_by().values('status').annotate(count=Count('id')):
        by_status[row['status']] = row['count']

    delivered = queryset.filter(
        status=RequestStatus.DELIVERED,
        delivered_at__isnull=False,
    ).values_list('created_at', 'delivered_at')
    durations = [
        (delivered_at - created_at).total_seconds() / 86400
        for created_at, delivered_at in delivered
    ]

    return {
        'count': totals['count'],
        'total_quantity': totals['total_quantity'] or 0,
        'by_status': by_status,
        'average_delivery_days': round(sum(durations) / len(durations), 1) if durations else None,
    }


@transaction.atomic
def create_request(
    *,
    actor,
    scope: ScopePredicate,
    quantity: int,
    establishment_id: Optional[UUID] = None,
    notes: str = '',
) -> CardRequest:
    """
    Open a PENDING card request for an establishment.

    Establishments always request for themselves; the owning franchisee is
    taken from the establishment.

    Raises:
        ValidationFailed: If quantity is outside 1..1000 or no establishment is given
        EstablishmentNotFoundError: If the establishment doesn't exist
        ScopeForbidden: If the establishment is outside the caller's scope
    """
    if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValidationFailed(f"Quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}")

    if scope.is_establishment:
        if establishment_id and establishment_id != scope.establishment_id:
            raise ScopeForbidden("Establishments can only request cards for themselves.")
        establishment_id = scope.establishment_id
    if establishment_id is None:
        raise ValidationFailed("An establishment is required for a card request")

    try:
        establishment = Establishment.objects.get(id=establishment_id)
    except Establishment.DoesNotExist:
        raise EstablishmentNotFoundError(f"Establishment with ID {establishment_id} not found")
    scope.require(
        franchisee_id=establishment.franchisee_id,
        establishment_id=establishment.id,
        message='This establishment is outside your scope.',
    )

    card_request = CardRequest.objects.create(
        establishment=establishment,
        franchisee_id=establishment.franchisee_id,
        quantity=quantity,
        notes=notes,
        requested_by=actor,
    )
    record_audit(
        actor=actor,
        action=AuditAction.CREATE,
        entity='CardRequest',
        entity_id=card_request.id,
        after=snapshot(card_request, REQUEST_AUDIT_FIELDS),
    )
    return card_request


@transaction.atomic
def update_request(
    *,
    request_id: UUID,
    actor,
    scope: ScopePredicate,
    status: Optional[str] = None,
    notes: Optional[str] = None,
    approved_at=None,
    shipped_at=None,
    delivered_at=None,
) -> CardRequest:
    """
    Update a card request's status, notes or stage dates.

    Entering a status stamps its date unless the caller supplies one. A date
    may only be given for a stage the request reaches with this update or
    has already reached, and dates must stay in forward order.

    Args:
        request_id: UUID of the request
        actor: User performing the update
        scope: Caller scope
        status: Target status (franchisee/franchisor only)
        notes: Free-text notes (any actor in scope)
        approved_at, shipped_at, delivered_at: Optional explicit stage dates

    Returns:
        Updated CardRequest instance

    Raises:
        CardRequestNotFoundError: If request doesn't exist
        ScopeForbidden: If out of scope, or an establishment touches status/dates
        InvalidTransition: If the status is unreachable from the current one
        InvalidRequestDatesError: If dates don't match reached stages or order
    """
    supplied_dates = {
        field: value
        for field, value in (
            ('approved_at', approved_at),
            ('shipped_at', shipped_at),
            ('delivered_at', delivered_at),
        )
        if value is not None
    }

    card_request = _lock_request(request_id)
    _require_request_scope(scope, card_request)

    if scope.is_establishment and (status is not None or supplied_dates):
        raise ScopeForbidden('Establishments can only edit the notes of a request.')

    before = snapshot(card_request, REQUEST_AUDIT_FIELDS)

    if status is not None:
        card_request.status = transition(card_request.status, status)
        date_field = STATUS_DATE_FIELDS.get(card_request.status)
        if date_field and date_field not in supplied_dates:
            setattr(card_request, date_field, timezone.now())

    for field, value in supplied_dates.items():
        if card_request.status not in DATE_FIELD_REACHED_IN[field]:
            raise InvalidRequestDatesError(
                f"{field} cannot be set while the request is {card_request.status}"
            )
        setattr(card_request, field, value)

    dates = [getattr(card_request, field) for field in DATE_FIELD_ORDER]
    present = [value for value in dates if value is not None]
    if present != sorted(present):
        raise InvalidRequestDatesError("Request dates must be in forward order")

    if notes is not None:
        card_request.notes = notes

    card_request.save()
    record_audit(
        actor=actor,
        action=AuditAction.STATUS_CHANGE if card_request.status != before['status'] else AuditAction.UPDATE,
        entity='CardRequest',
        entity_id=card_request.id,
        before=before,
        after=snapshot(card_request, REQUEST_AUDIT_FIELDS),
    )
    if card_request.status != before['status']:
        logger.info(
            'Card request %s moved from %s to %s',
            card_request.id, before['status'], card_request.status,
        )
    return card_request


@transaction.atomic
def cancel_request(*, request_id: UUID, actor, scope: ScopePredicate) -> CardRequest:
    """
    Cancel a pending request.

    Cancelling is a move to DENIED with a note naming who cancelled and when;
    the row is never deleted.

    Raises:
        CardRequestNotFoundError: If request doesn't exist
        ScopeForbidden: If request is outside the caller's scope
        RequestNotCancellableError: If request is no longer PENDING
    """
    card_request = _lock_request(request_id)
    _require_request_scope(scope, card_request)

    if card_request.status != RequestStatus.PENDING:
        raise RequestNotCancellableError(
            card_request.status, RequestStatus.DENIED,
            detail=f"Only pending requests can be cancelled, this one is {card_request.status}",
        )

    before = snapshot(card_request, REQUEST_AUDIT_FIELDS)
    now = timezone.now()
    card_request.status = transition(card_request.status, RequestStatus.DENIED)
    note = f"Cancelled by {actor.email} on {timezone.localtime(now):%Y-%m-%d %H:%M}"
    card_request.notes = f"{card_request.notes}\n{note}" if card_request.notes else note
    card_request.save(update_fields=['status', 'notes', 'updated_at'])

    record_audit(
        actor=actor,
        action=AuditAction.CANCEL,
        entity='CardRequest',
        entity_id=card_request.id,
        before=before,
        after=snapshot(card_request, REQUEST_AUDIT_FIELDS),
    )
    return card_request
