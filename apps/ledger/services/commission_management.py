"""
Commission management service.

Commissions are created only by the ledger processor, one per usage
transaction. Paying or cancelling them is a franchisor decision.
"""
import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction, IntegrityError
from django.db.models import Avg, Count, Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.scope import ScopePredicate
from apps.audit.models import AuditAction
from apps.audit.services import record_audit, snapshot
from apps.ledger.commission import CENT, calculate_commission, transition
from apps.ledger.models import Commission, CommissionStatus, Transaction

from .exceptions import CommissionNotFoundError, DuplicateCommissionError

logger = logging.getLogger(__name__)

COMMISSION_AUDIT_FIELDS = ['amount', 'rate', 'status', 'transaction_id', 'paid_at', 'cancelled_at']


def record_commission(
    *,
    txn: Transaction,
    franchisee,
    using: str = DEFAULT_DB_ALIAS,
) -> Commission:
    """
    Create the commission of a usage transaction.

    Snapshots the franchisee's current rate. Must be called inside the
    caller's atomic block; the inner savepoint keeps that block usable if
    the one-commission-per-transaction constraint fires.

    Raises:
        DuplicateCommissionError: If the transaction already has a commission
    """
    rate = franchisee.commission_rate
    try:
        with transaction.atomic(using=using):
            return Commission.objects.using(using).create(
                amount=calculate_commission(txn.amount, rate),
                rate=rate,
                status=CommissionStatus.PENDING,
                franchisee=franchisee,
                establishment_id=txn.establishment_id,
                transaction=txn,
            )
    except IntegrityError:
        raise DuplicateCommissionError(
            f"Transaction {txn.id} already has a commission"
        )


def get_commission(*, commission_id: UUID, scope: ScopePredicate) -> Commission:
    """
    Raises:
        CommissionNotFoundError: If commission doesn't exist
        ScopeForbidden: If commission is outside the caller's scope
    """
    try:
        commission = (
            Commission.objects
            .select_related('franchisee', 'establishment', 'transaction')
            .get(id=commission_id)
        )
    except Commission.DoesNotExist:
        raise CommissionNotFoundError(f"Commission with ID {commission_id} not found")

    scope.require(
        franchisee_id=commission.franchisee_id,
        establishment_id=commission.establishment_id,
        message='This commission is outside your scope.',
    )
    return commission


def list_commissions(
    *,
    scope: ScopePredicate,
    status: Optional[str] = None,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
    date_from=None,
    date_to=None,
) -> QuerySet:
    queryset = scope.apply(
        Commission.objects.select_related('franchisee', 'establishment', 'transaction'),
        franchisee_id=franchisee_id,
    )
    if status:
        queryset = queryset.filter(status=status)
    if establishment_id:
        queryset = queryset.filter(establishment_id=establishment_id)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)
    return queryset


def summarize_commissions(queryset: QuerySet) -> dict:
    """Count, pending/paid totals and average of a commission queryset."""
    totals = queryset.aggregate(
        count=Count('id'),
        pending_total=Sum('amount', filter=Q(status=CommissionStatus.PENDING)),
        paid_total=Sum('amount', filter=Q(status=CommissionStatus.PAID)),
        average=Avg('amount'),
    )
    zero = Decimal('0.00')
    return {
        'count': totals['count'],
        'pending_total': (totals['pending_total'] or zero).quantize(CENT),
        'paid_total': (totals['paid_total'] or zero).quantize(CENT),
        'average': Decimal(totals['average'] or 0).quantize(CENT),
    }


def _move_commission(*, commission_id: UUID, target: str, actor, scope: ScopePredicate) -> Commission:
    scope.require_franchisor('Only the franchisor can settle commissions.')
    try:
        commission = Commission.objects.select_for_update().get(id=commission_id)
    except Commission.DoesNotExist:
        raise CommissionNotFoundError(f"Commission with ID {commission_id} not found")

    before = snapshot(commission, COMMISSION_AUDIT_FIELDS)
    commission.status = transition(commission.status, target)
    if target == CommissionStatus.PAID:
        commission.paid_at = timezone.now()
    else:
        commission.cancelled_at = timezone.now()
    commission.save(update_fields=['status', 'paid_at', 'cancelled_at', 'updated_at'])

    record_audit(
        actor=actor,
        action=AuditAction.CANCEL if target == CommissionStatus.CANCELLED else AuditAction.STATUS_CHANGE,
        entity='Commission',
        entity_id=commission.id,
        before=before,
        after=snapshot(commission, COMMISSION_AUDIT_FIELDS),
    )
    logger.info('Commission %s moved to %s', commission.id, commission.status)
    return commission


@transaction.atomic
def pay_commission(*, commission_id: UUID, actor, scope: ScopePredicate) -> Commission:
    """
    Mark a pending commission as paid.

    Raises:
        ScopeForbidden: If caller is not the franchisor
        CommissionNotFoundError: If commission doesn't exist
        InvalidTransition: If commission is not PENDING
    """
    return _move_commission(
        commission_id=commission_id, target=CommissionStatus.PAID, actor=actor, scope=scope,
    )


@transaction.atomic
def cancel_commission(*, commission_id: UUID, actor, scope: ScopePredicate) -> Commission:
    """
    Cancel a pending commission. Paid commissions cannot be cancelled.

    Raises:
        ScopeForbidden: If caller is not the franchisor
        CommissionNotFoundError: If commission doesn't exist
        InvalidTransition: If commission is not PENDING
    """
    return _move_commission(
        commission_id=commission_id, target=CommissionStatus.CANCELLED, actor=actor, scope=scope,
    )
