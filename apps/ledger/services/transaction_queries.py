"""
Read side of the ledger.

List and report queries are not isolated from concurrent writers and may
lag the latest committed state; balance checks never use them.
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db.models import Count, Q, QuerySet, Sum

from apps.accounts.scope import ScopePredicate
from apps.ledger.commission import CENT
from apps.ledger.models import Transaction, TransactionStatus

from .exceptions import TransactionNotFoundError

TRANSACTION_SCOPE = {
    'franchisee_lookup': 'card__franchisee_id',
    'establishment_lookup': 'establishment_id',
}


def get_transaction(*, transaction_id: UUID, scope: ScopePredicate) -> Transaction:
    """
    Raises:
        TransactionNotFoundError: If transaction doesn't exist
        ScopeForbidden: If transaction is outside the caller's scope
    """
    try:
        txn = (
            Transaction.objects
            .select_related('card', 'establishment', 'commission')
            .get(id=transaction_id)
        )
    except Transaction.DoesNotExist:
        raise TransactionNotFoundError(f"Transaction with ID {transaction_id} not found")

    scope.require(
        franchisee_id=txn.card.franchisee_id,
        establishment_id=txn.establishment_id,
        message='This transaction is outside your scope.',
    )
    return txn


def list_transactions(
    *,
    scope: ScopePredicate,
    kind: Optional[str] = None,
    status: Optional[str] = None,
    card_id: Optional[UUID] = None,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
    min_amount: Optional[Decimal] = None,
    max_amount: Optional[Decimal] = None,
    date_from=None,
    date_to=None,
    search: Optional[str] = None,
) -> QuerySet:
    """List transactions in scope, optionally filtered."""
    queryset = scope.apply(
        Transaction.objects.select_related('card', 'establishment', 'commission'),
        franchisee_id=franchisee_id,
        **TRANSACTION_SCOPE,
    )
    if kind:
        queryset = queryset.filter(kind=kind)
    if status:
        queryset = queryset.filter(status=status)
    if card_id:
        queryset = queryset.filter(card_id=card_id)
    if establishment_id:
        queryset = queryset.filter(establishment_id=establishment_id)
    if min_amount is not None:
        queryset = queryset.filter(amount__gte=min_amount)
    if max_amount is not None:
        queryset = queryset.filter(amount__lte=max_amount)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)
    if search:
        queryset = queryset.filter(
            Q(card__code__icontains=search) |
            Q(customer_name__icontains=search) |
            Q(customer_phone__icontains=search) |
            Q(receipt__icontains=search)
        )
    return queryset


def summarize_transactions(queryset: QuerySet) -> dict:
    """
    Aggregate a transaction queryset.

    Returns:
        {'count', 'volume', 'average', 'by_status': {STATUS: {'count', 'volume'}}}
        with every status present, zero-filled.
    """
    zero = Decimal('0.00')
    totals = queryset.aggregate(count=Count('id'), volume=Sum('amount'))
    count = totals['count']
    volume = (totals['volume'] or zero).quantize(CENT)

    by_status = {value: {'count': 0, 'volume': zero} for value in TransactionStatus.values}
    for row in queryset.order_by().values('status').annotate(count=Count('id'), volume=Sum('amount')):
        by_status[row['status']] = {
            'count': row['count'],
            'volume': (row['volume'] or zero).quantize(CENT),
        }

    return {
        'count': count,
        'volume': volume,
        'average': (volume / count).quantize(CENT) if count else zero,
        'by_status': by_status,
    }
