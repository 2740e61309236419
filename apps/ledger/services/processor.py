"""
Ledger processor.

The only code that changes card balances. Each recharge or usage is one
database transaction that:

1. locks the card row (``select_for_update``),
2. checks scope, card state and balance against the locked row,
3. updates the balance and status,
4. writes the Transaction and, for usages, its Commission,
5. writes the audit row.

Any failure rolls the whole unit back. Nothing outside the database is
called while the row lock is held.
"""
import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional
from uuid import UUID

from django.db import DEFAULT_DB_ALIAS, transaction
from django.utils import timezone

from apps.accounts.scope import ScopePredicate
from apps.audit.models import AuditAction
from apps.audit.services import record_audit, snapshot
from apps.cards.models import Card, CardStatus
from apps.cards.services.exceptions import (
    CardNotFoundError,
    CardSuspendedError,
    EstablishmentMismatchError,
)
from apps.cards.state_machine import transition
from apps.core.exceptions import InsufficientBalance, ScopeForbidden, ValidationFailed
from apps.franchises.models import Establishment, Franchisee
from apps.franchises.services.exceptions import EstablishmentNotFoundError
from apps.ledger.models import Commission, Transaction, TransactionKind, TransactionStatus

from .commission_management import record_commission
from .exceptions import CardBoundElsewhereError, InvalidAmountError

logger = logging.getLogger(__name__)

MAX_AMOUNT = Decimal('99999999.99')
CARD_LEDGER_FIELDS = ['balance', 'status', 'establishment_id', 'activated_at', 'used_at']
CARD_SAVE_FIELDS = ['balance', 'status', 'establishment', 'activated_at', 'used_at', 'updated_at']


@dataclass
class LedgerEntry:
    """Outcome of one ledger operation."""
    card: Card
    transaction: Transaction
    commission: Optional[Commission] = None


def validate_amount(amount) -> Decimal:
    """
    Parse a monetary amount.

    Raises:
        InvalidAmountError: Unless amount is a positive number with at most
            two decimal places
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid amount: {amount}")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Invalid amount: {amount}")
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError("Amount must be greater than zero")
    if value.as_tuple().exponent < -2:
        raise InvalidAmountError("Amount allows at most two decimal places")
    if value > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount cannot exceed {MAX_AMOUNT}")
    return value.quantize(Decimal('0.01'))


def generate_receipt(now) -> str:
    """Receipt reference such as ``RCPT-20260118-9F2C41AB``."""
    return f"RCPT-{now:%Y%m%d}-{secrets.token_hex(4).upper()}"


class LedgerProcessor:
    """
    Executes recharges and usages against cards.

    Args:
        using: Database alias that holds the unit of work
        clock: Callable returning the current aware datetime
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS, clock: Callable = timezone.now):
        self.using = using
        self.clock = clock

    def recharge(
        self,
        *,
        card_id: UUID,
        amount,
        actor,
        scope: ScopePredicate,
        establishment_id: Optional[UUID] = None,
    ) -> LedgerEntry:
        """
        Add stored value to a card.

        The card becomes ACTIVE; an unbound card is bound to the establishment
        where the recharge happens.

        Returns:
            LedgerEntry with the updated card and the RECHARGE transaction

        Raises:
            InvalidAmountError: If amount is not positive (before any store access)
                or would push the balance past MAX_AMOUNT
            CardNotFoundError / EstablishmentNotFoundError: If either is missing
            ScopeForbidden: If card or establishment is outside the scope
            CardSuspendedError: If the card is BLOCKED or EXPIRED
        """
        amount = validate_amount(amount)
        establishment_id = self._resolve_establishment_id(scope, establishment_id)

        with transaction.atomic(using=self.using):
            card, establishment = self._lock(card_id, establishment_id, scope)
            if card.is_suspended:
                raise CardSuspendedError(
                    card.status, CardStatus.ACTIVE,
                    detail=f"Card {card.code} is {card.status} and cannot be recharged",
                )

            if card.balance + amount > MAX_AMOUNT:
                raise InvalidAmountError(
                    f"Recharge would take card {card.code} above the {MAX_AMOUNT} balance limit"
                )

            before = snapshot(card, CARD_LEDGER_FIELDS)
            now = self.clock()
            card.status = transition(card.status, CardStatus.ACTIVE)
            card.balance += amount
            if card.activated_at is None:
                card.activated_at = now
            card.establishment_id = card.establishment_id or establishment.id
            card.save(using=self.using, update_fields=CARD_SAVE_FIELDS)

            txn = Transaction.objects.using(self.using).create(
                kind=TransactionKind.RECHARGE,
                amount=amount,
                status=TransactionStatus.COMPLETED,
                card=card,
                establishment=establishment,
                balance_after=card.balance,
                created_by=actor,
            )
            record_audit(
                actor=actor,
                action=AuditAction.RECHARGE,
                entity='Card',
                entity_id=card.id,
                before=before,
                after={**snapshot(card, CARD_LEDGER_FIELDS), 'transaction_id': str(txn.id)},
                using=self.using,
            )

        logger.info('Recharged card %s by %s, balance %s', card.id, amount, card.balance)
        return LedgerEntry(card=card, transaction=txn)

    def use(
        self,
        *,
        card_id: UUID,
        amount,
        actor,
        scope: ScopePredicate,
        establishment_id: Optional[UUID] = None,
        customer_name: str = '',
        customer_phone: str = '',
        receipt: str = '',
    ) -> LedgerEntry:
        """
        Spend stored value from a card and record the franchisee commission.

        The balance check runs against the locked row, so two concurrent
        usages of the same card are serialised and the second one sees the
        first one's debit. A card whose balance reaches zero becomes USED.

        Returns:
            LedgerEntry with the updated card, the USAGE transaction and its
            PENDING commission

        Raises:
            InvalidAmountError: If amount is not positive (before any store access)
            CardNotFoundError / EstablishmentNotFoundError: If either is missing
            ScopeForbidden: If card or establishment is outside the scope
            CardSuspendedError: If the card is BLOCKED or EXPIRED
            InsufficientBalance: If amount exceeds the card's balance
        """
        amount = validate_amount(amount)
        establishment_id = self._resolve_establishment_id(scope, establishment_id)

        with transaction.atomic(using=self.using):
            card, establishment = self._lock(card_id, establishment_id, scope)
            if card.is_suspended:
                raise CardSuspendedError(
                    card.status, CardStatus.USED,
                    detail=f"Card {card.code} is {card.status} and cannot be used",
                )
            if card.balance < amount:
                logger.info(
                    'Refused usage of %s on card %s, balance %s', amount, card.id, card.balance,
                )
                raise InsufficientBalance(available=card.balance, requested=amount)

            before = snapshot(card, CARD_LEDGER_FIELDS)
            now = self.clock()
            card.balance -= amount
            card.status = transition(
                card.status,
                CardStatus.USED if card.balance == 0 else CardStatus.ACTIVE,
            )
            if card.status == CardStatus.USED:
                card.used_at = now
            card.establishment_id = card.establishment_id or establishment.id
            card.save(using=self.using, update_fields=CARD_SAVE_FIELDS)

            txn = Transaction.objects.using(self.using).create(
                kind=TransactionKind.USAGE,
                amount=amount,
                status=TransactionStatus.COMPLETED,
                card=card,
                establishment=establishment,
                balance_after=card.balance,
                customer_name=customer_name,
                customer_phone=customer_phone,
                receipt=receipt or generate_receipt(now),
                created_by=actor,
            )
            franchisee = Franchisee.objects.using(self.using).get(id=card.franchisee_id)
            commission = record_commission(txn=txn, franchisee=franchisee, using=self.using)

            record_audit(
                actor=actor,
                action=AuditAction.USAGE,
                entity='Card',
                entity_id=card.id,
                before=before,
                after={
                    **snapshot(card, CARD_LEDGER_FIELDS),
                    'transaction_id': str(txn.id),
                    'commission_id': str(commission.id),
                },
                using=self.using,
            )

        logger.info(
            'Used %s from card %s, balance %s, commission %s',
            amount, card.id, card.balance, commission.amount,
        )
        return LedgerEntry(card=card, transaction=txn, commission=commission)

    def execute(self, *, kind: str, **kwargs) -> LedgerEntry:
        """Dispatch a transaction request to ``recharge`` or ``use``."""
        if kind == TransactionKind.RECHARGE:
            for field in ('customer_name', 'customer_phone', 'receipt'):
                kwargs.pop(field, None)
            return self.recharge(**kwargs)
        if kind == TransactionKind.USAGE:
            return self.use(**kwargs)
        raise ValidationFailed(f"Unknown transaction kind: {kind}")

    def _resolve_establishment_id(self, scope: ScopePredicate, establishment_id):
        if scope.is_establishment:
            if establishment_id and establishment_id != scope.establishment_id:
                raise ScopeForbidden("Establishments can only transact at their own location.")
            return scope.establishment_id
        if not establishment_id:
            raise ValidationFailed("An establishment is required for this operation")
        return establishment_id

    def _lock(self, card_id, establishment_id, scope: ScopePredicate):
        try:
            card = (
                Card.objects.using(self.using)
                .select_for_update()
                .get(id=card_id)
            )
        except Card.DoesNotExist:
            raise CardNotFoundError(f"Card with ID {card_id} not found")
        try:
            establishment = Establishment.objects.using(self.using).get(id=establishment_id)
        except Establishment.DoesNotExist:
            raise EstablishmentNotFoundError(f"Establishment with ID {establishment_id} not found")

        scope.require(
            franchisee_id=card.franchisee_id,
            establishment_id=card.establishment_id,
            allow_unbound=True,
            message='This card is outside your scope.',
        )
        scope.require(
            franchisee_id=establishment.franchisee_id,
            establishment_id=establishment.id,
            message='This establishment is outside your scope.',
        )
        if establishment.franchisee_id != card.franchisee_id:
            raise EstablishmentMismatchError(
                f"Establishment {establishment.id} does not belong to the card's franchisee"
            )
        if card.establishment_id and card.establishment_id != establishment.id:
            raise CardBoundElsewhereError(
                f"Card {card.code} is bound to another establishment"
            )
        return card, establishment
