"""
Card management service.

Creation, editing, deletion and administrative status changes of cards.
Balances are never touched here: funding and spending go through
``apps.ledger.services.LedgerProcessor``.
"""
import logging
from typing import Optional
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.accounts.scope import ScopePredicate
from apps.audit.models import AuditAction
from apps.audit.services import record_audit, snapshot
from apps.cards.models import Card, CardStatus
from apps.cards.state_machine import transition
from apps.core.exceptions import ScopeForbidden, ValidationFailed
from apps.franchises.models import Establishment, Franchisee
from apps.franchises.services.exceptions import (
    EstablishmentNotFoundError,
    FranchiseeNotFoundError,
)

from .exceptions import (
    CardHasTransactionsError,
    CardNotFoundError,
    DuplicateCardCodeError,
    EstablishmentMismatchError,
)

logger = logging.getLogger(__name__)

CARD_AUDIT_FIELDS = [
    'code', 'qr_code', 'balance', 'status', 'franchisee_id', 'establishment_id',
    'customer_reference', 'activated_at', 'used_at',
]
CARD_EDITABLE_FIELDS = {'code', 'qr_code', 'customer_reference', 'establishment_id'}


def _card_scope_check(scope: ScopePredicate, card: Card) -> None:
    scope.require(
        franchisee_id=card.franchisee_id,
        establishment_id=card.establishment_id,
        allow_unbound=True,
        message='This card is outside your scope.',
    )


def _resolve_establishment(establishment_id: UUID, franchisee_id: UUID) -> Establishment:
    try:
        establishment = Establishment.objects.get(id=establishment_id)
    except Establishment.DoesNotExist:
        raise EstablishmentNotFoundError(f"Establishment with ID {establishment_id} not found")
    if establishment.franchisee_id != franchisee_id:
        raise EstablishmentMismatchError(
            f"Establishment {establishment_id} does not belong to franchisee {franchisee_id}"
        )
    return establishment


def get_card(*, card_id: UUID, scope: ScopePredicate) -> Card:
    """
    Get a card visible to the caller.

    Establishments reach cards bound to them and unbound cards of their
    franchisee (cards they are about to recharge for the first time).

    Raises:
        CardNotFoundError: If card doesn't exist
        ScopeForbidden: If card is outside the caller's scope
    """
    try:
        card = Card.objects.select_related('franchisee', 'establishment').get(id=card_id)
    except Card.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")

    _card_scope_check(scope, card)
    return card


def list_cards(
    *,
    scope: ScopePredicate,
    status: Optional[str] = None,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
    search: Optional[str] = None,
) -> QuerySet:
    """List cards in scope, optionally filtered."""
    queryset = scope.apply(
        Card.objects.select_related('franchisee', 'establishment'),
        franchisee_id=franchisee_id,
    )
    if status:
        queryset = queryset.filter(status=status)
    if establishment_id:
        queryset = queryset.filter(establishment_id=establishment_id)
    if search:
        queryset = queryset.filter(
            Q(code__icontains=search) |
            Q(qr_code__icontains=search) |
            Q(customer_reference__icontains=search)
        )
    return queryset


@transaction.atomic
def create_card(
    *,
    actor,
    scope: ScopePredicate,
    code: str,
    franchisee_id: Optional[UUID] = None,
    establishment_id: Optional[UUID] = None,
    qr_code: str = '',
    customer_reference: str = '',
) -> Card:
    """
    Create an unfunded card.

    Cards always start AVAILABLE with a zero balance; stored value is only
    added by a recharge, so every unit of value has a transaction behind it.

    Args:
        actor: User creating the card
        scope: Caller scope (franchisor or franchisee)
        code: Human-readable unique code
        franchisee_id: Owning franchisee (forced to the caller's for franchisees)
        establishment_id: Optional establishment to bind the card to
        qr_code: Optional QR payload
        customer_reference: Optional end-customer reference

    Returns:
        Created Card instance

    Raises:
        ScopeForbidden: If called by an establishment or for another franchisee
        FranchiseeNotFoundError: If the franchisee doesn't exist
        EstablishmentMismatchError: If the establishment belongs elsewhere
        DuplicateCardCodeError: If the code is already taken
    """
    scope.require_manager('Establishments cannot create cards.')
    code = code.strip()
    if not code:
        raise ValidationFailed("Card code is required")

    if scope.is_franchisee:
        if franchisee_id and franchisee_id != scope.franchisee_id:
            raise ScopeForbidden("Franchisees can only create cards for themselves.")
        franchisee_id = scope.franchisee_id
    if franchisee_id is None:
        raise ValidationFailed("A franchisee is required to create a card")

    if not Franchisee.objects.filter(id=franchisee_id).exists():
        raise FranchiseeNotFoundError(f"Franchisee with ID {franchisee_id} not found")

    establishment = None
    if establishment_id:
        establishment = _resolve_establishment(establishment_id, franchisee_id)

    if Card.objects.filter(code=code).exists():
        raise DuplicateCardCodeError(f"A card with code {code} already exists")

    try:
        with transaction.atomic():
            card = Card.objects.create(
                code=code,
                qr_code=qr_code,
                franchisee_id=franchisee_id,
                establishment=establishment,
                customer_reference=customer_reference,
            )
    except IntegrityError:
        raise DuplicateCardCodeError(f"A card with code {code} already exists")

    record_audit(
        actor=actor,
        action=AuditAction.CREATE,
        entity='Card',
        entity_id=card.id,
        after=snapshot(card, CARD_AUDIT_FIELDS),
    )
    return card


@transaction.atomic
def update_card(*, card_id: UUID, actor, scope: ScopePredicate, **changes) -> Card:
    """
    Update descriptive card fields.

    Only code, QR payload, customer reference and establishment binding can
    change here; balance and status have their own operations.

    Raises:
        CardNotFoundError: If card doesn't exist
        ScopeForbidden: If caller is an establishment or card is out of scope
        ValidationFailed: If a non-editable field is supplied
        DuplicateCardCodeError: If the new code is taken
    """
    scope.require_manager('Establishments cannot edit cards.')
    try:
        card = Card.objects.select_for_update().get(id=card_id)
    except Card.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")
    _card_scope_check(scope, card)

    unknown = set(changes) - CARD_EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    before = snapshot(card, CARD_AUDIT_FIELDS)

    if 'code' in changes:
        code = changes['code'].strip()
        if not code:
            raise ValidationFailed("Card code is required")
        if Card.objects.filter(code=code).exclude(id=card.id).exists():
            raise DuplicateCardCodeError(f"A card with code {code} already exists")
        card.code = code
    if 'qr_code' in changes:
        card.qr_code = changes['qr_code']
    if 'customer_reference' in changes:
        card.customer_reference = changes['customer_reference']
    if 'establishment_id' in changes:
        establishment_id = changes['establishment_id']
        card.establishment = (
            _resolve_establishment(establishment_id, card.franchisee_id)
            if establishment_id else None
        )

    try:
        with transaction.atomic():
            card.save()
    except IntegrityError:
        raise DuplicateCardCodeError(f"A card with code {card.code} already exists")

    record_audit(
        actor=actor,
        action=AuditAction.UPDATE,
        entity='Card',
        entity_id=card.id,
        before=before,
        after=snapshot(card, CARD_AUDIT_FIELDS),
    )
    return card


@transaction.atomic
def delete_card(*, card_id: UUID, actor, scope: ScopePredicate) -> None:
    """
    Hard-delete a card that has no transactions.

    Raises:
        CardNotFoundError: If card doesn't exist
        ScopeForbidden: If caller is an establishment or card is out of scope
        CardHasTransactionsError: If any transaction references the card
    """
    scope.require_manager('Establishments cannot delete cards.')
    try:
        card = Card.objects.select_for_update().get(id=card_id)
    except Card.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")
    _card_scope_check(scope, card)

    if card.transactions.exists():
        raise CardHasTransactionsError(
            f"Card {card.code} has transactions and cannot be deleted"
        )

    before = snapshot(card, CARD_AUDIT_FIELDS)
    card.delete()
    record_audit(
        actor=actor,
        action=AuditAction.DELETE,
        entity='Card',
        entity_id=card_id,
        before=before,
    )
    logger.info('Card %s deleted by %s', card_id, actor)


def _change_status(*, card_id: UUID, target: str, actor, scope: ScopePredicate) -> Card:
    scope.require_manager('Establishments cannot change card status.')
    try:
        card = Card.objects.select_for_update().get(id=card_id)
    except Card.DoesNotExist:
        raise CardNotFoundError(f"Card with ID {card_id} not found")
    _card_scope_check(scope, card)

    before = snapshot(card, CARD_AUDIT_FIELDS)
    card.status = transition(card.status, target)
    update_fields = ['status', 'updated_at']
    if target == CardStatus.ACTIVE and card.activated_at is None:
        card.activated_at = timezone.now()
        update_fields.append('activated_at')
    card.save(update_fields=update_fields)

    record_audit(
        actor=actor,
        action=AuditAction.STATUS_CHANGE,
        entity='Card',
        entity_id=card.id,
        before=before,
        after=snapshot(card, CARD_AUDIT_FIELDS),
    )
    logger.info('Card %s moved from %s to %s', card.id, before['status'], card.status)
    return card


@transaction.atomic
def block_card(*, card_id: UUID, actor, scope: ScopePredicate) -> Card:
    """
    Suspend a card (BLOCKED). Balance is kept; no transaction is created.

    The EXPIRED override, which a block wrote in earlier versions of the
    platform, is expire_card.
    """
    return _change_status(card_id=card_id, target=CardStatus.BLOCKED, actor=actor, scope=scope)


@transaction.atomic
def expire_card(*, card_id: UUID, actor, scope: ScopePredicate) -> Card:
    """Suspend a card as EXPIRED. Balance is kept; no transaction is created."""
    return _change_status(card_id=card_id, target=CardStatus.EXPIRED, actor=actor, scope=scope)


@transaction.atomic
def activate_card(*, card_id: UUID, actor, scope: ScopePredicate) -> Card:
    """
    Administrative override back to ACTIVE, independent of balance.

    Lifts a block or expiry; no transaction is created.
    """
    return _change_status(card_id=card_id, target=CardStatus.ACTIVE, actor=actor, scope=scope)
