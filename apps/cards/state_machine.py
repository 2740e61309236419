"""
Card status transitions.

AVAILABLE -> ACTIVE -> USED, with BLOCKED and EXPIRED reachable from any
state by administrative action. ACTIVE -> ACTIVE covers recharges and
partial usages; USED -> ACTIVE covers a recharge of a spent card.
"""
from apps.core.state_machine import StateMachine

from .models import CardStatus

SUSPENDED_STATUSES = frozenset({CardStatus.BLOCKED, CardStatus.EXPIRED})

card_machine = StateMachine('card', {
    CardStatus.AVAILABLE: {CardStatus.ACTIVE, CardStatus.BLOCKED, CardStatus.EXPIRED},
    CardStatus.ACTIVE: {CardStatus.ACTIVE, CardStatus.USED, CardStatus.BLOCKED, CardStatus.EXPIRED},
    CardStatus.USED: {CardStatus.ACTIVE, CardStatus.BLOCKED, CardStatus.EXPIRED},
    CardStatus.BLOCKED: {CardStatus.ACTIVE, CardStatus.EXPIRED},
    CardStatus.EXPIRED: {CardStatus.ACTIVE, CardStatus.BLOCKED},
})


def transition(current: str, target: str) -> str:
    """Return ``target`` if the card may move there, else raise InvalidTransition."""
    return card_machine.transition(current, target)
