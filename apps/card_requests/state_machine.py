"""
Card request lifecycle.

PENDING -> APPROVED -> SHIPPED -> DELIVERED, or PENDING -> DENIED.
DENIED and DELIVERED are terminal. Each forward status has a date field that
is stamped when the status is entered.
"""
from apps.core.state_machine import StateMachine

from .models import RequestStatus

request_machine = StateMachine('card request', {
    RequestStatus.PENDING: {RequestStatus.APPROVED, RequestStatus.DENIED},
    RequestStatus.APPROVED: {RequestStatus.SHIPPED},
    RequestStatus.SHIPPED: {RequestStatus.DELIVERED},
    RequestStatus.DENIED: set(),
    RequestStatus.DELIVERED: set(),
})

# Date field stamped on entering each status, in forward order.
STATUS_DATE_FIELDS = {
    RequestStatus.APPROVED: 'approved_at',
    RequestStatus.SHIPPED: 'shipped_at',
    RequestStatus.DELIVERED: 'delivered_at',
}
DATE_FIELD_ORDER = ['approved_at', 'shipped_at', 'delivered_at']

# Statuses in which each date field may hold a value.
DATE_FIELD_REACHED_IN = {
    'approved_at': {RequestStatus.APPROVED, RequestStatus.SHIPPED, RequestStatus.DELIVERED},
    'shipped_at': {RequestStatus.SHIPPED, RequestStatus.DELIVERED},
    'delivered_at': {RequestStatus.DELIVERED},
}


def transition(current: str, target: str) -> str:
    """Return ``target`` if the request may move there, else raise InvalidTransition."""
    return request_machine.transition(current, target)
