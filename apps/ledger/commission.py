"""
Commission arithmetic and lifecycle.

``calculate_commission`` is pure: the ledger processor passes it the usage
amount and the franchisee's current rate, and stores both the result and the
rate on the Commission row.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from apps.core.exceptions import ValidationFailed
from apps.core.state_machine import StateMachine

from .models import CommissionStatus

CENT = Decimal('0.01')

commission_machine = StateMachine('commission', {
    CommissionStatus.PENDING: {CommissionStatus.PAID, CommissionStatus.CANCELLED},
    CommissionStatus.PAID: set(),
    CommissionStatus.CANCELLED: set(),
})


def calculate_commission(amount, rate_percent) -> Decimal:
    """
    Commission owed on a usage: ``round(amount * rate / 100, 2)``, half up.

    >>> calculate_commission(Decimal('30.00'), Decimal('15'))
    Decimal('4.50')
    """
    try:
        amount = Decimal(str(amount))
        rate = Decimal(str(rate_percent))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed('Commission amount and rate must be numbers')
    if amount < 0:
        raise ValidationFailed('Commission base amount cannot be negative')
    if rate < 0 or rate > 100:
        raise ValidationFailed('Commission rate must be between 0 and 100')
    return (amount * rate / Decimal('100')).quantize(CENT, rounding=ROUND_HALF_UP)


def transition(current: str, target: str) -> str:
    """Return ``target`` if the commission may move there, else raise InvalidTransition."""
    return commission_machine.transition(current, target)
