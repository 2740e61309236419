"""
Display unit lifecycle.

AVAILABLE -> INSTALLED -> MAINTENANCE, and back to AVAILABLE from either of
the latter. Nothing is terminal; a unit is only removed by deletion.
"""
from apps.core.state_machine import StateMachine

from .models import DisplayStatus

display_machine = StateMachine('display', {
    DisplayStatus.AVAILABLE: {DisplayStatus.INSTALLED},
    DisplayStatus.INSTALLED: {DisplayStatus.AVAILABLE, DisplayStatus.MAINTENANCE},
    DisplayStatus.MAINTENANCE: {DisplayStatus.INSTALLED, DisplayStatus.AVAILABLE},
})

# Units in these states are out in the field and cannot be deleted.
DEPLOYED_STATUSES = frozenset({DisplayStatus.INSTALLED, DisplayStatus.MAINTENANCE})


def transition(current: str, target: str) -> str:
    """Same-state moves are accepted as no-ops."""
    if current == target:
        return current
    return display_machine.transition(current, target)
