"""Transition tables for the status fields of cards, requests, displays and commissions."""
from typing import Dict, FrozenSet, Iterable, Mapping

from .exceptions import InvalidTransition


class StateMachine:
    """
    Legal-transition table for one status enum.

    Usage:
        requests = StateMachine('card request', {
            RequestStatus.PENDING: {RequestStatus.APPROVED, RequestStatus.DENIED},
            ...
        })
        new_status = requests.transition(request.status, RequestStatus.APPROVED)
    """

    def __init__(self, entity: str, transitions: Mapping[str, Iterable[str]]):
        self.entity = entity
        self._transitions: Dict[str, FrozenSet[str]] = {
            source: frozenset(targets) for source, targets in transitions.items()
        }

    def targets(self, current) -> FrozenSet[str]:
        return self._transitions.get(current, frozenset())

    def can_transition(self, current, target) -> bool:
        return target in self.targets(current)

    def is_terminal(self, current) -> bool:
        return not self.targets(current)

    def transition(self, current, target):
        """
        Validate a move and return the target status.

        Raises:
            InvalidTransition: If target is not reachable from current
        """
        if not self.can_transition(current, target):
            raise InvalidTransition(current, target, entity=self.entity)
        return target
