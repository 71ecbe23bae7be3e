"""
Explicit status workflows for request-like documents.

Each domain declares its status enum and a transition table; services call
``StatusWorkflow.check`` before every status write so that a terminal request
never moves again, whichever actor issues the write.
"""
from typing import Dict, Iterable, Optional

from .exceptions import InvalidTransition, ValidationError


class StatusWorkflow:
    """Transition table for one status vocabulary.

    ``transitions`` maps a status to the statuses reachable from it. Statuses
    without outgoing edges are terminal. ``aliases`` maps legacy labels onto
    canonical ones (e.g. ``Approved`` -> ``Accepted``).
    """

    def __init__(self, name: str, transitions: Dict[str, Iterable[str]], aliases: Optional[Dict[str, str]] = None):
        self.name = name
        self.transitions = {str(k): frozenset(str(v) for v in targets) for k, targets in transitions.items()}
        self.aliases = {str(k): str(v) for k, v in (aliases or {}).items()}
        states = set(self.transitions)
        for targets in self.transitions.values():
            states |= targets
        self.states = frozenset(states)

    def normalize(self, status) -> str:
        value = str(status or "").strip()
        value = self.aliases.get(value, value)
        if value not in self.states:
            raise ValidationError(f"Unknown {self.name} status: {status!r}")
        return value

    def allowed_targets(self, current) -> frozenset:
        return self.transitions.get(self.normalize(current), frozenset())

    def is_terminal(self, status) -> bool:
        return not self.allowed_targets(status)

    def check(self, current, target) -> str:
        """Return the canonical target status or raise InvalidTransition."""
        current_value = self.normalize(current)
        target_value = self.normalize(target)
        if self.is_terminal(current_value):
            raise InvalidTransition(
                f"{self.name.capitalize()} is already {current_value} and cannot change status"
            )
        if target_value not in self.transitions[current_value]:
            raise InvalidTransition(
                f"Cannot move {self.name} from {current_value} to {target_value}"
            )
        return target_value
