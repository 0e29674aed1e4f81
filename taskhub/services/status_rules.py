# Rev 0.2.0

"""Task status rules (Rev 0.2.0)
Allow/deny checks for status changes, driven by an explicit transition table.

PERMISSIVE accepts any status after any other, which is how stored data has
always behaved. STRICT is opt-in: it walks new -> in-progress -> a closing
state and never accepts 'overdue' as a target, since overdue is derived from
the due date.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet, Mapping, Optional, Set, Tuple

from taskhub.models.types import TaskStatus

S = TaskStatus

_STRICT_TABLE: Mapping[TaskStatus, FrozenSet[TaskStatus]] = {
    S.NEW: frozenset({S.IN_PROGRESS, S.REJECTED, S.CLOSED}),
    S.IN_PROGRESS: frozenset({S.FEEDBACK, S.COMPLETED, S.RESOLVED, S.REJECTED, S.CLOSED, S.NEW}),
    S.FEEDBACK: frozenset({S.IN_PROGRESS, S.RESOLVED, S.REJECTED, S.CLOSED}),
    S.RESOLVED: frozenset({S.CLOSED, S.IN_PROGRESS}),
    S.COMPLETED: frozenset({S.CLOSED, S.IN_PROGRESS}),
    S.OVERDUE: frozenset({S.IN_PROGRESS, S.COMPLETED, S.RESOLVED, S.REJECTED, S.CLOSED}),
    S.REJECTED: frozenset({S.NEW}),
    S.CLOSED: frozenset(),
}


def parse_status(value: object) -> Optional[TaskStatus]:
    """Return the TaskStatus for a raw value, or None if it is not one."""
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(str(value))
    except ValueError:
        return None


@dataclass(frozen=True)
class StatusPolicy:
    name: str
    transitions: Optional[Mapping[TaskStatus, FrozenSet[TaskStatus]]]  # None = anything goes

    def is_allowed(self, current: TaskStatus, target: TaskStatus) -> bool:
        if current == target:
            return True
        if self.transitions is None:
            return True
        return target in self.transitions.get(current, frozenset())

    def is_valid_initial(self, status: TaskStatus) -> bool:
        if self.transitions is None:
            return True
        return any(status in targets for targets in self.transitions.values()) or status == S.NEW

    def allowed_transitions(self, current: TaskStatus) -> Set[TaskStatus]:
        if self.transitions is None:
            return {s for s in TaskStatus if s != current}
        return set(self.transitions.get(current, frozenset()))

    def can_change(self, current: object, target: object) -> Tuple[bool, str]:
        cur, tgt = parse_status(current), parse_status(target)
        if tgt is None:
            return False, f"unknown status {target!r}"
        if cur is None:
            return False, f"unknown status {current!r}"
        if not self.is_allowed(cur, tgt):
            return False, f"cannot move from {cur.value} to {tgt.value}"
        return True, "ok"


PERMISSIVE = StatusPolicy("permissive", None)
STRICT = StatusPolicy("strict", _STRICT_TABLE)

POLICIES: Dict[str, StatusPolicy] = {p.name: p for p in (PERMISSIVE, STRICT)}


def policy_named(name: str) -> StatusPolicy:
    return POLICIES[name]
