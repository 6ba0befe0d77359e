"""Employee status lifecycle.

    active <-> on_leave
    active <-> suspended
    active | on_leave | suspended -> terminated
    active -> retired

terminated and retired are terminal. Anything else is rejected and the record
keeps its status.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from ..core.enums import EmployeeStatus
from ..core.exceptions import InvalidTransitionError

ACTIVE = EmployeeStatus.ACTIVE
ON_LEAVE = EmployeeStatus.ON_LEAVE
SUSPENDED = EmployeeStatus.SUSPENDED
TERMINATED = EmployeeStatus.TERMINATED
RETIRED = EmployeeStatus.RETIRED

INITIAL_STATUS = ACTIVE
TERMINAL_STATUSES: FrozenSet[EmployeeStatus] = frozenset({TERMINATED, RETIRED})

TRANSITIONS: Mapping[EmployeeStatus, FrozenSet[EmployeeStatus]] = MappingProxyType(
    {
        ACTIVE: frozenset({ON_LEAVE, SUSPENDED, TERMINATED, RETIRED}),
        ON_LEAVE: frozenset({ACTIVE, TERMINATED}),
        SUSPENDED: frozenset({ACTIVE, TERMINATED}),
        TERMINATED: frozenset(),
        RETIRED: frozenset(),
    }
)


class LifecycleAction(str, Enum):
    """Business triggers, each landing on one target status."""

    APPROVE_LEAVE = "approve_leave"
    SUSPEND = "suspend"
    END_LEAVE = "end_leave"
    REINSTATE = "reinstate"
    TERMINATE = "terminate"
    RETIRE = "retire"


_ACTION_TARGETS = {
    LifecycleAction.APPROVE_LEAVE: ON_LEAVE,
    LifecycleAction.SUSPEND: SUSPENDED,
    LifecycleAction.END_LEAVE: ACTIVE,
    LifecycleAction.REINSTATE: ACTIVE,
    LifecycleAction.TERMINATE: TERMINATED,
    LifecycleAction.RETIRE: RETIRED,
}

# END_LEAVE and REINSTATE both land on ACTIVE; the source status tells them apart.
_ACTION_SOURCES = {
    LifecycleAction.END_LEAVE: frozenset({ON_LEAVE}),
    LifecycleAction.REINSTATE: frozenset({SUSPENDED}),
}


def allowed_transitions(current: EmployeeStatus) -> FrozenSet[EmployeeStatus]:
    return TRANSITIONS[EmployeeStatus(current)]


def can_transition(current: EmployeeStatus, requested: EmployeeStatus) -> bool:
    return EmployeeStatus(requested) in allowed_transitions(current)


def transition(current: EmployeeStatus, requested: EmployeeStatus) -> EmployeeStatus:
    """Return the new status or raise InvalidTransitionError."""

    current = EmployeeStatus(current)
    requested = EmployeeStatus(requested)
    if requested not in TRANSITIONS[current]:
        raise InvalidTransitionError(current, requested)
    return requested


def status_for_action(action: LifecycleAction, current: Optional[EmployeeStatus] = None) -> EmployeeStatus:
    action = LifecycleAction(action)
    sources = _ACTION_SOURCES.get(action)
    target = _ACTION_TARGETS[action]
    if current is not None and sources is not None and EmployeeStatus(current) not in sources:
        raise InvalidTransitionError(current, target)
    return target


def is_terminal(status: EmployeeStatus) -> bool:
    return EmployeeStatus(status) in TERMINAL_STATUSES


def termination_date_for(status: EmployeeStatus, effective_date: date) -> Optional[date]:
    """terminationDate is set iff the status is terminated."""

    return effective_date if EmployeeStatus(status) == TERMINATED else None
