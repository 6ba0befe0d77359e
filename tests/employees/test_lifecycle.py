from datetime import date

import pytest

from src.hr_backoffice.hr_backoffice.core.enums import EmployeeStatus
from src.hr_backoffice.hr_backoffice.core.exceptions import InvalidTransitionError
from src.hr_backoffice.hr_backoffice.employees.lifecycle import (
    TERMINAL_STATUSES,
    LifecycleAction,
    can_transition,
    is_terminal,
    status_for_action,
    termination_date_for,
    transition,
)

A = EmployeeStatus.ACTIVE
L = EmployeeStatus.ON_LEAVE
S = EmployeeStatus.SUSPENDED
T = EmployeeStatus.TERMINATED
R = EmployeeStatus.RETIRED

ALLOWED = {(A, L), (L, A), (A, S), (S, A), (A, T), (L, T), (S, T), (A, R)}


@pytest.mark.parametrize("current", list(EmployeeStatus))
@pytest.mark.parametrize("requested", list(EmployeeStatus))
def test_transition_table(current, requested):
    if (current, requested) in ALLOWED:
        assert transition(current, requested) == requested
        assert can_transition(current, requested)
    else:
        with pytest.raises(InvalidTransitionError):
            transition(current, requested)
        assert not can_transition(current, requested)


def test_terminal_statuses_have_no_way_out():
    assert TERMINAL_STATUSES == {T, R}
    assert is_terminal(T) and is_terminal("retired")
    assert not is_terminal(A)


def test_actions_map_to_target_statuses():
    assert status_for_action(LifecycleAction.APPROVE_LEAVE) == L
    assert status_for_action("suspend") == S
    assert status_for_action(LifecycleAction.END_LEAVE, L) == A
    assert status_for_action(LifecycleAction.REINSTATE, S) == A
    assert status_for_action(LifecycleAction.TERMINATE, L) == T
    assert status_for_action(LifecycleAction.RETIRE) == R


def test_end_leave_and_reinstate_check_their_source():
    with pytest.raises(InvalidTransitionError):
        status_for_action(LifecycleAction.END_LEAVE, S)
    with pytest.raises(InvalidTransitionError):
        status_for_action(LifecycleAction.REINSTATE, L)


def test_termination_date_only_for_terminated():
    day = date(2024, 6, 30)
    assert termination_date_for(T, day) == day
    for status in (A, L, S, R):
        assert termination_date_for(status, day) is None


def test_invalid_transition_message_names_both_statuses():
    with pytest.raises(InvalidTransitionError) as exc:
        transition(T, A)
    assert exc.value.message == "Transition terminated -> active is not allowed"
    assert exc.value.status_code == 409
