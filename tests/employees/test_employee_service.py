from dataclasses import replace
from datetime import date

import pytest
from werkzeug.security import check_password_hash

from src.hr_backoffice.hr_backoffice.core.enums import EmployeeStatus, Role
from src.hr_backoffice.hr_backoffice.core.exceptions import (
    AuthorizationError,
    ConcurrentUpdateError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ReferenceNotFoundError,
    SequenceExhaustedError,
    ValidationError,
)
from src.hr_backoffice.hr_backoffice.departments.model import Department
from src.hr_backoffice.hr_backoffice.departments.position_model import Position
from src.hr_backoffice.hr_backoffice.employees.service import EmployeeService
from tests.fakes import (
    ADMIN,
    SUPER_ADMIN,
    FakeDepartments,
    FakePositions,
    FakeEmployees,
    employee_principal,
    make_employee,
)

TODAY = date(2024, 3, 1)


def _service(*employees, attempts=5):
    repo = FakeEmployees(*employees)
    svc = EmployeeService(
        repo,
        FakeDepartments(Department(department_id=10, code="CARD", name="Cardiology")),
        FakePositions(Position(position_id=20, title="Nurse", code="CARD-NURSE", department_id=10)),
        max_number_attempts=attempts,
        clock=lambda: TODAY,
    )
    return svc, repo


def _payload(**overrides):
    data = {
        "first_name": "Marie",
        "last_name": "Curie",
        "email": "Marie.Curie@HR.test",
        "phone": "0601020304",
        "date_of_birth": "1990-05-01",
        "address": {"street": "1 rue de la Paix", "city": "Paris", "postal_code": "75001"},
        "emergency_contact": {"name": "Pierre Curie", "relationship": "spouse", "phone": "0605060708"},
        "department_id": 10,
        "position_id": 20,
        "hire_date": "2024-03-01",
        "password": "welcome123",
    }
    data.update(overrides)
    return data


def test_create_assigns_first_number_and_hashes_password():
    svc, repo = _service()
    emp = svc.create(principal=ADMIN, data=_payload())
    assert emp.employee_number == "CARD20240001"
    assert emp.email == "marie.curie@hr.test"
    assert emp.status == EmployeeStatus.ACTIVE
    assert emp.address["country"] == "FR"
    assert check_password_hash(emp.password_hash, "welcome123")


def test_create_continues_after_the_greatest_number():
    svc, repo = _service(make_employee(1, employee_number="CARD20240007"))
    assert svc.create(principal=ADMIN, data=_payload()).employee_number == "CARD20240008"


def test_create_ignores_numbers_of_a_longer_code_with_the_same_prefix():
    repo = FakeEmployees(
        make_employee(1, employee_number="AB20240003"),
        make_employee(2, employee_number="AB202420240001", department_id=11),
    )
    svc = EmployeeService(
        repo,
        FakeDepartments(
            Department(department_id=10, code="AB", name="Anesthesia"),
            Department(department_id=11, code="AB2024", name="Anesthesia annex"),
        ),
        FakePositions(Position(position_id=20, title="Nurse", code="AB-NURSE", department_id=10)),
        clock=lambda: TODAY,
    )
    assert svc.create(principal=ADMIN, data=_payload()).employee_number == "AB20240004"


def test_create_retries_when_a_number_is_taken_concurrently():
    svc, repo = _service()
    repo.stolen_numbers = ["CARD20240001", "CARD20240002"]
    emp = svc.create(principal=ADMIN, data=_payload())
    assert emp.employee_number == "CARD20240003"
    numbers = sorted(e.employee_number for e in repo.items.values())
    assert numbers == ["CARD20240001", "CARD20240002", "CARD20240003"]


def test_create_gives_up_after_max_attempts():
    svc, repo = _service(attempts=2)
    repo.stolen_numbers = ["CARD20240001", "CARD20240002"]
    with pytest.raises(ConflictError) as exc:
        svc.create(principal=ADMIN, data=_payload())
    assert exc.value.constraint == "uq_employees_employee_number"


def test_create_refuses_to_wrap_the_sequence():
    svc, repo = _service(make_employee(1, employee_number="CARD20249999"))
    with pytest.raises(SequenceExhaustedError):
        svc.create(principal=ADMIN, data=_payload())
    assert len(repo.items) == 1


def test_create_rejects_duplicate_email_and_bad_references():
    svc, repo = _service(make_employee(1, email="marie.curie@hr.test"))
    with pytest.raises(ConflictError):
        svc.create(principal=ADMIN, data=_payload())
    with pytest.raises(ReferenceNotFoundError):
        svc.create(principal=ADMIN, data=_payload(email="x@hr.test", department_id=99))
    with pytest.raises(ReferenceNotFoundError):
        svc.create(principal=ADMIN, data=_payload(email="x@hr.test", position_id=99))
    with pytest.raises(ReferenceNotFoundError):
        svc.create(principal=ADMIN, data=_payload(email="x@hr.test", manager_id=99))


def test_create_validates_input():
    svc, _ = _service()
    with pytest.raises(ValidationError) as exc:
        svc.create(principal=ADMIN, data=_payload(first_name="M", unknown="x"))
    fields = {e["field"] for e in exc.value.errors}
    assert {"first_name", "unknown"} <= fields
    with pytest.raises(ValidationError):
        svc.create(principal=ADMIN, data=_payload(role="super_admin"))


def test_only_role_managers_can_create_admins():
    svc, _ = _service()
    with pytest.raises(AuthorizationError):
        svc.create(principal=ADMIN, data=_payload(role="admin"))
    assert svc.create(principal=SUPER_ADMIN, data=_payload(role="admin")).role == Role.ADMIN


def test_plain_employees_cannot_create():
    svc, _ = _service()
    with pytest.raises(AuthorizationError):
        svc.create(principal=employee_principal(1), data=_payload())


def test_get_own_record_only():
    svc, _ = _service(make_employee(1), make_employee(2))
    assert svc.get(principal=employee_principal(1), employee_id=1).employee_id == 1
    with pytest.raises(AuthorizationError):
        svc.get(principal=employee_principal(1), employee_id=2)
    with pytest.raises(NotFoundError):
        svc.get(principal=ADMIN, employee_id=404)


def test_list_is_paginated_and_filtered():
    svc, _ = _service(*[make_employee(i, status=EmployeeStatus.ON_LEAVE if i % 2 else EmployeeStatus.ACTIVE)
                        for i in range(1, 6)])
    page = svc.list(principal=ADMIN, query={"page": "2", "limit": "2"})
    assert [e.employee_id for e in page.items] == [3, 4]
    assert page.total == 5 and page.pages == 3

    on_leave = svc.list(principal=ADMIN, query={"status": "on_leave", "sort": "ignored"})
    assert [e.employee_id for e in on_leave.items] == [1, 3, 5]


def test_self_service_update_is_limited_to_contact_fields():
    svc, repo = _service(make_employee(1))
    me = employee_principal(1)
    updated = svc.update(principal=me, employee_id=1, data={"phone": "0611223344"})
    assert updated.phone == "0611223344"
    assert updated.version == 2

    with pytest.raises(AuthorizationError):
        svc.update(principal=me, employee_id=1, data={"department_id": 10})
    with pytest.raises(AuthorizationError):
        svc.update(principal=me, employee_id=2, data={"phone": "0611223344"})


def test_update_rejects_status_and_number_changes():
    svc, _ = _service(make_employee(1))
    with pytest.raises(ValidationError):
        svc.update(principal=ADMIN, employee_id=1, data={"status": "terminated"})
    with pytest.raises(ValidationError):
        svc.update(principal=ADMIN, employee_id=1, data={"employee_number": "X"})


def test_update_checks_email_and_manager():
    svc, _ = _service(make_employee(1), make_employee(2, email="taken@hr.test"))
    with pytest.raises(ConflictError):
        svc.update(principal=ADMIN, employee_id=1, data={"email": "TAKEN@hr.test"})
    with pytest.raises(ReferenceNotFoundError):
        svc.update(principal=ADMIN, employee_id=1, data={"manager_id": 1})
    assert svc.update(principal=ADMIN, employee_id=1, data={"manager_id": 2}).manager_id == 2


@pytest.mark.parametrize("field", ["first_name", "email", "hire_date", "role", "department_id", "position_id"])
def test_update_cannot_null_required_fields(field):
    svc, repo = _service(make_employee(1))
    before = repo.items[1]
    with pytest.raises(ValidationError) as exc:
        svc.update(principal=ADMIN, employee_id=1, data={field: None})
    assert [e["field"] for e in exc.value.errors] == [field]
    assert repo.items[1] == before


def test_update_can_clear_optional_fields():
    svc, _ = _service(make_employee(1, manager_id=2, medical_license_number="RPPS-1"), make_employee(2))
    updated = svc.update(principal=ADMIN, employee_id=1, data={"manager_id": None, "medical_license_number": None})
    assert updated.manager_id is None
    assert updated.medical_license_number is None


def test_status_change_writes_history_and_termination_date():
    svc, repo = _service(make_employee(1))
    emp = svc.change_status(
        principal=ADMIN, employee_id=1, data={"status": "terminated", "effective_date": "2024-04-30", "reason": "end"}
    )
    assert emp.status == EmployeeStatus.TERMINATED
    assert emp.termination_date == date(2024, 4, 30)
    history = svc.status_history(principal=ADMIN, employee_id=1)
    assert [(h.from_status, h.to_status, h.reason) for h in history] == [
        (EmployeeStatus.ACTIVE, EmployeeStatus.TERMINATED, "end")
    ]


def test_status_actions_and_clock_default():
    svc, repo = _service(make_employee(1))
    assert svc.change_status(principal=ADMIN, employee_id=1, data={"action": "approve_leave"}).status == EmployeeStatus.ON_LEAVE
    emp = svc.change_status(principal=ADMIN, employee_id=1, data={"action": "end_leave"})
    assert emp.status == EmployeeStatus.ACTIVE
    assert emp.termination_date is None
    assert repo.history[-1].effective_date == TODAY


def test_invalid_transition_leaves_record_unchanged():
    svc, repo = _service(make_employee(1, status=EmployeeStatus.RETIRED))
    with pytest.raises(InvalidTransitionError):
        svc.change_status(principal=ADMIN, employee_id=1, data={"status": "active"})
    assert repo.get_by_id(1).status == EmployeeStatus.RETIRED
    assert repo.history == []

    with pytest.raises(ValidationError):
        svc.change_status(principal=ADMIN, employee_id=1, data={"status": "active", "action": "reinstate"})


def test_stale_version_is_a_concurrent_update():
    svc, repo = _service(make_employee(1))

    original_get = repo.get_by_id
    calls = {"n": 0}

    def get_then_race(employee_id):
        current = original_get(employee_id)
        calls["n"] += 1
        if calls["n"] == 1:
            # Another writer suspends the employee between our read and our write.
            repo.items[1] = replace(current, status=EmployeeStatus.SUSPENDED, version=current.version + 1)
        return current

    repo.get_by_id = get_then_race
    with pytest.raises(ConcurrentUpdateError):
        svc.change_status(principal=ADMIN, employee_id=1, data={"status": "on_leave"})
    assert repo.history == []


def test_terminate_needs_users_delete():
    svc, repo = _service(make_employee(1))
    with pytest.raises(AuthorizationError):
        svc.terminate(principal=ADMIN, employee_id=1)
    emp = svc.terminate(principal=SUPER_ADMIN, employee_id=1, data={"reason": "contract end"})
    assert emp.status == EmployeeStatus.TERMINATED
    assert emp.termination_date == TODAY
    assert 1 in repo.items
    assert repo.history[-1].reason == "contract end"


def test_terminate_validates_the_reason():
    svc, repo = _service(make_employee(1))
    with pytest.raises(ValidationError):
        svc.terminate(principal=SUPER_ADMIN, employee_id=1, data={"reason": "x" * 501})
    with pytest.raises(ValidationError):
        svc.terminate(principal=SUPER_ADMIN, employee_id=1, data={"reason": ["not", "text"]})
    assert repo.items[1].status == EmployeeStatus.ACTIVE
    assert repo.history == []


def test_stats_and_managers():
    svc, _ = _service(
        make_employee(1, role=Role.DEPT_MANAGER),
        make_employee(2, status=EmployeeStatus.SUSPENDED),
        make_employee(3, role=Role.DEPT_MANAGER, department_id=11),
    )
    stats = svc.stats(principal=ADMIN)
    assert stats["total"] == 3
    assert stats["by_status"]["active"] == 2
    assert stats["by_status"]["retired"] == 0
    assert [e.employee_id for e in svc.available_managers(principal=ADMIN, department_id=10)] == [1]
