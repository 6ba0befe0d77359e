from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..auth.guards import require_permission
from ..auth.permissions import (
    ROLES_MANAGE,
    USERS_CREATE,
    USERS_DELETE,
    USERS_READ,
    USERS_READ_OWN,
    USERS_UPDATE,
    USERS_UPDATE_OWN,
)
from ..auth.policy import AccessContext, authorize
from ..auth.principal import Principal
from ..common.datetime_utils import today
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_int, parse_input
from ..core.constants import EMPLOYEE_NUMBER_MAX_ATTEMPTS
from ..core.enums import EmployeeStatus, Role, UserType
from ..core.exceptions import (
    AuthorizationError,
    ConcurrentUpdateError,
    ConflictError,
    NotFoundError,
    ReferenceNotFoundError,
)
from ..database.mysql_base import CONFLICT_MESSAGES
from ..departments.position_repository import PositionRepository
from ..departments.repository import DepartmentRepository
from .lifecycle import status_for_action, termination_date_for, transition
from .model import Employee, StatusChange
from .numbering import employee_number_prefix, next_employee_number
from .repository import EMPLOYEE_NUMBER_CONSTRAINT, EmployeeRepository
from .schemas import (
    CreateEmployeeInput,
    SearchEmployeesInput,
    StatusChangeInput,
    TerminateEmployeeInput,
    UpdateEmployeeInput,
)

logger = logging.getLogger(__name__)

EMAIL_CONSTRAINT = "uq_employees_email"

# What an employee may change on their own record.
SELF_SERVICE_FIELDS = frozenset({"phone", "address", "emergency_contact"})


def _target_employee(svc, kw) -> AccessContext:
    return AccessContext(target_user_id=optional_int(kw.get("employee_id")), target_user_type=UserType.EMPLOYEE)


class EmployeeService:
    """Use case: employee records, numbering and status lifecycle."""

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        positions: PositionRepository,
        *,
        max_number_attempts: int = EMPLOYEE_NUMBER_MAX_ATTEMPTS,
        clock: Callable = today,
    ):
        self._employees = employees
        self._departments = departments
        self._positions = positions
        self._max_number_attempts = max(int(max_number_attempts), 1)
        self._clock = clock

    @require_permission(USERS_CREATE)
    def create(self, *, principal: Principal, data: Mapping[str, Any]) -> Employee:
        payload = parse_input(CreateEmployeeInput, data)
        self._check_role_assignment(principal, payload.role)

        department = self._departments.get_by_id(payload.department_id)
        if not department:
            raise ReferenceNotFoundError("Department not found")
        self._check_references(position_id=payload.position_id, manager_id=payload.manager_id)

        # Advisory only: the unique key decides under concurrency.
        if self._employees.email_exists(payload.email):
            raise ConflictError(CONFLICT_MESSAGES[EMAIL_CONSTRAINT], constraint=EMAIL_CONSTRAINT)

        values = payload.model_dump(exclude={"password"})
        values["password_hash"] = generate_password_hash(payload.password) if payload.password else None

        year = self._clock().year
        prefix = employee_number_prefix(department.code, year)
        for attempt in range(1, self._max_number_attempts + 1):
            number = next_employee_number(department.code, year, self._employees.last_employee_number(prefix))
            try:
                employee_id = self._employees.create_employee(
                    employee_number=number, values=values, created_by=principal.id
                )
            except ConflictError as exc:
                if exc.constraint != EMPLOYEE_NUMBER_CONSTRAINT:
                    raise
                logger.warning(
                    "Employee number %s already taken (attempt %d/%d)", number, attempt, self._max_number_attempts
                )
                continue

            logger.info("Employee %s created as %s by %s", employee_id, number, principal.id)
            return self._require(employee_id)

        raise ConflictError(
            "Could not allocate an employee number, please retry", constraint=EMPLOYEE_NUMBER_CONSTRAINT
        )

    @require_permission(USERS_READ, USERS_READ_OWN, context=_target_employee)
    def get(self, *, principal: Principal, employee_id: int) -> Employee:
        return self._require(employee_id)

    @require_permission(USERS_READ)
    def list(self, *, principal: Principal, query: Optional[Mapping[str, Any]] = None) -> Page[Employee]:
        params = parse_input(SearchEmployeesInput, query)
        page = PageRequest.of(params.page, params.limit)
        filters = dict(
            search=params.search,
            department_id=params.department_id,
            position_id=params.position_id,
            status=params.status,
        )
        items = self._employees.search(limit=page.limit, offset=page.offset, **filters)
        total = self._employees.count(**filters)
        return Page(items=list(items), total=total, page=page.page, limit=page.limit)

    @require_permission(USERS_UPDATE, USERS_UPDATE_OWN, context=_target_employee)
    def update(self, *, principal: Principal, employee_id: int, data: Mapping[str, Any]) -> Employee:
        current = self._require(employee_id)
        payload = parse_input(UpdateEmployeeInput, data)
        values = payload.model_dump(exclude_unset=True)
        if not values:
            return current

        context = _target_employee(self, {"employee_id": employee_id})
        if not authorize(principal, USERS_UPDATE, context):
            forbidden = set(values) - SELF_SERVICE_FIELDS
            if forbidden:
                logger.warning(
                    "Employee %s tried to change protected fields %s", principal.id, ",".join(sorted(forbidden))
                )
                raise AuthorizationError()

        if "role" in values:
            self._check_role_assignment(principal, values["role"])
        if values.get("email") and self._employees.email_exists(values["email"], exclude_id=current.employee_id):
            raise ConflictError(CONFLICT_MESSAGES[EMAIL_CONSTRAINT], constraint=EMAIL_CONSTRAINT)
        if values.get("department_id") and not self._departments.get_by_id(values["department_id"]):
            raise ReferenceNotFoundError("Department not found")
        if values.get("manager_id") == current.employee_id:
            raise ReferenceNotFoundError("An employee cannot be their own manager")
        self._check_references(position_id=values.get("position_id"), manager_id=values.get("manager_id"))

        self._employees.update_fields(current.employee_id, values, updated_by=principal.id)
        return self._require(current.employee_id)

    @require_permission(USERS_UPDATE)
    def change_status(self, *, principal: Principal, employee_id: int, data: Mapping[str, Any]) -> Employee:
        payload = parse_input(StatusChangeInput, data)
        current = self._require(employee_id)
        requested = payload.status or status_for_action(payload.action, current.status)
        return self._apply_status(
            principal,
            current,
            requested,
            effective_date=payload.effective_date,
            reason=payload.reason,
        )

    @require_permission(USERS_DELETE)
    def terminate(
        self, *, principal: Principal, employee_id: int, data: Optional[Mapping[str, Any]] = None
    ) -> Employee:
        """Soft delete: the record stays, its status becomes terminated."""
        payload = parse_input(TerminateEmployeeInput, data)
        current = self._require(employee_id)
        return self._apply_status(
            principal, current, EmployeeStatus.TERMINATED, effective_date=None, reason=payload.reason
        )

    @require_permission(USERS_READ, USERS_READ_OWN, context=_target_employee)
    def status_history(self, *, principal: Principal, employee_id: int) -> Sequence[StatusChange]:
        self._require(employee_id)
        return self._employees.list_status_history(int(employee_id))

    @require_permission(USERS_READ)
    def stats(self, *, principal: Principal) -> dict:
        counts = self._employees.count_by_status()
        by_status = {s.value: int(counts.get(s, 0)) for s in EmployeeStatus}
        return {"total": sum(by_status.values()), "by_status": by_status}

    @require_permission(USERS_READ)
    def available_managers(self, *, principal: Principal, department_id: Optional[int] = None) -> Sequence[Employee]:
        return self._employees.list_available_managers(department_id=department_id)

    def _apply_status(self, principal, current: Employee, requested, *, effective_date, reason) -> Employee:
        new_status = transition(current.status, requested)
        effective = effective_date or self._clock()
        ok = self._employees.change_status(
            employee_id=current.employee_id,
            expected_status=current.status,
            expected_version=current.version,
            new_status=new_status,
            termination_date=termination_date_for(new_status, effective),
            effective_date=effective,
            changed_by=principal.id,
            reason=reason,
        )
        if not ok:
            raise ConcurrentUpdateError()

        logger.info(
            "Employee %s status %s -> %s by %s",
            current.employee_id,
            current.status.value,
            new_status.value,
            principal.id,
        )
        return self._require(current.employee_id)

    def _check_role_assignment(self, principal: Principal, role: Role) -> None:
        if Role(role) == Role.ADMIN and not authorize(principal, ROLES_MANAGE):
            logger.warning("Principal %s tried to grant the admin role", principal.id)
            raise AuthorizationError()

    def _check_references(self, *, position_id: Optional[int], manager_id: Optional[int]) -> None:
        if position_id is not None and not self._positions.get_by_id(position_id):
            raise ReferenceNotFoundError("Position not found")
        if manager_id is not None and not self._employees.get_by_id(manager_id):
            raise ReferenceNotFoundError("Manager not found")

    def _require(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee
