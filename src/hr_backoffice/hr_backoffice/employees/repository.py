from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from .model import Employee, StatusChange

EMPLOYEE_NUMBER_CONSTRAINT = "uq_employees_employee_number"


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def email_exists(self, email: str, *, exclude_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def last_employee_number(self, prefix: str) -> Optional[str]:
        """Greatest existing number made of ``prefix`` plus the sequence digits.

        Numbers of a department whose code merely starts with the same
        characters (``AB`` vs ``AB2024``) are not part of the sequence.
        """
        raise NotImplementedError

    def create_employee(self, *, employee_number: str, values: Mapping[str, Any], created_by: Optional[int]) -> int:
        """Insert with status=active. Raises ConflictError on a unique key."""
        raise NotImplementedError

    def search(
        self,
        *,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
        status: Optional[EmployeeStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Employee]:
        raise NotImplementedError

    def count(
        self,
        *,
        search: Optional[str] = None,
        department_id: Optional[int] = None,
        position_id: Optional[int] = None,
        status: Optional[EmployeeStatus] = None,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, employee_id: int, values: Mapping[str, Any], *, updated_by: Optional[int]) -> bool:
        raise NotImplementedError

    def change_status(
        self,
        *,
        employee_id: int,
        expected_status: EmployeeStatus,
        expected_version: int,
        new_status: EmployeeStatus,
        termination_date: Optional[date],
        effective_date: date,
        changed_by: Optional[int],
        reason: Optional[str],
    ) -> bool:
        """Compare-and-set status + termination date and append history, atomically.

        Returns False when the row no longer matches ``expected_*``.
        """
        raise NotImplementedError

    def list_status_history(self, employee_id: int) -> Sequence[StatusChange]:
        raise NotImplementedError

    def count_by_status(self) -> Mapping[EmployeeStatus, int]:
        raise NotImplementedError

    def list_available_managers(self, *, department_id: Optional[int] = None) -> Sequence[Employee]:
        raise NotImplementedError

    def set_password_hash(self, employee_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_last_login(self, employee_id: int) -> None:
        raise NotImplementedError
