from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: plain data object (no DB access). ``employee_number`` is assigned once
    at creation and never changes.
    """

    employee_id: int
    employee_number: str
    first_name: str
    last_name: str
    email: str
    hire_date: date
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    role: Role = Role.EMPLOYEE
    is_active: bool = True
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[dict[str, Any]] = None
    emergency_contact: Optional[dict[str, Any]] = None
    termination_date: Optional[date] = None
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    manager_id: Optional[int] = None
    medical_license_number: Optional[str] = None
    license_expiry: Optional[date] = None
    password_hash: Optional[str] = field(default=None, repr=False)
    last_login: Optional[datetime] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Joined, read-only
    department_name: Optional[str] = None
    department_code: Optional[str] = None
    position_title: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.employee_id,
            "employee_number": self.employee_number,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "date_of_birth": iso_or_none(self.date_of_birth),
            "address": self.address,
            "emergency_contact": self.emergency_contact,
            "hire_date": iso_or_none(self.hire_date),
            "termination_date": iso_or_none(self.termination_date),
            "status": self.status.value,
            "role": self.role.value,
            "is_active": self.is_active,
            "department": (
                {"id": self.department_id, "name": self.department_name, "code": self.department_code}
                if self.department_id is not None
                else None
            ),
            "position": (
                {"id": self.position_id, "title": self.position_title} if self.position_id is not None else None
            ),
            "manager_id": self.manager_id,
            "medical_license_number": self.medical_license_number,
            "license_expiry": iso_or_none(self.license_expiry),
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }


@dataclass(frozen=True)
class StatusChange:
    """One row of the employee status audit trail."""

    history_id: int
    employee_id: int
    from_status: EmployeeStatus
    to_status: EmployeeStatus
    effective_date: date
    changed_by: Optional[int]
    reason: Optional[str]
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.history_id,
            "employee_id": self.employee_id,
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "effective_date": iso_or_none(self.effective_date),
            "changed_by": self.changed_by,
            "reason": self.reason,
            "created_at": iso_or_none(self.created_at),
        }
