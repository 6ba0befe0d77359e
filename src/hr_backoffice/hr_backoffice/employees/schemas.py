from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..common.schemas import EMAIL_PATTERN, InputSchema, QuerySchema, reject_null
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MIN_PASSWORD_LENGTH
from ..core.enums import EmployeeStatus, Role
from .lifecycle import LifecycleAction

ASSIGNABLE_ROLES = frozenset({Role.EMPLOYEE, Role.DEPT_MANAGER, Role.ADMIN})


class AddressInput(InputSchema):
    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., pattern=r"^\d{5}$")
    country: str = Field("FR", min_length=2, max_length=2)

    @field_validator("country")
    @classmethod
    def _upper_country(cls, v: str) -> str:
        return v.upper()


class EmergencyContactInput(InputSchema):
    name: str = Field(..., min_length=2, max_length=150)
    relationship: str = Field(..., min_length=1, max_length=50)
    phone: str = Field(..., min_length=10, max_length=20)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)


class CreateEmployeeInput(InputSchema):
    first_name: str = Field(..., min_length=2, max_length=100)
    last_name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    phone: str = Field(..., min_length=10, max_length=20)
    date_of_birth: date

    address: AddressInput
    emergency_contact: EmergencyContactInput

    department_id: int = Field(..., gt=0)
    position_id: int = Field(..., gt=0)
    manager_id: Optional[int] = Field(None, gt=0)
    hire_date: date

    medical_license_number: Optional[str] = Field(None, max_length=50)
    license_expiry: Optional[date] = None

    role: Role = Role.EMPLOYEE
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH, max_length=128)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("role")
    @classmethod
    def _assignable_role(cls, v: Role) -> Role:
        if v not in ASSIGNABLE_ROLES:
            raise ValueError("role must be one of employee, dept_manager, admin")
        return v


class UpdateEmployeeInput(InputSchema):
    """Partial update. Number, status and termination date are not accepted here."""

    first_name: Optional[str] = Field(None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    phone: Optional[str] = Field(None, min_length=10, max_length=20)
    date_of_birth: Optional[date] = None
    address: Optional[AddressInput] = None
    emergency_contact: Optional[EmergencyContactInput] = None
    department_id: Optional[int] = Field(None, gt=0)
    position_id: Optional[int] = Field(None, gt=0)
    manager_id: Optional[int] = Field(None, gt=0)
    hire_date: Optional[date] = None
    medical_license_number: Optional[str] = Field(None, max_length=50)
    license_expiry: Optional[date] = None
    role: Optional[Role] = None

    # Columns that are NOT NULL or required at creation.
    @field_validator(
        "first_name", "last_name", "email", "phone", "date_of_birth", "address", "emergency_contact",
        "department_id", "position_id", "hire_date", "role",
        mode="before",
    )
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v

    @field_validator("role")
    @classmethod
    def _assignable_role(cls, v: Optional[Role]) -> Optional[Role]:
        if v is not None and v not in ASSIGNABLE_ROLES:
            raise ValueError("role must be one of employee, dept_manager, admin")
        return v


class SearchEmployeesInput(QuerySchema):
    search: Optional[str] = Field(None, max_length=100)
    department_id: Optional[int] = Field(None, gt=0)
    position_id: Optional[int] = Field(None, gt=0)
    status: Optional[EmployeeStatus] = None
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)


class TerminateEmployeeInput(InputSchema):
    reason: Optional[str] = Field(None, max_length=500)


class StatusChangeInput(InputSchema):
    """Either a target ``status`` or a lifecycle ``action``, not both."""

    status: Optional[EmployeeStatus] = None
    action: Optional[LifecycleAction] = None
    effective_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def _one_target(self) -> "StatusChangeInput":
        if (self.status is None) == (self.action is None):
            raise ValueError("provide exactly one of status or action")
        return self
