from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..common.schemas import InputSchema, QuerySchema, reject_null
from ..core.enums import ProjectStatus


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must not be before start_date")


class CreateProjectInput(InputSchema):
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    client_id: int = Field(..., gt=0)
    department_id: int = Field(..., gt=0)
    manager_id: int = Field(..., gt=0)
    status: ProjectStatus = ProjectStatus.ACTIVE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

    @model_validator(mode="after")
    def _dates(self) -> "CreateProjectInput":
        _check_dates(self.start_date, self.end_date)
        return self


class UpdateProjectInput(InputSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    client_id: Optional[int] = Field(None, gt=0)
    department_id: Optional[int] = Field(None, gt=0)
    manager_id: Optional[int] = Field(None, gt=0)
    status: Optional[ProjectStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

    @field_validator("name", "client_id", "department_id", "manager_id", "status", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)

    @model_validator(mode="after")
    def _dates(self) -> "UpdateProjectInput":
        _check_dates(self.start_date, self.end_date)
        return self


class SearchProjectsInput(QuerySchema):
    status: Optional[ProjectStatus] = None
    search: Optional[str] = Field(None, max_length=100)
    department_id: Optional[int] = Field(None, gt=0)
    client_id: Optional[int] = Field(None, gt=0)
