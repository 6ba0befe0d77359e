from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from ..common.schemas import InputSchema, reject_null


class CreateDepartmentInput(InputSchema):
    code: str = Field(..., pattern=r"^[A-Za-z0-9]{2,10}$")
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator("code")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        return v.upper()


class UpdateDepartmentInput(InputSchema):
    """The code is part of every employee number and cannot change."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)

    @field_validator("name", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class CreatePositionInput(InputSchema):
    title: str = Field(..., min_length=2, max_length=150)
    code: str = Field(..., min_length=2, max_length=20)
    department_id: int = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=1000)
    is_manager: bool = False
    is_medical: bool = False

    @field_validator("code")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        return v.upper()


class UpdatePositionInput(InputSchema):
    title: Optional[str] = Field(None, min_length=2, max_length=150)
    description: Optional[str] = Field(None, max_length=1000)
    is_manager: Optional[bool] = None
    is_medical: Optional[bool] = None

    @field_validator("title", "is_manager", "is_medical", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)
