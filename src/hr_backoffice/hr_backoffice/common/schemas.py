from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.constants import MIN_PASSWORD_LENGTH

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def reject_null(value: Any) -> Any:
    """Before-validator for partial updates: a field may be left out but not cleared."""
    if value is None:
        raise ValueError("may be omitted but cannot be null")
    return value


class InputSchema(BaseModel):
    """Base for request payloads: trims strings and rejects unknown fields.

    Passwords are trimmed too, the same way at creation and at login.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class QuerySchema(InputSchema):
    """Query-string filters: unknown parameters are ignored rather than rejected."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class LoginInput(InputSchema):
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=1)
    remember: bool = False

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class ChangePasswordInput(InputSchema):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)
