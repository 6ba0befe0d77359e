from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from ..common.schemas import EMAIL_PATTERN, InputSchema, QuerySchema, reject_null
from ..core.constants import MIN_PASSWORD_LENGTH


class ClientAddressInput(InputSchema):
    street: str = Field(..., min_length=1, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, min_length=2, max_length=2)


class CreateClientInput(InputSchema):
    company_name: str = Field(..., min_length=2, max_length=255)
    contact_email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    contact_person: str = Field(..., min_length=2, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=20)
    address: Optional[ClientAddressInput] = None
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)

    @field_validator("contact_email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class UpdateClientInput(InputSchema):
    """The login email is fixed once the account exists."""

    company_name: Optional[str] = Field(None, min_length=2, max_length=255)
    contact_person: Optional[str] = Field(None, min_length=2, max_length=255)
    contact_phone: Optional[str] = Field(None, max_length=20)
    address: Optional[ClientAddressInput] = None

    @field_validator("company_name", "contact_person", mode="before")
    @classmethod
    def _not_null(cls, v):
        return reject_null(v)


class SearchClientsInput(QuerySchema):
    search: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
