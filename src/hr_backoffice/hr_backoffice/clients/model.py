from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none


@dataclass(frozen=True)
class Client:
    """External customer account. Logs in like an employee but owns projects instead."""

    client_id: int
    company_name: str
    contact_email: str
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[dict[str, Any]] = None
    is_active: bool = True
    password_hash: Optional[str] = field(default=None, repr=False)
    last_login: Optional[datetime] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.client_id,
            "company_name": self.company_name,
            "contact_email": self.contact_email,
            "contact_person": self.contact_person,
            "contact_phone": self.contact_phone,
            "address": self.address,
            "is_active": self.is_active,
            "last_login": iso_or_none(self.last_login),
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }
