from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none


@dataclass(frozen=True)
class Position:
    """A job title inside a department. ``is_manager`` positions feed the manager picker."""

    position_id: int
    title: str
    code: str
    department_id: Optional[int] = None
    description: Optional[str] = None
    is_manager: bool = False
    is_medical: bool = False
    created_at: Optional[datetime] = None

    department_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.position_id,
            "title": self.title,
            "code": self.code,
            "department_id": self.department_id,
            "department_name": self.department_name,
            "description": self.description,
            "is_manager": self.is_manager,
            "is_medical": self.is_medical,
            "created_at": iso_or_none(self.created_at),
        }
