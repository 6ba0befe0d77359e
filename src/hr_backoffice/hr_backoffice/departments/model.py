from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none


@dataclass(frozen=True)
class Department:
    department_id: int
    code: str
    name: str
    description: Optional[str] = None
    employee_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.department_id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "employee_count": self.employee_count,
            "created_at": iso_or_none(self.created_at),
            "updated_at": iso_or_none(self.updated_at),
        }
