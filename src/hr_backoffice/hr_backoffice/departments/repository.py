from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Department


class DepartmentRepository(Protocol):
    def get_by_id(self, department_id: int) -> Optional[Department]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def create_department(self, *, code: str, name: str, description: Optional[str]) -> int:
        raise NotImplementedError

    def update_fields(self, department_id: int, values: Mapping[str, Any]) -> bool:
        raise NotImplementedError
