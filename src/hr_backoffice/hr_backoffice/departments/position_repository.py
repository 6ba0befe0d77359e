from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .position_model import Position


class PositionRepository(Protocol):
    def get_by_id(self, position_id: int) -> Optional[Position]:
        raise NotImplementedError

    def list_all(self, *, department_id: Optional[int] = None) -> Sequence[Position]:
        raise NotImplementedError

    def create_position(
        self,
        *,
        title: str,
        code: str,
        department_id: int,
        description: Optional[str],
        is_manager: bool,
        is_medical: bool,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, position_id: int, values: Mapping[str, Any]) -> bool:
        raise NotImplementedError
