from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Client


class ClientRepository(Protocol):
    def get_by_id(self, client_id: int) -> Optional[Client]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Client]:
        raise NotImplementedError

    def list_all(self, *, search: Optional[str] = None, is_active: Optional[bool] = None) -> Sequence[Client]:
        raise NotImplementedError

    def create_client(self, *, values: Mapping[str, Any], created_by: Optional[int]) -> int:
        raise NotImplementedError

    def update_fields(self, client_id: int, values: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def set_active(self, client_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, client_id: int) -> bool:
        raise NotImplementedError

    def count_projects(self, client_id: int) -> int:
        raise NotImplementedError

    def set_password_hash(self, client_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def touch_last_login(self, client_id: int) -> None:
        raise NotImplementedError
