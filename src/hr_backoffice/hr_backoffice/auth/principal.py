from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, UserType


@dataclass(frozen=True)
class Principal:
    """Authenticated caller of an action: an employee or a client.

    Produced by IdentityService for one request and never mutated by the
    authorization code.
    """

    id: int
    role: Role
    user_type: UserType
    department_id: Optional[int] = None
    is_active: bool = True
    email: str = ""
    display_name: str = ""

    @classmethod
    def for_employee(
        cls,
        *,
        employee_id: int,
        role: Role,
        department_id: Optional[int],
        is_active: bool = True,
        email: str = "",
        display_name: str = "",
    ) -> "Principal":
        if role == Role.CLIENT:
            raise ValueError("An employee principal cannot carry the client role")
        return cls(
            id=int(employee_id),
            role=role,
            user_type=UserType.EMPLOYEE,
            department_id=department_id,
            is_active=is_active,
            email=email,
            display_name=display_name,
        )

    @classmethod
    def for_client(cls, *, client_id: int, is_active: bool = True, email: str = "", display_name: str = "") -> "Principal":
        return cls(
            id=int(client_id),
            role=Role.CLIENT,
            user_type=UserType.CLIENT,
            department_id=None,
            is_active=is_active,
            email=email,
            display_name=display_name,
        )

    @property
    def is_employee(self) -> bool:
        return self.user_type == UserType.EMPLOYEE

    @property
    def is_client(self) -> bool:
        return self.user_type == UserType.CLIENT

    def owns(self, user_id: Optional[int], user_type: Optional[UserType] = None) -> bool:
        if user_id is None or int(user_id) != self.id:
            return False
        return user_type is None or UserType(user_type) == self.user_type

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role.value,
            "user_type": self.user_type.value,
            "department_id": self.department_id,
            "email": self.email,
            "name": self.display_name,
        }
