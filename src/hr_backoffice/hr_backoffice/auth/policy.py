"""Authorization decisions.

Everything here is a pure function of its inputs: no I/O, no caching, no
mutation. The only fact that needs the database (is the caller assigned to a
project/workspace?) is looked up by the caller and passed in as
``AccessContext.assigned``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..core.enums import Role, UserType
from .permissions import Permission, role_grants
from .principal import Principal

DEPARTMENT_RESOURCE = "departments"


@dataclass(frozen=True)
class AccessContext:
    target_user_id: Optional[int] = None
    target_user_type: Optional[UserType] = None
    department_id: Optional[int] = None
    project_id: Optional[int] = None
    workspace_id: Optional[int] = None
    assigned: Optional[bool] = None

    @property
    def has_assignment_target(self) -> bool:
        return self.project_id is not None or self.workspace_id is not None

    def with_assignment(self, assigned: bool) -> "AccessContext":
        return replace(self, assigned=bool(assigned))


EMPTY_CONTEXT = AccessContext()


def _owns_department(principal: Principal, context: AccessContext) -> bool:
    if principal.user_type != UserType.EMPLOYEE or principal.department_id is None:
        return False
    return context.department_id is not None and int(context.department_id) == int(principal.department_id)


def authorize(principal: Principal, permission: Permission, context: AccessContext = EMPTY_CONTEXT) -> bool:
    """Decide ALLOW (True) or DENY (False) for one permission.

    A missing permission is a plain DENY, never an error.
    """

    if principal.role == Role.SUPER_ADMIN:
        return True

    if not role_grants(principal.role, permission):
        return False

    if permission.is_own:
        if permission.resource == DEPARTMENT_RESOURCE:
            return _owns_department(principal, context)
        return principal.owns(context.target_user_id, context.target_user_type)

    if permission.is_assigned and context.has_assignment_target:
        return context.assigned is True

    return True


def authorize_any(principal: Principal, permissions: Iterable[Permission], context: AccessContext = EMPTY_CONTEXT) -> bool:
    return any(authorize(principal, p, context) for p in permissions)


def can_access_department(principal: Principal, department_id: int) -> bool:
    if principal.role in (Role.SUPER_ADMIN, Role.ADMIN):
        return True
    if principal.user_type == UserType.CLIENT:
        return False
    return principal.department_id is not None and int(principal.department_id) == int(department_id)


def can_manage_department(principal: Principal, department_id: int) -> bool:
    if principal.role in (Role.SUPER_ADMIN, Role.ADMIN):
        return True
    return (
        principal.role == Role.DEPT_MANAGER
        and principal.department_id is not None
        and int(principal.department_id) == int(department_id)
    )
