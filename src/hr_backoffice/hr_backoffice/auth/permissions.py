"""Permission triples and the static role -> permission table."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from ..core.enums import Role

SCOPE_OWN = "own"
SCOPE_ASSIGNED = "assigned"
_SCOPES = {SCOPE_OWN, SCOPE_ASSIGNED}


@dataclass(frozen=True)
class Permission:
    resource: str
    action: str
    scope: Optional[str] = None

    def __post_init__(self):
        if self.scope is not None and self.scope not in _SCOPES:
            raise ValueError(f"Unknown permission scope: {self.scope!r}")

    @classmethod
    def parse(cls, name: str) -> "Permission":
        parts = name.split(":")
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Invalid permission name: {name!r}")
        return cls(parts[0], parts[1], parts[2] if len(parts) == 3 else None)

    @property
    def name(self) -> str:
        base = f"{self.resource}:{self.action}"
        return f"{base}:{self.scope}" if self.scope else base

    @property
    def is_own(self) -> bool:
        return self.scope == SCOPE_OWN

    @property
    def is_assigned(self) -> bool:
        return self.scope == SCOPE_ASSIGNED

    def __str__(self) -> str:
        return self.name


USERS_CREATE = Permission("users", "create")
USERS_READ = Permission("users", "read")
USERS_UPDATE = Permission("users", "update")
USERS_DELETE = Permission("users", "delete")
USERS_READ_OWN = Permission("users", "read", SCOPE_OWN)
USERS_UPDATE_OWN = Permission("users", "update", SCOPE_OWN)

DEPARTMENTS_CREATE = Permission("departments", "create")
DEPARTMENTS_READ = Permission("departments", "read")
DEPARTMENTS_UPDATE = Permission("departments", "update")
DEPARTMENTS_DELETE = Permission("departments", "delete")
DEPARTMENTS_READ_OWN = Permission("departments", "read", SCOPE_OWN)
DEPARTMENTS_UPDATE_OWN = Permission("departments", "update", SCOPE_OWN)

PROJECTS_CREATE = Permission("projects", "create")
PROJECTS_READ = Permission("projects", "read")
PROJECTS_UPDATE = Permission("projects", "update")
PROJECTS_DELETE = Permission("projects", "delete")
PROJECTS_READ_ASSIGNED = Permission("projects", "read", SCOPE_ASSIGNED)
PROJECTS_UPDATE_ASSIGNED = Permission("projects", "update", SCOPE_ASSIGNED)

WORKSPACES_CREATE = Permission("workspaces", "create")
WORKSPACES_READ = Permission("workspaces", "read")
WORKSPACES_UPDATE = Permission("workspaces", "update")
WORKSPACES_DELETE = Permission("workspaces", "delete")
WORKSPACES_ACCESS_ASSIGNED = Permission("workspaces", "access", SCOPE_ASSIGNED)

MESSAGES_SEND = Permission("messages", "send")
MESSAGES_READ = Permission("messages", "read")
MESSAGES_UPDATE_OWN = Permission("messages", "update", SCOPE_OWN)
MESSAGES_DELETE_OWN = Permission("messages", "delete", SCOPE_OWN)

SYSTEM_CONFIGURE = Permission("system", "configure")
ROLES_MANAGE = Permission("roles", "manage")
REPORTS_VIEW = Permission("reports", "view")

_BASE_TABLE = {
    Role.SUPER_ADMIN: {
        USERS_CREATE, USERS_READ, USERS_UPDATE, USERS_DELETE,
        DEPARTMENTS_CREATE, DEPARTMENTS_READ, DEPARTMENTS_UPDATE, DEPARTMENTS_DELETE,
        PROJECTS_CREATE, PROJECTS_READ, PROJECTS_UPDATE, PROJECTS_DELETE,
        WORKSPACES_CREATE, WORKSPACES_READ, WORKSPACES_UPDATE, WORKSPACES_DELETE,
        MESSAGES_SEND, MESSAGES_READ,
        SYSTEM_CONFIGURE, ROLES_MANAGE, REPORTS_VIEW,
    },
    Role.ADMIN: {
        USERS_CREATE, USERS_READ, USERS_UPDATE,
        DEPARTMENTS_CREATE, DEPARTMENTS_READ, DEPARTMENTS_UPDATE,
        PROJECTS_CREATE, PROJECTS_READ, PROJECTS_UPDATE,
        WORKSPACES_CREATE, WORKSPACES_READ, WORKSPACES_UPDATE,
        MESSAGES_SEND, MESSAGES_READ,
        REPORTS_VIEW,
    },
    Role.DEPT_MANAGER: {
        USERS_READ, USERS_UPDATE_OWN,
        DEPARTMENTS_READ_OWN, DEPARTMENTS_UPDATE_OWN,
        PROJECTS_READ_ASSIGNED, PROJECTS_UPDATE_ASSIGNED,
        WORKSPACES_ACCESS_ASSIGNED,
        MESSAGES_SEND, MESSAGES_READ,
    },
    Role.EMPLOYEE: {
        USERS_READ_OWN, USERS_UPDATE_OWN,
        DEPARTMENTS_READ_OWN,
        PROJECTS_READ_ASSIGNED,
        WORKSPACES_ACCESS_ASSIGNED,
        MESSAGES_SEND, MESSAGES_READ, MESSAGES_UPDATE_OWN, MESSAGES_DELETE_OWN,
    },
    Role.CLIENT: {
        USERS_READ_OWN, USERS_UPDATE_OWN,
        PROJECTS_READ_ASSIGNED,
        WORKSPACES_ACCESS_ASSIGNED,
        MESSAGES_SEND, MESSAGES_READ, MESSAGES_UPDATE_OWN, MESSAGES_DELETE_OWN,
    },
}


def _build_table() -> Mapping[Role, FrozenSet[Permission]]:
    missing = set(Role) - set(_BASE_TABLE)
    if missing:
        raise RuntimeError(f"Roles without a permission set: {sorted(r.value for r in missing)}")
    table = {role: frozenset(perms) for role, perms in _BASE_TABLE.items()}
    # super_admin holds everything any role holds; authorize() short-circuits anyway.
    table[Role.SUPER_ADMIN] = frozenset().union(*table.values())
    return MappingProxyType(table)


ROLE_PERMISSIONS: Mapping[Role, FrozenSet[Permission]] = _build_table()
ALL_PERMISSIONS: FrozenSet[Permission] = ROLE_PERMISSIONS[Role.SUPER_ADMIN]


def permissions_for(role: Role) -> FrozenSet[Permission]:
    return ROLE_PERMISSIONS.get(Role(role), frozenset())


def role_grants(role: Role, permission: Permission) -> bool:
    return permission in permissions_for(role)
