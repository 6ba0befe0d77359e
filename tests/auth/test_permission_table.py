import pytest

from src.hr_backoffice.hr_backoffice.auth.permissions import (
    ALL_PERMISSIONS,
    DEPARTMENTS_READ_OWN,
    MESSAGES_DELETE_OWN,
    PROJECTS_READ_ASSIGNED,
    ROLE_PERMISSIONS,
    ROLES_MANAGE,
    USERS_DELETE,
    USERS_READ,
    Permission,
    permissions_for,
    role_grants,
)
from src.hr_backoffice.hr_backoffice.core.enums import Role


def test_every_role_has_a_permission_set():
    assert set(ROLE_PERMISSIONS) == set(Role)


def test_super_admin_is_a_superset_of_every_role():
    for role, perms in ROLE_PERMISSIONS.items():
        assert perms <= ROLE_PERMISSIONS[Role.SUPER_ADMIN], role
    assert ROLE_PERMISSIONS[Role.SUPER_ADMIN] == ALL_PERMISSIONS


def test_admin_cannot_delete_users_or_manage_roles():
    assert role_grants(Role.ADMIN, USERS_READ)
    assert not role_grants(Role.ADMIN, USERS_DELETE)
    assert not role_grants(Role.ADMIN, ROLES_MANAGE)


def test_scoped_grants_per_role():
    assert role_grants(Role.EMPLOYEE, DEPARTMENTS_READ_OWN)
    assert role_grants(Role.CLIENT, PROJECTS_READ_ASSIGNED)
    assert not role_grants(Role.CLIENT, DEPARTMENTS_READ_OWN)
    assert role_grants(Role.EMPLOYEE, MESSAGES_DELETE_OWN)
    assert not role_grants(Role.DEPT_MANAGER, MESSAGES_DELETE_OWN)


def test_table_cannot_be_mutated():
    with pytest.raises(TypeError):
        ROLE_PERMISSIONS[Role.CLIENT] = frozenset()  # type: ignore[index]
    assert isinstance(permissions_for(Role.EMPLOYEE), frozenset)


def test_permission_names_round_trip_through_parse():
    assert Permission.parse("users:read:own").name == "users:read:own"
    assert Permission.parse("projects:create") == Permission("projects", "create")
    assert str(PROJECTS_READ_ASSIGNED) == "projects:read:assigned"


@pytest.mark.parametrize("raw", ["users", "users::own", "a:b:c:d", "users:read:everyone"])
def test_malformed_permission_names_are_rejected(raw):
    with pytest.raises(ValueError):
        Permission.parse(raw)
