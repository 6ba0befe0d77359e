from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..clients.model import Client
from ..clients.repository import ClientRepository
from ..common.schemas import ChangePasswordInput, LoginInput
from ..common.validators import parse_input
from ..core.enums import EmployeeStatus, UserType
from ..core.exceptions import AuthenticationError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .principal import Principal

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"

# Statuses that still allow signing in.
SIGN_IN_STATUSES = frozenset({EmployeeStatus.ACTIVE, EmployeeStatus.ON_LEAVE})


def _password_matches(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


def employee_principal(employee: Employee) -> Principal:
    return Principal.for_employee(
        employee_id=employee.employee_id,
        role=employee.role,
        department_id=employee.department_id,
        is_active=employee.is_active and employee.status in SIGN_IN_STATUSES,
        email=employee.email,
        display_name=employee.full_name,
    )


def client_principal(client: Client) -> Principal:
    return Principal.for_client(
        client_id=client.client_id,
        is_active=client.is_active,
        email=client.contact_email,
        display_name=client.company_name,
    )


class AuthService:
    """Use case: sign in with email and password.

    Employees are looked up first, then clients. Every failure gives the same
    message so callers cannot probe which emails exist.
    """

    def __init__(self, employees: EmployeeRepository, clients: ClientRepository):
        self._employees = employees
        self._clients = clients

    def authenticate(self, data: Mapping[str, Any]) -> Principal:
        payload = parse_input(LoginInput, data)

        employee = self._employees.get_by_email(payload.email)
        if employee is not None:
            principal = employee_principal(employee)
            if principal.is_active and _password_matches(employee.password_hash, payload.password):
                self._employees.touch_last_login(employee.employee_id)
                logger.info("Employee %s signed in", employee.employee_id)
                return principal
            logger.warning("Failed sign-in for employee %s", employee.employee_id)
            raise AuthenticationError(INVALID_CREDENTIALS)

        client = self._clients.get_by_email(payload.email)
        if client is not None and client.is_active and _password_matches(client.password_hash, payload.password):
            self._clients.touch_last_login(client.client_id)
            logger.info("Client %s signed in", client.client_id)
            return client_principal(client)

        logger.warning("Failed sign-in for %s", payload.email)
        raise AuthenticationError(INVALID_CREDENTIALS)

    def change_password(self, *, principal: Optional[Principal], data: Mapping[str, Any]) -> None:
        """Any signed-in principal may change its own password."""
        if principal is None:
            raise AuthenticationError("Authentication required")
        payload = parse_input(ChangePasswordInput, data)

        if principal.is_employee:
            account = self._employees.get_by_id(principal.id)
            store = self._employees
        else:
            account = self._clients.get_by_id(principal.id)
            store = self._clients
        if account is None:
            raise AuthenticationError("Authentication required")

        if not _password_matches(account.password_hash, payload.current_password):
            raise ValidationError(
                "Current password is incorrect",
                errors=[{"field": "current_password", "message": "Incorrect password", "code": "invalid"}],
            )
        if payload.new_password == payload.current_password:
            raise ValidationError(
                "New password must differ from the current one",
                errors=[{"field": "new_password", "message": "Same as current password", "code": "unchanged"}],
            )

        store.set_password_hash(principal.id, generate_password_hash(payload.new_password))
        logger.info("Password changed for %s:%s", principal.user_type.value, principal.id)


class IdentityService:
    """Turns the identity stored in the session into a fresh Principal."""

    def __init__(self, employees: EmployeeRepository, clients: ClientRepository):
        self._employees = employees
        self._clients = clients

    def resolve(self, *, user_id: Any, user_type: Any) -> Principal:
        try:
            uid = int(user_id)
            kind = UserType(user_type)
        except (TypeError, ValueError):
            raise AuthenticationError("Authentication required") from None

        if kind == UserType.EMPLOYEE:
            employee = self._employees.get_by_id(uid)
            principal = employee_principal(employee) if employee else None
        else:
            client = self._clients.get_by_id(uid)
            principal = client_principal(client) if client else None

        if principal is None or not principal.is_active:
            raise AuthenticationError("Account is disabled or no longer exists")
        return principal
