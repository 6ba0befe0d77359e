from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..auth.guards import require_permission
from ..auth.permissions import (
    DEPARTMENTS_CREATE,
    DEPARTMENTS_READ,
    DEPARTMENTS_READ_OWN,
    DEPARTMENTS_UPDATE,
    DEPARTMENTS_UPDATE_OWN,
)
from ..auth.policy import AccessContext, authorize
from ..auth.principal import Principal
from ..common.validators import optional_int, parse_input
from ..core.exceptions import NotFoundError
from .model import Department
from .position_model import Position
from .position_repository import PositionRepository
from .repository import DepartmentRepository
from .schemas import CreateDepartmentInput, CreatePositionInput, UpdateDepartmentInput, UpdatePositionInput

logger = logging.getLogger(__name__)


def _own_department(svc, kw) -> AccessContext:
    return AccessContext(department_id=kw["principal"].department_id)


def _department_arg(svc, kw) -> AccessContext:
    return AccessContext(department_id=optional_int(kw.get("department_id")))


class DepartmentService:
    """Use case: manage departments.

    ``departments:*:own`` only reaches the caller's own department.
    """

    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    @require_permission(DEPARTMENTS_CREATE)
    def create(self, *, principal: Principal, data: Mapping[str, Any]) -> Department:
        payload = parse_input(CreateDepartmentInput, data)
        department_id = self._departments.create_department(
            code=payload.code, name=payload.name, description=payload.description
        )
        logger.info("Department %s (%s) created by %s", department_id, payload.code, principal.id)
        return self._require(department_id)

    @require_permission(DEPARTMENTS_READ, DEPARTMENTS_READ_OWN, context=_own_department)
    def list(self, *, principal: Principal) -> Sequence[Department]:
        if authorize(principal, DEPARTMENTS_READ):
            return self._departments.list_all()
        department = self._departments.get_by_id(principal.department_id)
        return [department] if department else []

    @require_permission(DEPARTMENTS_READ, DEPARTMENTS_READ_OWN, context=_department_arg)
    def get(self, *, principal: Principal, department_id: int) -> Department:
        return self._require(department_id)

    @require_permission(DEPARTMENTS_UPDATE, DEPARTMENTS_UPDATE_OWN, context=_department_arg)
    def update(self, *, principal: Principal, department_id: int, data: Mapping[str, Any]) -> Department:
        self._require(department_id)
        payload = parse_input(UpdateDepartmentInput, data)
        values = payload.model_dump(exclude_unset=True)
        if values:
            self._departments.update_fields(int(department_id), values)
        return self._require(department_id)

    def _require(self, department_id: int) -> Department:
        department = self._departments.get_by_id(int(department_id))
        if not department:
            raise NotFoundError("Department not found")
        return department


def _position_department(svc: "PositionService", kw) -> AccessContext:
    return AccessContext(department_id=svc.department_of(kw.get("position_id")))


def _payload_department(svc, kw) -> AccessContext:
    return AccessContext(department_id=optional_int((kw.get("data") or {}).get("department_id")))


class PositionService:
    """Positions are guarded by the permissions of the department they belong to."""

    def __init__(self, positions: PositionRepository, departments: DepartmentRepository):
        self._positions = positions
        self._departments = departments

    def department_of(self, position_id: Any) -> Optional[int]:
        pid = optional_int(position_id)
        position = self._positions.get_by_id(pid) if pid is not None else None
        return position.department_id if position else None

    @require_permission(DEPARTMENTS_UPDATE, DEPARTMENTS_UPDATE_OWN, context=_payload_department)
    def create(self, *, principal: Principal, data: Mapping[str, Any]) -> Position:
        payload = parse_input(CreatePositionInput, data)
        if not self._departments.get_by_id(payload.department_id):
            raise NotFoundError("Department not found")
        position_id = self._positions.create_position(
            title=payload.title,
            code=payload.code,
            department_id=payload.department_id,
            description=payload.description,
            is_manager=payload.is_manager,
            is_medical=payload.is_medical,
        )
        logger.info("Position %s (%s) created by %s", position_id, payload.code, principal.id)
        return self._require(position_id)

    @require_permission(DEPARTMENTS_READ, DEPARTMENTS_READ_OWN, context=_own_department)
    def list(self, *, principal: Principal, department_id: Optional[int] = None) -> Sequence[Position]:
        if authorize(principal, DEPARTMENTS_READ):
            return self._positions.list_all(department_id=department_id)
        # Own scope: only the caller's department, whatever was asked for.
        if department_id is not None and int(department_id) != principal.department_id:
            return []
        return self._positions.list_all(department_id=principal.department_id)

    @require_permission(DEPARTMENTS_READ, DEPARTMENTS_READ_OWN, context=_position_department)
    def get(self, *, principal: Principal, position_id: int) -> Position:
        return self._require(position_id)

    @require_permission(DEPARTMENTS_UPDATE, DEPARTMENTS_UPDATE_OWN, context=_position_department)
    def update(self, *, principal: Principal, position_id: int, data: Mapping[str, Any]) -> Position:
        self._require(position_id)
        payload = parse_input(UpdatePositionInput, data)
        values = payload.model_dump(exclude_unset=True)
        if values:
            self._positions.update_fields(int(position_id), values)
        return self._require(position_id)

    def _require(self, position_id: int) -> Position:
        position = self._positions.get_by_id(int(position_id))
        if not position:
            raise NotFoundError("Position not found")
        return position
