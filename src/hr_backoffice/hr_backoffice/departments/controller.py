from __future__ import annotations

from flask import Flask, request

from ..common.validators import optional_int
from ..common.web import current_principal, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    departments = container.department_service
    positions = container.position_service

    @app.route("/api/v1/hr/departments", methods=["GET"], endpoint="departments_list")
    @login_required
    def list_departments():
        return ok([d.to_dict() for d in departments.list(principal=current_principal())])

    @app.route("/api/v1/hr/departments", methods=["POST"], endpoint="departments_create")
    @login_required
    def create_department():
        department = departments.create(principal=current_principal(), data=json_body())
        return ok(department.to_dict(), status=201, message="Department created")

    @app.route("/api/v1/hr/departments/<int:department_id>", methods=["GET"], endpoint="departments_get")
    @login_required
    def get_department(department_id: int):
        return ok(departments.get(principal=current_principal(), department_id=department_id).to_dict())

    @app.route("/api/v1/hr/departments/<int:department_id>", methods=["PUT", "PATCH"], endpoint="departments_update")
    @login_required
    def update_department(department_id: int):
        department = departments.update(principal=current_principal(), department_id=department_id, data=json_body())
        return ok(department.to_dict(), message="Department updated")

    @app.route("/api/v1/hr/positions", methods=["GET"], endpoint="positions_list")
    @login_required
    def list_positions():
        items = positions.list(
            principal=current_principal(), department_id=optional_int(request.args.get("department_id"))
        )
        return ok([p.to_dict() for p in items])

    @app.route("/api/v1/hr/positions", methods=["POST"], endpoint="positions_create")
    @login_required
    def create_position():
        position = positions.create(principal=current_principal(), data=json_body())
        return ok(position.to_dict(), status=201, message="Position created")

    @app.route("/api/v1/hr/positions/<int:position_id>", methods=["GET"], endpoint="positions_get")
    @login_required
    def get_position(position_id: int):
        return ok(positions.get(principal=current_principal(), position_id=position_id).to_dict())

    @app.route("/api/v1/hr/positions/<int:position_id>", methods=["PUT", "PATCH"], endpoint="positions_update")
    @login_required
    def update_position(position_id: int):
        position = positions.update(principal=current_principal(), position_id=position_id, data=json_body())
        return ok(position.to_dict(), message="Position updated")
