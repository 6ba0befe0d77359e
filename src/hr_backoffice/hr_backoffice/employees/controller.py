from __future__ import annotations

from flask import Flask, request

from ..common.validators import optional_int
from ..common.web import current_principal, json_body, login_required, ok, query_args
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/v1/hr/employees", methods=["GET"], endpoint="employees_list")
    @login_required
    def list_employees():
        page = service.list(principal=current_principal(), query=query_args())
        return ok(page.to_dict(lambda e: e.to_dict()))

    @app.route("/api/v1/hr/employees", methods=["POST"], endpoint="employees_create")
    @login_required
    def create_employee():
        employee = service.create(principal=current_principal(), data=json_body())
        return ok(employee.to_dict(), status=201, message="Employee created")

    @app.route("/api/v1/hr/employees/stats", methods=["GET"], endpoint="employees_stats")
    @login_required
    def employee_stats():
        return ok(service.stats(principal=current_principal()))

    @app.route("/api/v1/hr/employees/managers", methods=["GET"], endpoint="employees_managers")
    @login_required
    def available_managers():
        managers = service.available_managers(
            principal=current_principal(), department_id=optional_int(request.args.get("department_id"))
        )
        return ok([m.to_dict() for m in managers])

    @app.route("/api/v1/hr/employees/<int:employee_id>", methods=["GET"], endpoint="employees_get")
    @login_required
    def get_employee(employee_id: int):
        return ok(service.get(principal=current_principal(), employee_id=employee_id).to_dict())

    @app.route("/api/v1/hr/employees/<int:employee_id>", methods=["PUT", "PATCH"], endpoint="employees_update")
    @login_required
    def update_employee(employee_id: int):
        employee = service.update(principal=current_principal(), employee_id=employee_id, data=json_body())
        return ok(employee.to_dict(), message="Employee updated")

    @app.route("/api/v1/hr/employees/<int:employee_id>", methods=["DELETE"], endpoint="employees_terminate")
    @login_required
    def terminate_employee(employee_id: int):
        employee = service.terminate(principal=current_principal(), employee_id=employee_id, data=json_body())
        return ok(employee.to_dict(), message="Employee terminated")

    @app.route("/api/v1/hr/employees/<int:employee_id>/status", methods=["POST"], endpoint="employees_status")
    @login_required
    def change_status(employee_id: int):
        employee = service.change_status(principal=current_principal(), employee_id=employee_id, data=json_body())
        return ok(employee.to_dict(), message="Status updated")

    @app.route("/api/v1/hr/employees/<int:employee_id>/status-history", methods=["GET"], endpoint="employees_history")
    @login_required
    def status_history(employee_id: int):
        history = service.status_history(principal=current_principal(), employee_id=employee_id)
        return ok([h.to_dict() for h in history])
