from __future__ import annotations

from flask import Flask

from ..common.web import current_principal, json_body, login_required, ok, query_args
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.project_service

    @app.route("/api/v1/projects", methods=["GET"], endpoint="projects_list")
    @login_required
    def list_projects():
        return ok([p.to_dict() for p in service.list(principal=current_principal(), query=query_args())])

    @app.route("/api/v1/projects", methods=["POST"], endpoint="projects_create")
    @login_required
    def create_project():
        project = service.create(principal=current_principal(), data=json_body())
        return ok(project.to_dict(), status=201, message="Project created")

    @app.route("/api/v1/projects/<int:project_id>", methods=["GET"], endpoint="projects_get")
    @login_required
    def get_project(project_id: int):
        return ok(service.get(principal=current_principal(), project_id=project_id).to_dict())

    @app.route("/api/v1/projects/<int:project_id>", methods=["PUT", "PATCH"], endpoint="projects_update")
    @login_required
    def update_project(project_id: int):
        project = service.update(principal=current_principal(), project_id=project_id, data=json_body())
        return ok(project.to_dict(), message="Project updated")

    @app.route("/api/v1/projects/<int:project_id>", methods=["DELETE"], endpoint="projects_delete")
    @login_required
    def delete_project(project_id: int):
        service.delete(principal=current_principal(), project_id=project_id)
        return ok(None, message="Project deleted")
