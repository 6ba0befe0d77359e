from __future__ import annotations

from flask import Flask

from ..common.web import current_principal, json_body, login_required, ok, query_args
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.client_service

    @app.route("/api/v1/clients", methods=["GET"], endpoint="clients_list")
    @login_required
    def list_clients():
        return ok([c.to_dict() for c in service.list(principal=current_principal(), query=query_args())])

    @app.route("/api/v1/clients", methods=["POST"], endpoint="clients_create")
    @login_required
    def create_client():
        client = service.create(principal=current_principal(), data=json_body())
        return ok(client.to_dict(), status=201, message="Client created")

    @app.route("/api/v1/clients/<int:client_id>", methods=["GET"], endpoint="clients_get")
    @login_required
    def get_client(client_id: int):
        return ok(service.get(principal=current_principal(), client_id=client_id).to_dict())

    @app.route("/api/v1/clients/<int:client_id>", methods=["PUT", "PATCH"], endpoint="clients_update")
    @login_required
    def update_client(client_id: int):
        client = service.update(principal=current_principal(), client_id=client_id, data=json_body())
        return ok(client.to_dict(), message="Client updated")

    @app.route("/api/v1/clients/<int:client_id>/toggle", methods=["POST"], endpoint="clients_toggle")
    @login_required
    def toggle_client(client_id: int):
        client = service.toggle_active(principal=current_principal(), client_id=client_id)
        return ok(client.to_dict(), message="Client activated" if client.is_active else "Client deactivated")

    @app.route("/api/v1/clients/<int:client_id>", methods=["DELETE"], endpoint="clients_delete")
    @login_required
    def delete_client(client_id: int):
        service.delete(principal=current_principal(), client_id=client_id)
        return ok(None, message="Client deleted")
