from __future__ import annotations

from flask import Flask

from ..common.web import current_principal, json_body, login_required, ok, query_args
from ..container import Container


def register(app: Flask, container: Container) -> None:
    workspaces = container.workspace_service
    messages = container.message_service

    @app.route("/api/v1/workspaces", methods=["GET"], endpoint="workspaces_mine")
    @login_required
    def my_workspaces():
        return ok([w.to_dict() for w in workspaces.list_mine(principal=current_principal())])

    @app.route("/api/v1/workspaces", methods=["POST"], endpoint="workspaces_create")
    @login_required
    def create_workspace():
        workspace = workspaces.create(principal=current_principal(), data=json_body())
        return ok(workspace.to_dict(), status=201, message="Workspace created")

    @app.route("/api/v1/workspaces/<int:workspace_id>", methods=["GET"], endpoint="workspaces_get")
    @login_required
    def get_workspace(workspace_id: int):
        return ok(workspaces.get(principal=current_principal(), workspace_id=workspace_id).to_dict())

    @app.route("/api/v1/workspaces/<int:workspace_id>/members", methods=["GET"], endpoint="workspaces_members")
    @login_required
    def list_members(workspace_id: int):
        members = workspaces.members(principal=current_principal(), workspace_id=workspace_id)
        return ok([m.to_dict() for m in members])

    @app.route("/api/v1/workspaces/<int:workspace_id>/members", methods=["POST"], endpoint="workspaces_add_member")
    @login_required
    def add_member(workspace_id: int):
        member = workspaces.add_member(principal=current_principal(), workspace_id=workspace_id, data=json_body())
        return ok(member.to_dict(), status=201, message="Member added")

    @app.route(
        "/api/v1/workspaces/<int:workspace_id>/members/<int:member_id>",
        methods=["DELETE"],
        endpoint="workspaces_remove_member",
    )
    @login_required
    def remove_member(workspace_id: int, member_id: int):
        workspaces.remove_member(principal=current_principal(), workspace_id=workspace_id, member_id=member_id)
        return ok(None, message="Member removed")

    @app.route("/api/v1/workspaces/<int:workspace_id>/messages", methods=["GET"], endpoint="messages_list")
    @login_required
    def list_messages(workspace_id: int):
        items = messages.list(principal=current_principal(), workspace_id=workspace_id, query=query_args())
        return ok([m.to_dict() for m in items])

    @app.route("/api/v1/workspaces/<int:workspace_id>/messages", methods=["POST"], endpoint="messages_send")
    @login_required
    def send_message(workspace_id: int):
        message = messages.send(principal=current_principal(), workspace_id=workspace_id, data=json_body())
        return ok(message.to_dict(), status=201)

    @app.route("/api/v1/messages/<int:message_id>", methods=["PUT", "PATCH"], endpoint="messages_edit")
    @login_required
    def edit_message(message_id: int):
        message = messages.edit(principal=current_principal(), message_id=message_id, data=json_body())
        return ok(message.to_dict(), message="Message updated")

    @app.route("/api/v1/messages/<int:message_id>", methods=["DELETE"], endpoint="messages_delete")
    @login_required
    def delete_message(message_id: int):
        messages.delete(principal=current_principal(), message_id=message_id)
        return ok(None, message="Message deleted")

    @app.route("/api/v1/messages/<int:message_id>/replies", methods=["GET"], endpoint="messages_replies")
    @login_required
    def message_replies(message_id: int):
        return ok([m.to_dict() for m in messages.replies(principal=current_principal(), message_id=message_id)])
