from __future__ import annotations

from flask import Flask, session

from ..common.web import SESSION_USER_ID, SESSION_USER_TYPE, current_principal, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        principal = container.auth_service.authenticate(data)

        session.clear()
        session.permanent = bool(data.get("remember"))
        session[SESSION_USER_ID] = principal.id
        session[SESSION_USER_TYPE] = principal.user_type.value
        return ok(principal.to_dict(), message="Signed in")

    @app.route("/api/v1/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(None, message="Signed out")

    @app.route("/api/v1/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(current_principal().to_dict())

    @app.route("/api/v1/auth/password", methods=["POST"], endpoint="change_password")
    @login_required
    def change_password():
        container.auth_service.change_password(principal=current_principal(), data=json_body())
        return ok(None, message="Password changed")
