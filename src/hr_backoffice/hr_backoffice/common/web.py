"""Flask glue shared by the feature controllers.

Controllers stay thin: they read the request, call one service method with
the current principal, and wrap the result with ``ok``. Domain errors travel
up to the handlers registered here.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..auth.principal import Principal
from ..core.exceptions import AuthenticationError, DomainError

logger = logging.getLogger(__name__)

SESSION_USER_ID = "user_id"
SESSION_USER_TYPE = "user_type"


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def query_args() -> dict[str, Any]:
    return {k: v for k, v in request.args.items() if v != ""}


def ok(data: Any = None, status: int = 200, **extra: Any):
    body = {"success": True, "data": data}
    body.update(extra)
    return jsonify(body), status


def current_principal() -> Optional[Principal]:
    return g.get("principal")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_principal() is None:
            raise AuthenticationError("Authentication required")
        return view(*args, **kwargs)

    return wrapper


def install_principal_loader(app: Flask, identity) -> None:
    """Resolve the session into ``g.principal`` once per request."""

    @app.before_request
    def _load_principal():
        g.principal = None
        user_id = session.get(SESSION_USER_ID)
        user_type = session.get(SESSION_USER_TYPE)
        if user_id is None or user_type is None:
            return None
        try:
            g.principal = identity.resolve(user_id=user_id, user_type=user_type)
        except AuthenticationError:
            # Stale or disabled account: drop the session, the route decides.
            session.clear()
        return None


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        body = {"success": False, "error": exc.description or exc.name, "code": exc.name.upper().replace(" ", "_")}
        return jsonify(body), exc.code or 500

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        body = {"success": False, "error": "Internal error", "code": "INTERNAL_ERROR"}
        return jsonify(body), 500
