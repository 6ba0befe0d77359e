"""Permission guard applied uniformly to service operations.

Usage::

    class DepartmentService:
        @require_permission(DEPARTMENTS_UPDATE, DEPARTMENTS_UPDATE_OWN,
                            context=lambda svc, kw: AccessContext(department_id=kw["department_id"]))
        def update(self, *, principal, department_id, data):
            ...

The decorated method must receive ``principal`` as a keyword argument. Any one
of the listed permissions is enough. A service exposing ``_assignments`` (an
AssignmentLookup) gets ``assigned``-scoped permissions resolved lazily.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, Iterable, Optional

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .assignment import AssignmentLookup
from .permissions import Permission, role_grants
from .policy import EMPTY_CONTEXT, AccessContext, authorize_any
from .principal import Principal

logger = logging.getLogger(__name__)

ContextBuilder = Callable[[object, dict], AccessContext]


def check_access(
    principal: Optional[Principal],
    permissions: Iterable[Permission],
    context: AccessContext = EMPTY_CONTEXT,
    *,
    assignments: Optional[AssignmentLookup] = None,
) -> AccessContext:
    """Raise AuthorizationError unless one of ``permissions`` is allowed.

    Returns the context actually used (with ``assigned`` filled in when it was
    looked up) so callers can reuse the lookup result.
    """

    if principal is None:
        raise AuthenticationError("Authentication required")

    permissions = tuple(permissions)
    if not principal.is_active:
        logger.warning("Denied %s to inactive principal %s:%s", _names(permissions), principal.user_type.value, principal.id)
        raise AuthorizationError()

    if authorize_any(principal, permissions, context):
        return context

    if (
        assignments is not None
        and principal.role != Role.SUPER_ADMIN
        and context.assigned is None
        and context.has_assignment_target
        and any(p.is_assigned and role_grants(principal.role, p) for p in permissions)
    ):
        context = context.with_assignment(
            assignments.is_assigned(principal, project_id=context.project_id, workspace_id=context.workspace_id)
        )
        if authorize_any(principal, permissions, context):
            return context

    logger.warning(
        "Denied %s to %s:%s (role=%s)",
        _names(permissions),
        principal.user_type.value,
        principal.id,
        principal.role.value,
    )
    raise AuthorizationError()


def require_permission(*permissions: Permission, context: Optional[ContextBuilder] = None):
    if not permissions:
        raise ValueError("require_permission needs at least one permission")

    def decorator(method):
        @wraps(method)
        def wrapper(self, *args, **kwargs):
            principal = kwargs.get("principal")
            if principal is None:
                raise AuthenticationError("Authentication required")
            ctx = context(self, kwargs) if context is not None else EMPTY_CONTEXT
            check_access(principal, permissions, ctx, assignments=getattr(self, "_assignments", None))
            return method(self, *args, **kwargs)

        wrapper.required_permissions = permissions
        return wrapper

    return decorator


def _names(permissions: Iterable[Permission]) -> str:
    return "|".join(p.name for p in permissions)
