from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..auth.guards import require_permission
from ..auth.permissions import USERS_CREATE, USERS_DELETE, USERS_READ, USERS_READ_OWN, USERS_UPDATE, USERS_UPDATE_OWN
from ..auth.policy import AccessContext
from ..auth.principal import Principal
from ..common.validators import optional_int, parse_input
from ..core.enums import UserType
from ..core.exceptions import ConflictError, NotFoundError, ReferenceNotFoundError
from ..database.mysql_base import CONFLICT_MESSAGES
from .model import Client
from .repository import ClientRepository
from .schemas import CreateClientInput, SearchClientsInput, UpdateClientInput

logger = logging.getLogger(__name__)

EMAIL_CONSTRAINT = "uq_clients_contact_email"


def _target_client(svc, kw) -> AccessContext:
    return AccessContext(target_user_id=optional_int(kw.get("client_id")), target_user_type=UserType.CLIENT)


class ClientService:
    """Use case: client accounts, managed by staff and partly by the client itself."""

    def __init__(self, clients: ClientRepository):
        self._clients = clients

    @require_permission(USERS_CREATE)
    def create(self, *, principal: Principal, data: Mapping[str, Any]) -> Client:
        payload = parse_input(CreateClientInput, data)
        if self._clients.get_by_email(payload.contact_email):
            raise ConflictError(CONFLICT_MESSAGES[EMAIL_CONSTRAINT], constraint=EMAIL_CONSTRAINT)

        values = payload.model_dump(exclude={"password"})
        values["password_hash"] = generate_password_hash(payload.password)
        client_id = self._clients.create_client(values=values, created_by=principal.id if principal.is_employee else None)
        logger.info("Client %s created by %s", client_id, principal.id)
        return self._require(client_id)

    @require_permission(USERS_READ)
    def list(self, *, principal: Principal, query: Optional[Mapping[str, Any]] = None) -> Sequence[Client]:
        params = parse_input(SearchClientsInput, query)
        return self._clients.list_all(search=params.search, is_active=params.is_active)

    @require_permission(USERS_READ, USERS_READ_OWN, context=_target_client)
    def get(self, *, principal: Principal, client_id: int) -> Client:
        return self._require(client_id)

    @require_permission(USERS_UPDATE, USERS_UPDATE_OWN, context=_target_client)
    def update(self, *, principal: Principal, client_id: int, data: Mapping[str, Any]) -> Client:
        self._require(client_id)
        payload = parse_input(UpdateClientInput, data)
        values = payload.model_dump(exclude_unset=True)
        if values:
            self._clients.update_fields(int(client_id), values)
        return self._require(client_id)

    @require_permission(USERS_UPDATE)
    def toggle_active(self, *, principal: Principal, client_id: int) -> Client:
        client = self._require(client_id)
        self._clients.set_active(client.client_id, is_active=not client.is_active)
        logger.info(
            "Client %s %s by %s", client.client_id, "deactivated" if client.is_active else "activated", principal.id
        )
        return self._require(client_id)

    @require_permission(USERS_DELETE)
    def delete(self, *, principal: Principal, client_id: int) -> None:
        client = self._require(client_id)
        projects = self._clients.count_projects(client.client_id)
        if projects:
            raise ReferenceNotFoundError(f"Client still has {projects} project(s) and cannot be deleted")
        self._clients.delete_by_id(client.client_id)
        logger.info("Client %s deleted by %s", client.client_id, principal.id)

    def _require(self, client_id: int) -> Client:
        client = self._clients.get_by_id(int(client_id))
        if not client:
            raise NotFoundError("Client not found")
        return client
