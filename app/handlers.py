"""Request handlers for the users resource."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple

from fastapi import status

from .database import GatewayResult
from .responses import map_to_response
from .validation import Invalid, OperationKind, Valid, validate

logger = logging.getLogger("usersapi.handlers")

HandlerResponse = Tuple[int, Dict[str, Any]]


class UserGateway(Protocol):
    def fetch_all(self) -> GatewayResult: ...

    def fetch_one(self, user_id: int) -> GatewayResult: ...

    def create(self, username: str, email: str) -> GatewayResult: ...

    def update(self, user_id: int, username: str, email: str) -> GatewayResult: ...

    def delete(self, user_id: int) -> GatewayResult: ...


class UserResource:
    """Validate, persist and map a single request for each CRUD verb.

    The gateway is only called once validation succeeds, and each method
    returns exactly one ``(status_code, body)`` pair.
    """

    def __init__(self, gateway: UserGateway) -> None:
        self._gateway = gateway

    def list_users(self) -> HandlerResponse:
        validation = validate(OperationKind.READ)
        return map_to_response(validation, self._gateway.fetch_all())

    def get_user(self, user_id: object) -> HandlerResponse:
        validation = validate(OperationKind.READ_ONE, {"id": user_id})
        if not isinstance(validation, Valid):
            return self._reject(OperationKind.READ_ONE, validation)
        return map_to_response(validation, self._gateway.fetch_one(validation.user_id))

    def create_user(self, body: Optional[Mapping[str, Any]]) -> HandlerResponse:
        validation = validate(OperationKind.CREATE, body_fields=body)
        if not isinstance(validation, Valid):
            return self._reject(OperationKind.CREATE, validation)
        payload = validation.payload
        outcome = self._gateway.create(payload.username, payload.email)
        return map_to_response(validation, outcome, status.HTTP_201_CREATED)

    def update_user(self, user_id: object, body: Optional[Mapping[str, Any]]) -> HandlerResponse:
        validation = validate(OperationKind.UPDATE, {"id": user_id}, body)
        if not isinstance(validation, Valid):
            return self._reject(OperationKind.UPDATE, validation)
        payload = validation.payload
        outcome = self._gateway.update(validation.user_id, payload.username, payload.email)
        return map_to_response(validation, outcome)

    def delete_user(self, user_id: object) -> HandlerResponse:
        validation = validate(OperationKind.DELETE, {"id": user_id})
        if not isinstance(validation, Valid):
            return self._reject(OperationKind.DELETE, validation)
        return map_to_response(validation, self._gateway.delete(validation.user_id))

    @staticmethod
    def _reject(kind: OperationKind, validation: Invalid) -> HandlerResponse:
        logger.debug("Rejected %s request with %d failure(s)", kind.value, len(validation.errors))
        return map_to_response(validation, None)


__all__ = ["HandlerResponse", "UserGateway", "UserResource"]
