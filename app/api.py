"""FastAPI application that exposes the users resource."""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

import anyio
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .config import load_settings_from_env
from .database import Database
from .handlers import UserResource
from .responses import to_json_response

logger = logging.getLogger("usersapi.api")

API_PREFIXES = ("", "/api/v1")


def _trusted_proxy_hosts() -> list[str] | str:
    raw = os.getenv("USERS_API_TRUSTED_PROXIES")
    if not raw:
        return "*"
    hosts = [item.strip() for item in raw.split(",") if item.strip()]
    return hosts or "*"


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Return the request body as a JSON object, or an empty mapping.

    Empty, malformed and non-object bodies all read as ``{}`` so the
    validator reports the missing fields instead of the framework rejecting
    the request with its own error shape.
    """

    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.debug("Ignoring malformed JSON body on %s %s", request.method, request.url.path)
        return {}
    if not isinstance(payload, dict):
        return {}
    return payload


def get_resource(request: Request) -> UserResource:
    return request.app.state.resource


def build_users_router() -> APIRouter:
    router = APIRouter(prefix="/users", tags=["users"])

    @router.get("")
    async def list_users(resource: UserResource = Depends(get_resource)) -> JSONResponse:
        status_code, body = await anyio.to_thread.run_sync(resource.list_users)
        return to_json_response(status_code, body)

    @router.get("/{user_id}")
    async def read_user(user_id: str, resource: UserResource = Depends(get_resource)) -> JSONResponse:
        status_code, body = await anyio.to_thread.run_sync(resource.get_user, user_id)
        return to_json_response(status_code, body)

    @router.post("")
    async def create_user(
        body: Dict[str, Any] = Depends(read_json_body),
        resource: UserResource = Depends(get_resource),
    ) -> JSONResponse:
        status_code, payload = await anyio.to_thread.run_sync(resource.create_user, body)
        return to_json_response(status_code, payload)

    @router.put("/{user_id}")
    async def update_user(
        user_id: str,
        body: Dict[str, Any] = Depends(read_json_body),
        resource: UserResource = Depends(get_resource),
    ) -> JSONResponse:
        status_code, payload = await anyio.to_thread.run_sync(resource.update_user, user_id, body)
        return to_json_response(status_code, payload)

    @router.delete("/{user_id}")
    async def delete_user(user_id: str, resource: UserResource = Depends(get_resource)) -> JSONResponse:
        status_code, body = await anyio.to_thread.run_sync(resource.delete_user, user_id)
        return to_json_response(status_code, body)

    return router


def create_app(
    *,
    database: Database | None = None,
    initialize_database: bool = False,
) -> FastAPI:
    """Create the ASGI application serving the users resource.

    When ``database`` is omitted the settings for the active environment are
    loaded and their database is initialised. The ``seed`` setting is not
    applied here; only ``main.py init-db`` seeds, so starting the app never
    replaces stored rows.
    """

    if database is None:
        settings = load_settings_from_env()
        database = Database(settings.database_path)
        database.initialize()
    elif initialize_database:
        database.initialize()

    app = FastAPI(
        title="Users API",
        description="CRUD API for the users resource",
        version="1.0.0",
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=_trusted_proxy_hosts())
    app.state.database = database
    app.state.resource = UserResource(database)

    @app.get("/health")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    router = build_users_router()
    # Only the versioned copy is documented; the bare paths share its operation ids.
    for prefix in API_PREFIXES:
        app.include_router(router, prefix=prefix, include_in_schema=prefix == API_PREFIXES[-1])

    return app


__all__ = ["API_PREFIXES", "build_users_router", "create_app", "read_json_body"]
