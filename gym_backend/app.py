"""
FastAPI application factory.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from gym_backend.config import Settings, get_settings
from gym_backend.dependencies import build_clients
from gym_backend.errors import register_error_handlers
from gym_backend.identity import IdentityProvider
from gym_backend.routes import router
from gym_backend.store import DocumentStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gym Admin Backend API"
VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[DocumentStore] = None,
    identity: Optional[IdentityProvider] = None,
) -> FastAPI:
    """
    Build the app with its clients attached to ``app.state``.

    Clients not passed in are built from settings; this raises
    CredentialsNotFoundError when Firebase credentials are required but missing.
    """
    settings = settings or get_settings()
    if store is None or identity is None:
        built_store, built_identity = build_clients(settings)
        if store is None:
            store = built_store
        if identity is None:
            identity = built_identity

    app = FastAPI(title=SERVICE_NAME, version=VERSION)
    app.state.settings = settings
    app.state.store = store
    app.state.identity = identity

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    register_error_handlers(app, include_stack_traces=settings.include_stack_traces)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/")
    def service_info():
        prefix = settings.api_prefix
        return {
            "success": True,
            "message": SERVICE_NAME,
            "version": VERSION,
            "endpoints": {
                "auth": f"{prefix}/auth",
                "organizations": f"{prefix}/organizations",
                "devices": f"{prefix}/devices",
                "gyms": f"{prefix}/organizations/:orgId/gyms",
            },
        }

    return app
