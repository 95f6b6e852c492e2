# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.middleware import ActorContextMiddleware
from src.config import get_settings
from src.context.actor_context import actor_scope, system_context
from src.database import SessionLocal
from src.exceptions import InternalFailureError, PortalError
from src.logging_config import configure_logging
from src.rbac.gate import AuthorizationGate
from src.rbac.permissions import build_default_catalog
from src.services import rbac_seed_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    settings = get_settings()
    configure_logging(settings)

    catalog = build_default_catalog()
    app.state.catalog = catalog
    app.state.gate = AuthorizationGate(settings.super_admin_role_code)
    logger.info(f"Permission catalog ready with {len(catalog)} codes")

    if settings.seed_on_startup:
        db = SessionLocal()
        try:
            with actor_scope(system_context()):
                rbac_seed_service.seed_rbac_data(db, catalog)
            logger.info("RBAC seed data verified")
        except Exception as e:
            logger.error(f"Error seeding RBAC data: {e}")
        finally:
            db.close()

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title="Recruitment Portal Core",
    description="Authorization, audit attribution and application status workflow",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(ActorContextMiddleware)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Render domain errors as ``{"success": false, "kind": ..., "message": ...}``."""
    if isinstance(exc, InternalFailureError):
        logger.error(f"Internal failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include API router after it's created
from src.api.v1.router import api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")
