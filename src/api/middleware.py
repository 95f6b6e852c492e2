# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""ASGI middleware that establishes the actor context for each request."""

import logging

from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from src.context.actor_context import (
    ActorContext,
    actor_scope,
    context_for_actor,
    system_context,
)
from src.database import SessionLocal
from src.security import InvalidTokenError, decode_access_token, extract_bearer_token
from src.services import auth_service

logger = logging.getLogger(__name__)


def context_from_headers(headers: Headers, db: Session) -> ActorContext:
    """Authenticated context for a valid bearer token, else the system context.

    Tokens of accounts that are disabled, deleted or unknown fall back to the
    system context, so their id is never stamped onto rows.
    """
    token = extract_bearer_token(headers.get("authorization"))
    if token is None:
        return system_context()
    try:
        claims = decode_access_token(token)
    except InvalidTokenError as e:
        logger.debug(f"Ignoring invalid bearer token: {e}")
        return system_context()

    actor = auth_service.resolve_actor(db, claims)
    if actor is None:
        return system_context()
    return context_for_actor(actor)


class ActorContextMiddleware:
    """Wraps the whole request, background tasks included, in an actor scope.

    Implemented as a plain ASGI middleware rather than ``BaseHTTPMiddleware``
    so the scope spans the complete response cycle within a single task.
    """

    def __init__(self, app: ASGIApp, session_factory: sessionmaker = SessionLocal) -> None:
        self.app = app
        self.session_factory = session_factory

    def _resolve_context(self, headers: Headers) -> ActorContext:
        with self.session_factory() as db:
            return context_from_headers(headers, db)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        context = await run_in_threadpool(self._resolve_context, Headers(scope=scope))
        with actor_scope(context):
            await self.app(scope, receive, send)
