# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""API dependencies for dependency injection."""

from collections.abc import Callable

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from src.context.actors import Actor
from src.database import get_db
from src.rbac.gate import AuthorizationGate, MatchMode
from src.rbac.registry import PermissionCatalog
from src.security import InvalidTokenError, decode_access_token, extract_bearer_token
from src.services import auth_service


def get_gate(request: Request) -> AuthorizationGate:
    return request.app.state.gate


def get_catalog(request: Request) -> PermissionCatalog:
    return request.app.state.catalog


def get_current_actor(
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> Actor:
    """Get the authenticated actor from the bearer token."""
    token = extract_bearer_token(authorization)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = decode_access_token(token)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    actor = auth_service.resolve_actor(db, claims)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )
    return actor


def _permission_dependency(codes: tuple[str, ...], mode: MatchMode) -> Callable[..., Actor]:
    def dependency(
        actor: Actor = Depends(get_current_actor),
        gate: AuthorizationGate = Depends(get_gate),
    ) -> Actor:
        gate.check(actor, codes, mode)
        return actor

    return dependency


def require_permission(*codes: str) -> Callable[..., Actor]:
    """Dependency that passes when the actor holds any of ``codes``."""
    return _permission_dependency(codes, MatchMode.ANY)


def require_all_permissions(*codes: str) -> Callable[..., Actor]:
    """Dependency that passes only when the actor holds every one of ``codes``."""
    return _permission_dependency(codes, MatchMode.ALL)
