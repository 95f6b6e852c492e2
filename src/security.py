# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Access token encoding and verification."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from src.config import get_settings
from src.models.enums import ActorType

TOKEN_TYPES = {"admin": ActorType.ADMIN, "applicant": ActorType.APPLICANT}


class InvalidTokenError(Exception):
    """The bearer token is missing, expired, or malformed."""


def create_access_token(
    subject: uuid.UUID,
    actor_type: ActorType,
    permissions: list[str] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token for an admin or applicant."""
    settings = get_settings()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload: dict[str, Any] = {
        "sub": str(subject),
        "typ": actor_type.value.lower(),
        "exp": expire,
    }
    if permissions:
        payload["permissions"] = permissions
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify a token and return its claims.

    The returned dict always has ``sub`` as a UUID, ``typ`` as an ActorType
    and ``permissions`` as a list of strings.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    actor_type = TOKEN_TYPES.get(str(claims.get("typ", "")).lower())
    if actor_type is None:
        raise InvalidTokenError("Unknown token type")
    try:
        subject = uuid.UUID(str(claims.get("sub")))
    except ValueError as e:
        raise InvalidTokenError("Invalid token subject") from e

    permissions = claims.get("permissions") or []
    if not isinstance(permissions, list):
        permissions = []
    return {
        "sub": subject,
        "typ": actor_type,
        "permissions": [str(p) for p in permissions],
    }


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()
