# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authentication service."""

import logging
import uuid
from typing import Any

from sqlalchemy.orm import Session, joinedload

from src.context.actors import Actor, AdminActor, ApplicantActor
from src.models import ActorType, AdminUser, Applicant

from . import rbac_service

logger = logging.getLogger(__name__)


def get_admin_user(db: Session, user_id: uuid.UUID) -> AdminUser | None:
    """Get an active, non-deleted admin with the role loaded."""
    return (
        db.query(AdminUser)
        .options(joinedload(AdminUser.role))
        .filter(
            AdminUser.id == user_id,
            AdminUser.is_active.is_(True),
            AdminUser.is_deleted.is_(False),
        )
        .first()
    )


def get_applicant(db: Session, applicant_id: uuid.UUID) -> Applicant | None:
    return (
        db.query(Applicant)
        .filter(Applicant.id == applicant_id, Applicant.is_deleted.is_(False))
        .first()
    )


def build_admin_actor(
    db: Session, user: AdminUser, token_permissions: list[str] | None = None
) -> AdminActor:
    """Admin actor carrying the role's grants plus any permissions in the token."""
    permissions = set(token_permissions or ())
    role_code = None
    if user.role is not None:
        role_code = user.role.code if user.role.is_active and not user.role.is_deleted else None
        permissions.update(rbac_service.get_role_grants(db, user.role))
    return AdminActor(id=user.id, role_code=role_code, permissions=frozenset(permissions))


def resolve_actor(db: Session, claims: dict[str, Any]) -> Actor | None:
    """Turn verified token claims into an actor.

    Returns None when the account no longer exists or is disabled.
    """
    subject = claims["sub"]
    if claims["typ"] == ActorType.ADMIN:
        user = get_admin_user(db, subject)
        if user is None:
            logger.warning(f"Token presented for unknown or inactive admin {subject}")
            return None
        return build_admin_actor(db, user, claims.get("permissions"))

    applicant = get_applicant(db, subject)
    if applicant is None:
        logger.warning(f"Token presented for unknown applicant {subject}")
        return None
    return ApplicantActor(id=applicant.id)
