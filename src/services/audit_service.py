# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Best-effort audit trail."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from src.context.actor_context import current_context, system_context
from src.models import AuditLog

logger = logging.getLogger(__name__)


def record_event(
    db: Session,
    action: str,
    entity_type: str | None = None,
    entity_id: object | None = None,
    details: dict[str, Any] | None = None,
) -> bool:
    """Append an audit entry attributed to the current actor.

    The entry is written through its own session on the same engine, after
    the caller's work is committed. Failures are logged and swallowed so an
    audit problem never undoes or blocks the action being audited.

    Returns:
        True if the entry was stored
    """
    context = current_context() or system_context()
    try:
        with Session(bind=db.get_bind()) as audit_db:
            audit_db.add(
                AuditLog(
                    actor_id=context.actor_id,
                    actor_type=context.actor_type,
                    action=action,
                    entity_type=entity_type,
                    entity_id=str(entity_id) if entity_id is not None else None,
                    details=details,
                )
            )
            audit_db.commit()
    except Exception as e:
        logger.error(f"Failed to record audit event '{action}': {e}")
        return False
    return True


def get_events(
    db: Session,
    entity_type: str | None = None,
    entity_id: object | None = None,
    limit: int = 100,
) -> list[AuditLog]:
    """Most recent audit entries, optionally filtered by entity."""
    query = db.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == str(entity_id))
    return query.order_by(AuditLog.id.desc()).limit(limit).all()
