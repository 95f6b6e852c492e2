# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Session hooks that stamp created/updated/deleted-by columns.

The hooks read the ambient actor context right before a flush. Without an
active context the attribution columns are simply left alone.
"""

import logging

from sqlalchemy import event
from sqlalchemy.orm import Session

from src.context.actor_context import ActorContext, current_context
from src.models.base import AttributionMixin, SoftDeleteMixin

logger = logging.getLogger(__name__)


def stamp_created(instance: AttributionMixin, context: ActorContext) -> None:
    if instance.created_by_type is None:
        instance.created_by_id = context.actor_id
        instance.created_by_type = context.actor_type


def stamp_updated(instance: AttributionMixin, context: ActorContext) -> None:
    instance.updated_by_id = context.actor_id
    instance.updated_by_type = context.actor_type


def stamp_deleted(instance: SoftDeleteMixin, context: ActorContext) -> None:
    if instance.deleted_by_type is None:
        instance.deleted_by_id = context.actor_id
        instance.deleted_by_type = context.actor_type


def _before_flush(session: Session, flush_context, instances) -> None:
    context = current_context()
    if context is None:
        return

    for instance in session.new:
        if isinstance(instance, AttributionMixin):
            stamp_created(instance, context)

    for instance in session.dirty:
        if not session.is_modified(instance, include_collections=False):
            continue
        if isinstance(instance, SoftDeleteMixin) and instance.is_deleted:
            stamp_deleted(instance, context)
        if isinstance(instance, AttributionMixin):
            stamp_updated(instance, context)


def install_attribution_hooks() -> None:
    """Register the flush hook on every ORM session (idempotent)."""
    if not event.contains(Session, "before_flush", _before_flush):
        event.listen(Session, "before_flush", _before_flush)
        logger.debug("Attribution hooks installed")
