# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Declarative base and shared column mixins."""

import uuid as uuid_lib
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Enum, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.models.enums import ActorType


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class TimestampMixin:
    """Adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )


class AttributionMixin:
    """Who created and last updated a row.

    Filled in by the session hooks in ``src.context.attribution`` from the
    current actor context; left NULL when no context is active.
    """

    created_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )
    created_by_type: Mapped[ActorType | None] = mapped_column(
        Enum(ActorType, native_enum=False, length=20), nullable=True
    )
    updated_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )
    updated_by_type: Mapped[ActorType | None] = mapped_column(
        Enum(ActorType, native_enum=False, length=20), nullable=True
    )


class SoftDeleteMixin:
    """Soft-delete flag plus deletion attribution."""

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    deleted_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )
    deleted_by_type: Mapped[ActorType | None] = mapped_column(
        Enum(ActorType, native_enum=False, length=20), nullable=True
    )

    def soft_delete(self) -> None:
        """Mark the row deleted; the flush hook stamps who deleted it."""
        self.is_deleted = True
        self.deleted_at = utcnow()
