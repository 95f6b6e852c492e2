# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Append-only application status history."""

from __future__ import annotations

import uuid as uuid_lib
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Integer, Text, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, utcnow
from src.models.enums import ActorType, ApplicationStatus

if TYPE_CHECKING:
    from src.models.application import Application


class ApplicationStatusHistory(Base):
    """One row per status transition. Rows are never updated or deleted."""

    __tablename__ = "application_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("applications.id"),
        nullable=False,
        index=True,
    )
    old_status: Mapped[ApplicationStatus | None] = mapped_column(
        Enum(ApplicationStatus, native_enum=False, length=30), nullable=True
    )
    new_status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, native_enum=False, length=30), nullable=False
    )
    changed_by_id: Mapped[uuid_lib.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True
    )
    changed_by_type: Mapped[ActorType] = mapped_column(
        Enum(ActorType, native_enum=False, length=20),
        default=ActorType.SYSTEM,
        nullable=False,
    )
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)
    metadata_json: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSON, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    application: Mapped[Application] = relationship(
        "Application", back_populates="status_history"
    )


class ImmutableHistoryError(Exception):
    """Raised when code tries to rewrite status history."""


@event.listens_for(ApplicationStatusHistory, "before_update")
def _refuse_update(mapper, connection, target) -> None:
    raise ImmutableHistoryError(
        f"Status history entry {target.id} is append-only and cannot be updated"
    )


@event.listens_for(ApplicationStatusHistory, "before_delete")
def _refuse_delete(mapper, connection, target) -> None:
    raise ImmutableHistoryError(
        f"Status history entry {target.id} is append-only and cannot be deleted"
    )
