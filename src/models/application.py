# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application model."""

from __future__ import annotations

import uuid as uuid_lib
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import AttributionMixin, Base, SoftDeleteMixin, TimestampMixin
from src.models.enums import ApplicationStatus

if TYPE_CHECKING:
    from src.models.applicant import Applicant
    from src.models.application_status_history import ApplicationStatusHistory


class Application(Base, TimestampMixin, AttributionMixin, SoftDeleteMixin):
    """An applicant's application for a post.

    ``status`` only changes through ``status_transition_service``; the
    version counter makes concurrent transitions on the same row collide
    instead of silently overwriting each other.
    """

    __tablename__ = "applications"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    application_no: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    applicant_id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("applicants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    post_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, native_enum=False, length=30),
        default=ApplicationStatus.DRAFT,
        nullable=False,
        index=True,
    )
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    applicant: Mapped[Applicant] = relationship("Applicant", back_populates="applications")
    status_history: Mapped[list[ApplicationStatusHistory]] = relationship(
        "ApplicationStatusHistory",
        back_populates="application",
        order_by="ApplicationStatusHistory.created_at",
    )
