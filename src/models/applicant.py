# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Applicant model."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import AttributionMixin, Base, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from src.models.application import Application


class Applicant(Base, TimestampMixin, AttributionMixin, SoftDeleteMixin):
    """A person applying for posts."""

    __tablename__ = "applicants"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    applications: Mapped[list[Application]] = relationship(
        "Application", back_populates="applicant"
    )
