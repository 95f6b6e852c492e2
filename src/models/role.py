# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Role model."""

from __future__ import annotations

import uuid as uuid_lib
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import AttributionMixin, Base, SoftDeleteMixin, TimestampMixin

if TYPE_CHECKING:
    from src.models.admin_user import AdminUser
    from src.models.role_permission import RolePermission
    from src.models.role_wildcard import RoleWildcardPermission


class Role(Base, TimestampMixin, AttributionMixin, SoftDeleteMixin):
    """Model representing a role with its metadata and relationships."""

    __tablename__ = "roles"

    id: Mapped[uuid_lib.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid_lib.uuid4,
    )
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    permissions: Mapped[list[RolePermission]] = relationship(
        "RolePermission", back_populates="role", cascade="all, delete-orphan"
    )
    wildcards: Mapped[list[RoleWildcardPermission]] = relationship(
        "RoleWildcardPermission", back_populates="role", cascade="all, delete-orphan"
    )
    users: Mapped[list[AdminUser]] = relationship("AdminUser", back_populates="role")
