# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Wildcard grants attached to a role."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from src.models.base import Base, utcnow


class RoleWildcardPermission(Base):
    """A wildcard pattern granted to a role, expanded at evaluation time."""

    __tablename__ = "role_wildcard_permissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    role_id = Column(
        Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False
    )
    pattern = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    granted_by_id = Column(Uuid(as_uuid=True), nullable=True)
    granted_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("role_id", "pattern", name="_role_wildcard_pattern_uc"),
    )

    role = relationship("Role", back_populates="wildcards")
