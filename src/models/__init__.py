# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Database models package."""

from src.models.admin_user import AdminUser
from src.models.applicant import Applicant
from src.models.application import Application
from src.models.application_status_history import (
    ApplicationStatusHistory,
    ImmutableHistoryError,
)
from src.models.audit_log import AuditLog
from src.models.base import (
    AttributionMixin,
    Base,
    SoftDeleteMixin,
    TimestampMixin,
)
from src.models.enums import ActorType, ApplicationStatus
from src.models.permission import Permission
from src.models.role import Role
from src.models.role_permission import RolePermission
from src.models.role_wildcard import RoleWildcardPermission

__all__ = [
    "ActorType",
    "AdminUser",
    "Applicant",
    "Application",
    "ApplicationStatus",
    "ApplicationStatusHistory",
    "AttributionMixin",
    "AuditLog",
    "Base",
    "ImmutableHistoryError",
    "Permission",
    "Role",
    "RolePermission",
    "RoleWildcardPermission",
    "SoftDeleteMixin",
    "TimestampMixin",
]
