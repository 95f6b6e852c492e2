# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Effective permission resolution for roles.

Wildcards are expanded against the permissions that are active at the time of
the call, so a permission added after a wildcard was granted is picked up
without touching the role.
"""

import logging
import uuid
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from src.config import get_settings
from src.models import Permission, Role, RoleWildcardPermission
from src.rbac.wildcards import FULL_WILDCARD, parse_pattern

from . import rbac_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectivePermission:
    code: str
    name: str
    module: str
    resource: str | None = None
    action: str | None = None
    is_wildcard: bool = False
    via_pattern: str | None = None


@dataclass(frozen=True)
class EffectivePermissions:
    """Resolution result for one role.

    ``effective`` is None only when materialization was skipped for an
    unrestricted role.
    """

    role_id: uuid.UUID
    role_code: str
    direct: list[EffectivePermission] = field(default_factory=list)
    wildcards: list[str] = field(default_factory=list)
    effective: list[EffectivePermission] | None = None
    is_unrestricted: bool = False

    @property
    def codes(self) -> list[str]:
        return [p.code for p in self.effective or ()]


def _entry(permission: Permission, via_pattern: str | None = None) -> EffectivePermission:
    return EffectivePermission(
        code=permission.code,
        name=permission.name,
        module=permission.module,
        resource=permission.resource,
        action=permission.action,
        is_wildcard=via_pattern is not None,
        via_pattern=via_pattern,
    )


class EffectivePermissionResolver:
    """Computes a role's direct and wildcard-derived permission set."""

    def __init__(self, db: Session, super_admin_role_code: str | None = None) -> None:
        self.db = db
        self.super_admin_role_code = (
            super_admin_role_code or get_settings().super_admin_role_code
        )

    def _active_permissions(self) -> list[Permission]:
        return (
            self.db.query(Permission)
            .filter(Permission.is_active.is_(True), Permission.is_deleted.is_(False))
            .order_by(Permission.code)
            .all()
        )

    def _wildcard_patterns(self, role: Role) -> list[str]:
        rows = (
            self.db.query(RoleWildcardPermission.pattern)
            .filter(RoleWildcardPermission.role_id == role.id)
            .all()
        )
        return sorted(pattern for (pattern,) in rows)

    def resolve(self, role_id: uuid.UUID, materialize: bool = True) -> EffectivePermissions:
        """Resolve a role's permissions.

        Raises:
            NotFoundError: If the role is missing or soft-deleted
        """
        role = rbac_service.get_role(self.db, role_id)
        direct = [_entry(p) for p in rbac_service.get_role_permissions(self.db, role.id)]
        wildcards = self._wildcard_patterns(role)
        unrestricted = role.code == self.super_admin_role_code or FULL_WILDCARD in wildcards

        if unrestricted and not materialize:
            return EffectivePermissions(
                role_id=role.id,
                role_code=role.code,
                direct=direct,
                wildcards=wildcards,
                effective=None,
                is_unrestricted=True,
            )

        effective: dict[str, EffectivePermission] = {p.code: p for p in direct}
        parsed = []
        if unrestricted and FULL_WILDCARD not in wildcards:
            # super admin by role code expands like a holder of the full wildcard
            parsed.append((FULL_WILDCARD, parse_pattern(FULL_WILDCARD)))
        for value in wildcards:
            pattern = parse_pattern(value)
            if pattern is None:
                logger.warning(f"Ignoring malformed wildcard '{value}' on role {role.code}")
                continue
            parsed.append((value, pattern))

        if parsed:
            for permission in self._active_permissions():
                if permission.code in effective:
                    continue
                for value, pattern in parsed:
                    if pattern.matches(permission.code):
                        effective[permission.code] = _entry(permission, via_pattern=value)
                        break

        return EffectivePermissions(
            role_id=role.id,
            role_code=role.code,
            direct=direct,
            wildcards=wildcards,
            effective=sorted(effective.values(), key=lambda p: p.code),
            is_unrestricted=unrestricted,
        )


def resolve_effective_permissions(
    db: Session, role_id: uuid.UUID, materialize: bool = True
) -> EffectivePermissions:
    return EffectivePermissionResolver(db).resolve(role_id, materialize=materialize)
