# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
# src/services/rbac_service.py
import logging
import uuid
from collections.abc import Iterable

import sqlalchemy as sa
from sqlalchemy.orm import Session, selectinload

from src.context.actor_context import current_actor_id
from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.models import AdminUser, Permission, Role, RolePermission, RoleWildcardPermission
from src.models.base import utcnow
from src.rbac.wildcards import require_pattern

from . import audit_service

logger = logging.getLogger(__name__)


def list_roles(
    db: Session,
    include_inactive: bool = False,
    search: str | None = None,
    offset: int = 0,
    limit: int | None = None,
) -> tuple[list[Role], int]:
    """List non-deleted roles ordered by name.

    Returns:
        The requested page of roles and the total number of matches
    """
    query = db.query(Role).filter(Role.is_deleted.is_(False))
    if not include_inactive:
        query = query.filter(Role.is_active.is_(True))
    if search:
        term = f"%{search}%"
        query = query.filter(
            sa.or_(Role.name.ilike(term), Role.code.ilike(term), Role.description.ilike(term))
        )

    total = query.count()
    query = query.order_by(Role.name).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all(), total


def get_role(db: Session, role_id: uuid.UUID) -> Role:
    """Get a non-deleted role, raising NotFoundError otherwise."""
    role = (
        db.query(Role)
        .options(selectinload(Role.wildcards))
        .filter(Role.id == role_id, Role.is_deleted.is_(False))
        .first()
    )
    if not role:
        raise NotFoundError("Role not found")
    return role


def get_role_by_code(db: Session, code: str) -> Role | None:
    return (
        db.query(Role)
        .filter(Role.code == code.upper(), Role.is_deleted.is_(False))
        .first()
    )


def count_role_users(db: Session, role_id: uuid.UUID) -> int:
    """Active, non-deleted admin users assigned to a role."""
    return (
        db.query(AdminUser)
        .filter(
            AdminUser.role_id == role_id,
            AdminUser.is_active.is_(True),
            AdminUser.is_deleted.is_(False),
        )
        .count()
    )


def _resolve_permissions(db: Session, codes: Iterable[str]) -> list[Permission]:
    codes = list(dict.fromkeys(codes))
    if not codes:
        return []
    found = (
        db.query(Permission)
        .filter(Permission.code.in_(codes), Permission.is_deleted.is_(False))
        .all()
    )
    known = {p.code for p in found}
    unknown = [c for c in codes if c not in known]
    if unknown:
        raise NotFoundError(f"Unknown permission codes: {', '.join(unknown)}")
    return found


def create_role(
    db: Session,
    code: str,
    name: str,
    description: str | None = None,
    permission_codes: Iterable[str] = (),
    is_system: bool = False,
) -> Role:
    """Create a role with an optional set of direct permissions.

    The role code is stored upper-cased.

    Raises:
        ConflictError: If another role already uses the code or name
        NotFoundError: If a permission code does not exist
    """
    code = code.strip().upper()
    if not code:
        raise ValidationError("Role code must not be empty")
    if db.query(Role).filter(Role.code == code).first():
        raise ConflictError(f"Role with code '{code}' already exists")
    if db.query(Role).filter(Role.name == name).first():
        raise ConflictError(f"Role with name '{name}' already exists")

    permissions = _resolve_permissions(db, permission_codes)
    role = Role(code=code, name=name, description=description, is_system=is_system)
    db.add(role)
    db.flush()
    for permission in permissions:
        db.add(RolePermission(role_id=role.id, permission_id=permission.id))
    db.commit()
    db.refresh(role)

    logger.info(f"Created role {role.code}")
    audit_service.record_event(
        db,
        "role.create",
        "role",
        role.id,
        {"code": role.code, "permissions": sorted(p.code for p in permissions)},
    )
    return role


def update_role(
    db: Session,
    role_id: uuid.UUID,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
) -> Role:
    """Update a role's name, description or active flag.

    System roles cannot be deactivated.
    """
    role = get_role(db, role_id)
    if name is not None and name != role.name:
        clash = db.query(Role).filter(Role.name == name, Role.id != role.id).first()
        if clash:
            raise ConflictError(f"Role with name '{name}' already exists")
        role.name = name
    if description is not None:
        role.description = description
    if is_active is not None:
        if role.is_system and not is_active:
            raise ConflictError("System roles cannot be deactivated")
        role.is_active = is_active

    db.commit()
    db.refresh(role)
    logger.info(f"Updated role {role.code}")
    audit_service.record_event(db, "role.update", "role", role.id, {"code": role.code})
    return role


def delete_role(db: Session, role_id: uuid.UUID) -> None:
    """Soft delete a role.

    Raises:
        NotFoundError: If the role does not exist or is already deleted
        ConflictError: If the role is a system role or still has active
            users assigned
    """
    role = get_role(db, role_id)
    if role.is_system:
        raise ConflictError("System roles cannot be deleted")
    assigned = count_role_users(db, role.id)
    if assigned:
        raise ConflictError(
            f"Cannot delete role: {assigned} user(s) are assigned to this role"
        )

    role.soft_delete()
    role.is_active = False
    db.commit()
    logger.info(f"Deleted role {role.code}")
    audit_service.record_event(db, "role.delete", "role", role.id, {"code": role.code})


def get_role_permissions(db: Session, role_id: uuid.UUID) -> list[Permission]:
    """Active, non-deleted permissions granted directly to a role."""
    return (
        db.query(Permission)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(
            RolePermission.role_id == role_id,
            Permission.is_active.is_(True),
            Permission.is_deleted.is_(False),
        )
        .order_by(Permission.code)
        .all()
    )


def assign_permissions_to_role(
    db: Session, role_id: uuid.UUID, permission_codes: Iterable[str]
) -> list[Permission]:
    """Replace a role's direct permissions with the given codes."""
    role = get_role(db, role_id)
    permissions = _resolve_permissions(db, permission_codes)

    db.query(RolePermission).filter(RolePermission.role_id == role.id).delete()
    for permission in permissions:
        db.add(RolePermission(role_id=role.id, permission_id=permission.id))
    db.commit()

    codes = sorted(p.code for p in permissions)
    logger.info(f"Assigned {len(codes)} permission(s) to role {role.code}")
    audit_service.record_event(
        db, "role.permissions.assign", "role", role.id, {"permissions": codes}
    )
    return get_role_permissions(db, role.id)


def remove_permission_from_role(
    db: Session, role_id: uuid.UUID, permission_code: str
) -> bool:
    """Remove one direct permission. Returns True if removed, False if not found."""
    role = get_role(db, role_id)
    permission = db.query(Permission).filter(Permission.code == permission_code).first()
    if not permission:
        return False

    removed = (
        db.query(RolePermission)
        .filter(
            RolePermission.role_id == role.id,
            RolePermission.permission_id == permission.id,
        )
        .delete()
    )
    db.commit()
    if removed:
        logger.info(f"Removed permission {permission_code} from role {role.code}")
        audit_service.record_event(
            db,
            "role.permissions.remove",
            "role",
            role.id,
            {"permission": permission_code},
        )
    return bool(removed)


def get_role_wildcards(db: Session, role_id: uuid.UUID) -> list[RoleWildcardPermission]:
    role = get_role(db, role_id)
    return (
        db.query(RoleWildcardPermission)
        .filter(RoleWildcardPermission.role_id == role.id)
        .order_by(RoleWildcardPermission.pattern)
        .all()
    )


def assign_wildcard_to_role(
    db: Session,
    role_id: uuid.UUID,
    pattern: str,
    description: str | None = None,
) -> RoleWildcardPermission:
    """Grant a wildcard pattern to a role.

    Re-granting an existing pattern refreshes its description and grant
    attribution instead of failing.

    Raises:
        ValidationError: If the pattern is not one of the three wildcard forms
        NotFoundError: If the role does not exist
    """
    parsed = require_pattern(pattern)
    role = get_role(db, role_id)
    pattern = str(parsed)

    grant = (
        db.query(RoleWildcardPermission)
        .filter(
            RoleWildcardPermission.role_id == role.id,
            RoleWildcardPermission.pattern == pattern,
        )
        .first()
    )
    if grant is None:
        grant = RoleWildcardPermission(role_id=role.id, pattern=pattern)
        db.add(grant)
    grant.description = description
    grant.granted_by_id = current_actor_id()
    grant.granted_at = utcnow()
    db.commit()
    db.refresh(grant)

    logger.info(f"Granted wildcard {pattern} to role {role.code}")
    audit_service.record_event(
        db, "role.wildcards.assign", "role", role.id, {"pattern": pattern}
    )
    return grant


def remove_wildcard_from_role(db: Session, role_id: uuid.UUID, pattern: str) -> bool:
    """Revoke a wildcard pattern. Returns True if removed, False if not found."""
    role = get_role(db, role_id)
    removed = (
        db.query(RoleWildcardPermission)
        .filter(
            RoleWildcardPermission.role_id == role.id,
            RoleWildcardPermission.pattern == pattern,
        )
        .delete()
    )
    db.commit()
    if removed:
        logger.info(f"Revoked wildcard {pattern} from role {role.code}")
        audit_service.record_event(
            db, "role.wildcards.remove", "role", role.id, {"pattern": pattern}
        )
    return bool(removed)


def get_role_grants(db: Session, role: Role) -> set[str]:
    """Direct permission codes plus wildcard patterns held by a role.

    This is the granted set the evaluator matches against; wildcards stay
    unexpanded. Inactive or deleted roles grant nothing.
    """
    if not role.is_active or role.is_deleted:
        return set()
    grants = {p.code for p in get_role_permissions(db, role.id)}
    grants.update(
        pattern
        for (pattern,) in db.query(RoleWildcardPermission.pattern).filter(
            RoleWildcardPermission.role_id == role.id
        )
    )
    return grants
