# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission catalog persistence."""

import logging
import uuid

from sqlalchemy.orm import Session

from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.models import Permission
from src.rbac.registry import (
    PermissionCatalog,
    PermissionDefinition,
    PermissionRegistry,
)
from src.rbac.wildcards import is_valid_code

from . import audit_service

logger = logging.getLogger(__name__)


def _active_query(db: Session):
    return db.query(Permission).filter(
        Permission.is_active.is_(True), Permission.is_deleted.is_(False)
    )


def list_permissions(
    db: Session, module: str | None = None, include_inactive: bool = False
) -> list[Permission]:
    """List non-deleted permissions ordered by code."""
    query = db.query(Permission).filter(Permission.is_deleted.is_(False))
    if not include_inactive:
        query = query.filter(Permission.is_active.is_(True))
    if module:
        query = query.filter(Permission.module == module)
    return query.order_by(Permission.code).all()


def get_permissions_by_module(
    db: Session, include_inactive: bool = False
) -> dict[str, list[Permission]]:
    grouped: dict[str, list[Permission]] = {}
    for permission in list_permissions(db, include_inactive=include_inactive):
        grouped.setdefault(permission.module, []).append(permission)
    return dict(sorted(grouped.items()))


def get_permission(db: Session, permission_id: uuid.UUID) -> Permission:
    permission = (
        db.query(Permission)
        .filter(Permission.id == permission_id, Permission.is_deleted.is_(False))
        .first()
    )
    if not permission:
        raise NotFoundError("Permission not found")
    return permission


def get_permission_by_code(db: Session, code: str) -> Permission | None:
    return (
        db.query(Permission)
        .filter(Permission.code == code, Permission.is_deleted.is_(False))
        .first()
    )


def create_permission(
    db: Session,
    code: str,
    name: str | None = None,
    description: str | None = None,
) -> Permission:
    """Persist a new permission code.

    Module, resource and action are derived from the code.

    Raises:
        ValidationError: If the code is malformed
        ConflictError: If the code already exists (deleted rows included,
            since codes are never reused)
    """
    if not is_valid_code(code):
        raise ValidationError(f"Invalid permission code '{code}'")
    if db.query(Permission).filter(Permission.code == code).first():
        raise ConflictError(f"Permission '{code}' already exists")

    definition = PermissionRegistry().register(code, name=name, description=description)
    permission = Permission(
        code=definition.code,
        name=definition.name,
        module=definition.module,
        resource=definition.resource,
        action=definition.action,
        description=definition.description,
        is_active=True,
    )
    db.add(permission)
    db.commit()
    db.refresh(permission)

    logger.info(f"Created permission {code}")
    audit_service.record_event(
        db, "permission.create", "permission", permission.id, {"code": code}
    )
    return permission


def update_permission(
    db: Session,
    permission_id: uuid.UUID,
    name: str | None = None,
    description: str | None = None,
    is_active: bool | None = None,
) -> Permission:
    """Update the editable fields of a permission. The code never changes."""
    permission = get_permission(db, permission_id)
    changes = {}
    if name is not None:
        permission.name = name
        changes["name"] = name
    if description is not None:
        permission.description = description
        changes["description"] = description
    if is_active is not None:
        permission.is_active = is_active
        changes["is_active"] = is_active

    db.commit()
    db.refresh(permission)
    logger.info(f"Updated permission {permission.code}")
    audit_service.record_event(
        db, "permission.update", "permission", permission.id, changes
    )
    return permission


def delete_permission(db: Session, permission_id: uuid.UUID) -> None:
    """Soft delete a permission; it stops contributing to any role."""
    permission = get_permission(db, permission_id)
    permission.soft_delete()
    permission.is_active = False
    db.commit()
    logger.info(f"Deleted permission {permission.code}")
    audit_service.record_event(
        db, "permission.delete", "permission", permission.id, {"code": permission.code}
    )


def sync_from_catalog(db: Session, catalog: PermissionCatalog) -> dict[str, int]:
    """Upsert every catalog definition into the permissions table.

    Existing rows get their metadata refreshed; soft-deleted rows are left
    alone so a deletion sticks across restarts.
    """
    existing = {p.code: p for p in db.query(Permission).all()}
    created = updated = 0
    for definition in catalog:
        permission = existing.get(definition.code)
        if permission is None:
            db.add(
                Permission(
                    code=definition.code,
                    name=definition.name,
                    module=definition.module,
                    resource=definition.resource,
                    action=definition.action,
                    description=definition.description,
                    is_active=True,
                )
            )
            created += 1
            continue
        if permission.is_deleted:
            continue
        if (
            permission.name != definition.name
            or permission.module != definition.module
            or permission.resource != definition.resource
            or permission.action != definition.action
            or permission.description != definition.description
        ):
            permission.name = definition.name
            permission.module = definition.module
            permission.resource = definition.resource
            permission.action = definition.action
            permission.description = definition.description
            updated += 1

    db.commit()
    logger.info(f"Permission sync complete: {created} created, {updated} updated")
    return {"created": created, "updated": updated, "total": len(catalog)}


def load_active_catalog(db: Session) -> PermissionCatalog:
    """Snapshot the active persisted permissions as a catalog."""
    return PermissionCatalog(
        PermissionDefinition(
            code=p.code,
            name=p.name,
            module=p.module,
            resource=p.resource,
            action=p.action,
            description=p.description,
        )
        for p in _active_query(db).all()
    )


def available_wildcard_patterns(db: Session) -> list[dict[str, str]]:
    return load_active_catalog(db).wildcard_patterns()
