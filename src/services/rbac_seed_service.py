# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
# src/services/rbac_seed_service.py
import logging

from sqlalchemy.orm import Session

from src.models import Permission, Role, RolePermission, RoleWildcardPermission
from src.rbac.registry import PermissionCatalog
from src.rbac.roles import DEFAULT_ROLES

from . import permission_service

logger = logging.getLogger(__name__)


def seed_rbac_data(db: Session, catalog: PermissionCatalog) -> None:
    """Seeds the database with the catalog permissions and default roles.

    This function is idempotent. Roles that already exist are left untouched
    so later edits made through the API survive a restart.
    @param db: SQLAlchemy Session object
    @param catalog: Frozen permission catalog to persist
    """
    permission_service.sync_from_catalog(db, catalog)

    for role_data in DEFAULT_ROLES:
        role = db.query(Role).filter(Role.code == role_data["code"]).first()
        if role:
            continue

        role = Role(
            code=role_data["code"],
            name=role_data["name"],
            is_system=role_data["is_system"],
            description=role_data["description"],
        )
        db.add(role)
        db.flush()  # Flush to get the role ID

        for perm_code in role_data["permissions"]:
            permission = db.query(Permission).filter(Permission.code == perm_code).first()
            if permission:
                db.add(RolePermission(role_id=role.id, permission_id=permission.id))
            else:
                logger.warning(f"Seed role {role.code} references unknown permission {perm_code}")
        for pattern in role_data["wildcards"]:
            db.add(
                RoleWildcardPermission(
                    role_id=role.id,
                    pattern=pattern,
                    description="Default grant",
                )
            )
        logger.info(f"Seeded role {role.code}")
    db.commit()
