# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
# src/api/v1/rbac.py
import math
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from src.api.deps import (
    get_catalog,
    get_db,
    require_all_permissions,
    require_permission,
)
from src.context.actors import Actor
from src.exceptions import NotFoundError
from src.rbac.permissions import (
    PERMISSIONS_CREATE,
    PERMISSIONS_DELETE,
    PERMISSIONS_EDIT,
    PERMISSIONS_VIEW,
    ROLES_CREATE,
    ROLES_DELETE,
    ROLES_EDIT,
    ROLES_MANAGE_PERMISSIONS,
    ROLES_VIEW,
)
from src.rbac.registry import PermissionCatalog
from src.schemas.rbac import (
    EffectivePermissionsSchema,
    PermissionCreateSchema,
    PermissionSchema,
    PermissionSyncResultSchema,
    PermissionUpdateSchema,
    RoleCreateSchema,
    RoleListSchema,
    RolePermissionsUpdateSchema,
    RoleSchema,
    RoleUpdateSchema,
    RoleWithPermissionsSchema,
    WildcardGrantCreateSchema,
    WildcardGrantSchema,
    WildcardPatternOptionSchema,
)
from src.services import permission_resolver, permission_service, rbac_service

router = APIRouter(prefix="/rbac", tags=["rbac"])


def _role_detail(db: Session, role_id: uuid.UUID) -> RoleWithPermissionsSchema:
    role = rbac_service.get_role(db, role_id)
    return RoleWithPermissionsSchema(
        **RoleSchema.model_validate(role).model_dump(),
        permissions=[
            PermissionSchema.model_validate(p)
            for p in rbac_service.get_role_permissions(db, role.id)
        ],
        wildcards=sorted(w.pattern for w in role.wildcards),
        user_count=rbac_service.count_role_users(db, role.id),
    )


# Permissions


@router.get(
    "/permissions",
    response_model=dict[str, list[PermissionSchema]],
    summary="List permissions grouped by module",
)
def list_permissions(
    include_inactive: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(PERMISSIONS_VIEW, ROLES_VIEW)),
):
    """Retrieve all permissions, grouped by module.
    Requires permissions.view or roles.view.
    """
    return permission_service.get_permissions_by_module(db, include_inactive=include_inactive)


@router.post(
    "/permissions",
    response_model=PermissionSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a permission",
)
def create_permission(
    permission_in: PermissionCreateSchema,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(PERMISSIONS_CREATE)),
):
    return permission_service.create_permission(
        db, permission_in.code, name=permission_in.name, description=permission_in.description
    )


@router.post(
    "/permissions/sync",
    response_model=PermissionSyncResultSchema,
    summary="Sync permissions from the built-in catalog",
)
def sync_permissions(
    db: Session = Depends(get_db),
    catalog: PermissionCatalog = Depends(get_catalog),
    actor: Actor = Depends(require_all_permissions(PERMISSIONS_CREATE, PERMISSIONS_EDIT)),
):
    """Upsert the built-in catalog.
    Requires permissions.create and permissions.edit.
    """
    return permission_service.sync_from_catalog(db, catalog)


@router.get(
    "/permissions/wildcard-patterns",
    response_model=list[WildcardPatternOptionSchema],
    summary="List wildcard patterns available for granting",
)
def list_wildcard_patterns(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(PERMISSIONS_VIEW, ROLES_VIEW)),
):
    return permission_service.available_wildcard_patterns(db)


@router.get("/permissions/{permission_id}", response_model=PermissionSchema)
def get_permission(
    permission_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(PERMISSIONS_VIEW)),
):
    return permission_service.get_permission(db, permission_id)


@router.put("/permissions/{permission_id}", response_model=PermissionSchema)
def update_permission(
    permission_id: uuid.UUID,
    permission_in: PermissionUpdateSchema,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(PERMISSIONS_EDIT)),
):
    return permission_service.update_permission(
        db, permission_id, **permission_in.model_dump(exclude_unset=True)
    )


@router.delete("/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_permission(
    permission_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(PERMISSIONS_DELETE)),
):
    permission_service.delete_permission(db, permission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Roles


@router.get("/roles", response_model=RoleListSchema, summary="List roles")
def list_roles(
    include_inactive: bool = False,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_VIEW)),
):
    roles, total = rbac_service.list_roles(
        db,
        include_inactive=include_inactive,
        search=search,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return RoleListSchema(
        roles=[RoleSchema.model_validate(r) for r in roles],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.post(
    "/roles",
    response_model=RoleWithPermissionsSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new role",
)
def create_role(
    role_in: RoleCreateSchema,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_CREATE)),
):
    """Create a new role with the given direct permissions.
    Requires roles.create.
    """
    role = rbac_service.create_role(
        db,
        code=role_in.code,
        name=role_in.name,
        description=role_in.description,
        permission_codes=role_in.permissions,
    )
    return _role_detail(db, role.id)


@router.get(
    "/roles/{role_id}",
    response_model=RoleWithPermissionsSchema,
    summary="Get a role by ID with its permissions",
)
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_VIEW)),
):
    return _role_detail(db, role_id)


@router.put("/roles/{role_id}", response_model=RoleWithPermissionsSchema)
def update_role(
    role_id: uuid.UUID,
    role_in: RoleUpdateSchema,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_EDIT)),
):
    rbac_service.update_role(db, role_id, **role_in.model_dump(exclude_unset=True))
    return _role_detail(db, role_id)


@router.delete("/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_DELETE)),
):
    """Soft delete a role. System roles and roles still assigned to active
    users cannot be deleted.
    """
    rbac_service.delete_role(db, role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/roles/{role_id}/permissions", response_model=RoleWithPermissionsSchema)
def replace_role_permissions(
    role_id: uuid.UUID,
    permissions_in: RolePermissionsUpdateSchema,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_MANAGE_PERMISSIONS)),
):
    rbac_service.assign_permissions_to_role(db, role_id, permissions_in.permissions)
    return _role_detail(db, role_id)


@router.delete(
    "/roles/{role_id}/permissions/{permission_code}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_role_permission(
    role_id: uuid.UUID,
    permission_code: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_MANAGE_PERMISSIONS)),
):
    if not rbac_service.remove_permission_from_role(db, role_id, permission_code):
        raise NotFoundError(f"Role does not hold permission '{permission_code}'")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Wildcard grants


@router.get("/roles/{role_id}/wildcards", response_model=list[WildcardGrantSchema])
def list_role_wildcards(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_VIEW)),
):
    return rbac_service.get_role_wildcards(db, role_id)


@router.post(
    "/roles/{role_id}/wildcards",
    response_model=WildcardGrantSchema,
    status_code=status.HTTP_201_CREATED,
)
def assign_role_wildcard(
    role_id: uuid.UUID,
    grant_in: WildcardGrantCreateSchema,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_MANAGE_PERMISSIONS)),
):
    return rbac_service.assign_wildcard_to_role(
        db, role_id, grant_in.pattern, description=grant_in.description
    )


@router.delete("/roles/{role_id}/wildcards", status_code=status.HTTP_204_NO_CONTENT)
def remove_role_wildcard(
    role_id: uuid.UUID,
    pattern: str = Query(...),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_MANAGE_PERMISSIONS)),
):
    if not rbac_service.remove_wildcard_from_role(db, role_id, pattern):
        raise NotFoundError(f"Role does not hold wildcard '{pattern}'")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/roles/{role_id}/effective-permissions",
    response_model=EffectivePermissionsSchema,
    summary="Resolve a role's direct and wildcard-derived permissions",
)
def get_effective_permissions(
    role_id: uuid.UUID,
    materialize: bool = True,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_permission(ROLES_VIEW)),
):
    return permission_resolver.resolve_effective_permissions(
        db, role_id, materialize=materialize
    )
