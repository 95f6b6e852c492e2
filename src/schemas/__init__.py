"""Pydantic schemas package."""
from src.schemas.application import (
    ApplicationSchema,
    StatusHistorySchema,
    TransitionRequest,
)
from src.schemas.rbac import (
    EffectivePermissionSchema,
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

__all__ = [
    "ApplicationSchema",
    "EffectivePermissionSchema",
    "EffectivePermissionsSchema",
    "PermissionCreateSchema",
    "PermissionSchema",
    "PermissionSyncResultSchema",
    "PermissionUpdateSchema",
    "RoleCreateSchema",
    "RoleListSchema",
    "RolePermissionsUpdateSchema",
    "RoleSchema",
    "RoleUpdateSchema",
    "RoleWithPermissionsSchema",
    "StatusHistorySchema",
    "TransitionRequest",
    "WildcardGrantCreateSchema",
    "WildcardGrantSchema",
    "WildcardPatternOptionSchema",
]
