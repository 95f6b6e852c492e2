# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
# src/schemas/rbac.py
import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PermissionSchema(BaseModel):
    """Schema representing a permission."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: str
    module: str
    resource: str | None
    action: str | None
    description: str | None
    is_active: bool


class PermissionCreateSchema(BaseModel):
    """Schema for creating a new permission."""

    code: str = Field(min_length=3, max_length=150)
    name: str | None = None
    description: str | None = None


class PermissionUpdateSchema(BaseModel):
    """Schema for updating a permission. The code cannot be changed."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None


class PermissionSyncResultSchema(BaseModel):
    created: int
    updated: int
    total: int


class WildcardPatternOptionSchema(BaseModel):
    pattern: str
    description: str
    type: str


class RoleSchema(BaseModel):
    """Schema representing a role."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    name: str
    is_system: bool
    is_active: bool
    description: str | None


class RoleWithPermissionsSchema(RoleSchema):
    """Schema representing a role along with its grants."""

    permissions: list[PermissionSchema]
    wildcards: list[str]
    user_count: int = 0


class RoleListSchema(BaseModel):
    """One page of roles."""

    roles: list[RoleSchema]
    total: int
    page: int
    limit: int
    pages: int


class RoleCreateSchema(BaseModel):
    """Schema for creating a new role."""

    code: str = Field(min_length=2, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    permissions: list[str] = []  # List of permission codes


class RoleUpdateSchema(BaseModel):
    """Schema for updating a role."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None


class RolePermissionsUpdateSchema(BaseModel):
    """Replaces the role's direct permissions."""

    permissions: list[str]


class WildcardGrantSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pattern: str
    description: str | None
    granted_by_id: uuid.UUID | None
    granted_at: datetime


class WildcardGrantCreateSchema(BaseModel):
    pattern: str
    description: str | None = None


class EffectivePermissionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    module: str
    resource: str | None
    action: str | None
    is_wildcard: bool
    via_pattern: str | None


class EffectivePermissionsSchema(BaseModel):
    """A role's resolved permissions.

    ``effective`` is null for unrestricted roles unless materialization was
    requested.
    """

    model_config = ConfigDict(from_attributes=True)

    role_id: uuid.UUID
    role_code: str
    direct: list[EffectivePermissionSchema]
    wildcards: list[str]
    effective: list[EffectivePermissionSchema] | None
    is_unrestricted: bool
