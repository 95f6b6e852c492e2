# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission codes shipped with the portal."""

from src.rbac.registry import PermissionCatalog, PermissionRegistry

# Codes referenced directly by the core
ROLES_VIEW = "roles.view"
ROLES_CREATE = "roles.create"
ROLES_EDIT = "roles.edit"
ROLES_DELETE = "roles.delete"
ROLES_MANAGE_PERMISSIONS = "roles.manage_permissions"
PERMISSIONS_VIEW = "permissions.view"
PERMISSIONS_CREATE = "permissions.create"
PERMISSIONS_EDIT = "permissions.edit"
PERMISSIONS_DELETE = "permissions.delete"
APPLICATIONS_VIEW = "applications.view"
APPLICATIONS_REVIEW = "applications.review"
APPLICATIONS_VERIFY = "applications.verify"
APPLICATIONS_APPROVE = "applications.approve"
APPLICATIONS_REJECT = "applications.reject"

# (module, resource, actions); resource None registers module-level codes
CORE_PERMISSIONS: list[tuple[str, str | None, tuple[str, ...]]] = [
    ("users", None, ("view", "create", "edit", "delete", "assign_roles", "reset_password")),
    ("roles", None, ("view", "create", "edit", "delete", "manage_permissions")),
    ("permissions", None, ("view", "create", "edit", "delete")),
    ("masters", "districts", ("view", "create", "edit", "delete")),
    ("masters", "talukas", ("view", "create", "edit", "delete")),
    ("masters", "components", ("view", "create", "edit", "delete")),
    ("masters", "posts", ("view", "create", "edit", "delete")),
    ("masters", "document_types", ("view", "create", "edit", "delete")),
    ("masters", "education_levels", ("view", "create", "edit", "delete")),
    ("masters", "categories", ("view", "create", "edit", "delete")),
    ("masters", "experience_domains", ("view", "create", "edit", "delete")),
    ("masters", "application_statuses", ("view", "create", "edit", "delete")),
    ("masters", "banners", ("view", "create", "edit", "delete")),
    ("posts", None, ("view", "create", "edit", "delete", "publish")),
    ("applications", None, ("view", "review", "approve", "reject", "export", "verify")),
    ("applicants", None, ("view", "edit", "verify_documents")),
    ("eligibility", None, ("check", "view")),
    ("merit", None, ("view", "generate", "publish")),
    ("reports", None, ("view", "export")),
    ("analytics", None, ("view",)),
    ("audit", None, ("view", "login_attempts")),
    ("notifications", None, ("send", "view_logs")),
    ("dashboard", None, ("view", "stats")),
    ("settings", None, ("view", "edit")),
]


def build_default_registry() -> PermissionRegistry:
    """Create a registry populated with every core permission."""
    registry = PermissionRegistry()
    for module, resource, actions in CORE_PERMISSIONS:
        registry.register_resource(module, resource, actions)
    return registry


def build_default_catalog() -> PermissionCatalog:
    return build_default_registry().freeze()
