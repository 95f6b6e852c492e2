# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
# src/rbac/roles.py
from src.rbac.permissions import (
    APPLICATIONS_APPROVE,
    APPLICATIONS_REJECT,
    APPLICATIONS_REVIEW,
    APPLICATIONS_VERIFY,
    APPLICATIONS_VIEW,
)
from src.rbac.wildcards import FULL_WILDCARD

SUPER_ADMIN = "SUPER_ADMIN"

# Default roles to seed on first run
# Only SUPER_ADMIN is a system role (is_system=True) and cannot be deleted
# Other roles are seeded as regular roles and can be fully managed via the API
DEFAULT_ROLES = [
    {
        "code": SUPER_ADMIN,
        "name": "Super Admin",
        "is_system": True,
        "description": "Grants all permissions across the entire system.",
        "permissions": [],
        "wildcards": [FULL_WILDCARD],
    },
    {
        "code": "ADMIN",
        "name": "Administrator",
        "is_system": False,
        "description": "Manages master data, applications and reports.",
        "permissions": [
            APPLICATIONS_VIEW,
            APPLICATIONS_REVIEW,
            APPLICATIONS_APPROVE,
            APPLICATIONS_REJECT,
            APPLICATIONS_VERIFY,
        ],
        "wildcards": ["masters.*", "reports.*", "dashboard.*"],
    },
    {
        "code": "VERIFICATION_OFFICER",
        "name": "Verification Officer",
        "is_system": False,
        "description": "Verifies submitted applications and documents.",
        "permissions": [
            APPLICATIONS_VIEW,
            APPLICATIONS_VERIFY,
            "applicants.view",
            "applicants.verify_documents",
        ],
        "wildcards": [],
    },
    {
        "code": "VIEWER",
        "name": "Viewer",
        "is_system": False,
        "description": "Read-only access to every module.",
        "permissions": [],
        "wildcards": ["*.view"],
    },
]
