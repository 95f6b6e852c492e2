"""Services package."""
from src.services import (
    audit_service,
    auth_service,
    permission_resolver,
    permission_service,
    rbac_seed_service,
    rbac_service,
    status_transition_service,
)

__all__ = [
    "audit_service",
    "auth_service",
    "permission_resolver",
    "permission_service",
    "rbac_seed_service",
    "rbac_service",
    "status_transition_service",
]
