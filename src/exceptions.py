# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Domain exceptions surfaced at the request boundary.

Every error carries a stable ``kind`` tag that clients can check by machine,
plus the HTTP status code the API layer renders it with.
"""

from collections.abc import Iterable


class PortalError(Exception):
    """Base class for recoverable portal errors."""

    kind: str = "error"
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "kind": self.kind, "message": self.message}


class ValidationError(PortalError):
    """Malformed permission code, wildcard pattern or input value."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(PortalError):
    """Missing role, permission, application or user."""

    kind = "not_found"
    status_code = 404


class ConflictError(PortalError):
    """Duplicate code, protected deletion or concurrent modification."""

    kind = "conflict"
    status_code = 409


class ForbiddenError(PortalError):
    """The actor is not allowed to perform the operation."""

    kind = "forbidden"
    status_code = 403

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.missing:
            data["missing"] = self.missing
        return data


class InvalidTransitionError(PortalError):
    """The requested status edge does not exist in the transition table."""

    kind = "invalid_transition"
    status_code = 422

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Invalid status transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class InternalFailureError(PortalError):
    """Persistence failure during an atomic commit.

    The message passed in is logged by the caller; clients only ever see the
    generic text from :meth:`to_dict`.
    """

    kind = "internal_failure"
    status_code = 500

    def to_dict(self) -> dict:
        return {
            "success": False,
            "kind": self.kind,
            "message": "An unexpected error occurred",
        }
