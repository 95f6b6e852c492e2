# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission registry and the immutable catalog it produces.

The registry is a builder: permissions are registered once at process start,
then ``freeze()`` returns a :class:`PermissionCatalog` that is handed to the
evaluator and resolver. The catalog never changes after construction, so it
can be read from any number of concurrent requests without locking.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType

from src.exceptions import ValidationError
from src.rbac.wildcards import FULL_WILDCARD, is_valid_code, split_code

logger = logging.getLogger(__name__)

STANDARD_ACTIONS = ("view", "create", "edit", "delete")

ACTION_LABELS = {
    "view": "View",
    "list": "List",
    "create": "Create",
    "edit": "Edit",
    "delete": "Delete",
    "manage": "Manage",
    "export": "Export",
    "approve": "Approve",
    "reject": "Reject",
    "publish": "Publish",
    "assign": "Assign",
    "verify": "Verify",
    "review": "Review",
}


def _humanize(value: str) -> str:
    return value.replace("_", " ").replace(".", " ").capitalize()


def action_label(action: str) -> str:
    return ACTION_LABELS.get(action, _humanize(action))


@dataclass(frozen=True)
class PermissionDefinition:
    """Metadata describing a single permission code."""

    code: str
    name: str
    module: str
    resource: str | None = None
    action: str | None = None
    description: str | None = None


class PermissionCatalog:
    """Read-only view over a set of permission definitions."""

    def __init__(self, definitions: Iterable[PermissionDefinition]) -> None:
        ordered = sorted(definitions, key=lambda d: d.code)
        self._by_code = MappingProxyType({d.code: d for d in ordered})

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __iter__(self) -> Iterator[PermissionDefinition]:
        return iter(self._by_code.values())

    def __len__(self) -> int:
        return len(self._by_code)

    @property
    def codes(self) -> frozenset[str]:
        return frozenset(self._by_code)

    def get(self, code: str) -> PermissionDefinition | None:
        return self._by_code.get(code)

    def modules(self) -> list[str]:
        return sorted({d.module for d in self})

    def actions(self) -> list[str]:
        return sorted({d.action for d in self if d.action})

    def by_module(self) -> dict[str, list[PermissionDefinition]]:
        """Group definitions by module, each group sorted by code."""
        grouped: dict[str, list[PermissionDefinition]] = {}
        for definition in self:
            grouped.setdefault(definition.module, []).append(definition)
        return grouped

    def wildcard_patterns(self) -> list[dict[str, str]]:
        """List the wildcard patterns that make sense for this catalog."""
        patterns = [
            {
                "pattern": FULL_WILDCARD,
                "description": "Full access - all permissions",
                "type": "full",
            }
        ]
        for module in self.modules():
            patterns.append(
                {
                    "pattern": f"{module}.*",
                    "description": f"All {module} permissions",
                    "type": "module",
                }
            )
        for action in self.actions():
            patterns.append(
                {
                    "pattern": f"*.{action}",
                    "description": f"{action} permission on all modules",
                    "type": "action",
                }
            )
        return patterns


class PermissionRegistry:
    """Collects permission definitions and validates them on the way in."""

    def __init__(self) -> None:
        self._definitions: dict[str, PermissionDefinition] = {}

    def __contains__(self, code: object) -> bool:
        return code in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def register(
        self,
        code: str,
        name: str | None = None,
        description: str | None = None,
    ) -> PermissionDefinition:
        """Register a permission code.

        Module, resource and action are derived from the code itself.
        Registering the same code twice with identical metadata is a no-op;
        any difference is rejected.

        Raises:
            ValidationError: If the code is malformed or conflicts with an
                existing registration.
        """
        if not is_valid_code(code):
            raise ValidationError(
                f"Invalid permission code '{code}': use lowercase "
                "alphanumeric/underscore segments joined by dots"
            )
        module, resource, action = split_code(code)
        definition = PermissionDefinition(
            code=code,
            name=name or f"{action_label(action)} {_humanize(resource or module)}",
            module=module,
            resource=resource,
            action=action,
            description=description,
        )

        existing = self._definitions.get(code)
        if existing is not None:
            if existing != definition:
                raise ValidationError(
                    f"Permission '{code}' is already registered with different metadata"
                )
            return existing

        self._definitions[code] = definition
        return definition

    def register_resource(
        self,
        module: str,
        resource: str | None = None,
        actions: Iterable[str] = STANDARD_ACTIONS,
    ) -> list[PermissionDefinition]:
        """Register one permission per action for a module or resource."""
        base = f"{module}.{resource}" if resource else module
        label = _humanize(resource or module)
        return [
            self.register(
                f"{base}.{action}",
                description=f"{action_label(action)} {label.lower()} data",
            )
            for action in actions
        ]

    def freeze(self) -> PermissionCatalog:
        """Snapshot the registered definitions into an immutable catalog."""
        logger.debug(f"Freezing permission catalog with {len(self)} codes")
        return PermissionCatalog(self._definitions.values())
