# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Pure permission matching over granted codes and wildcard grants."""

from collections.abc import Iterable

from src.rbac.registry import PermissionCatalog
from src.rbac.wildcards import FULL_WILDCARD, is_wildcard, parse_pattern


def has_permission(granted: Iterable[str], required: str) -> bool:
    """Check whether a granted set satisfies a required permission code.

    Matches exact codes, the full wildcard ``*``, module prefixes such as
    ``users.*`` and action suffixes such as ``*.view``. Granted entries that
    are not valid patterns only ever match by equality.
    """
    if not isinstance(granted, (set, frozenset)):
        granted = set(granted)
    if required in granted or FULL_WILDCARD in granted:
        return True

    for entry in granted:
        if not is_wildcard(entry):
            continue
        pattern = parse_pattern(entry)
        if pattern is not None and pattern.matches(required):
            return True
    return False


def has_any_permission(granted: Iterable[str], required: Iterable[str]) -> bool:
    """OR combinator: at least one required code is satisfied."""
    granted = frozenset(granted)
    return any(has_permission(granted, code) for code in required)


def has_all_permissions(granted: Iterable[str], required: Iterable[str]) -> bool:
    """AND combinator: every required code is satisfied."""
    granted = frozenset(granted)
    return all(has_permission(granted, code) for code in required)


def missing_permissions(granted: Iterable[str], required: Iterable[str]) -> list[str]:
    """Return the required codes the granted set does not satisfy, in order."""
    granted = frozenset(granted)
    return [code for code in required if not has_permission(granted, code)]


def expand_wildcards(granted: Iterable[str], catalog: PermissionCatalog) -> set[str]:
    """Materialize wildcard grants against a catalog.

    Literal codes are passed through unchanged. Meant for display and audit
    output; authorization checks use :func:`has_permission` directly.
    """
    expanded: set[str] = set()
    for entry in granted:
        if not is_wildcard(entry):
            expanded.add(entry)
            continue
        pattern = parse_pattern(entry)
        if pattern is None:
            continue
        expanded.update(d.code for d in catalog if pattern.matches(d.code))
    return expanded


class PermissionEvaluator:
    """Permission checks bound to an injected catalog."""

    def __init__(self, catalog: PermissionCatalog) -> None:
        self.catalog = catalog

    def has_permission(self, granted: Iterable[str], required: str) -> bool:
        return has_permission(granted, required)

    def has_any_permission(self, granted: Iterable[str], required: Iterable[str]) -> bool:
        return has_any_permission(granted, required)

    def has_all_permissions(self, granted: Iterable[str], required: Iterable[str]) -> bool:
        return has_all_permissions(granted, required)

    def missing_permissions(self, granted: Iterable[str], required: Iterable[str]) -> list[str]:
        return missing_permissions(granted, required)

    def expand_wildcards(self, granted: Iterable[str]) -> set[str]:
        return expand_wildcards(granted, self.catalog)
