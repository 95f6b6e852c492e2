# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Permission code syntax and the three wildcard pattern forms.

Codes look like ``module[.resource].action``: lowercase alphanumeric or
underscore segments joined by dots, at least two segments. Wildcards come in
exactly three shapes:

    *                   full wildcard, matches every code
    masters.*           module prefix, matches codes below ``masters``
    masters.districts.* multi-level module prefix
    *.view              action suffix, matches codes whose action is ``view``

Patterns are parsed once into immutable objects and matched on code segments,
never on raw string prefixes.
"""

import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from src.exceptions import ValidationError

SEGMENT = r"[a-z0-9_]+"
CODE_RE = re.compile(rf"^{SEGMENT}(\.{SEGMENT})+$")
SEGMENT_RE = re.compile(rf"^{SEGMENT}$")

FULL_WILDCARD = "*"


class WildcardKind(str, Enum):
    """Wildcard pattern variants."""

    FULL = "full"
    MODULE = "module"
    ACTION = "action"


def is_valid_code(code: str) -> bool:
    """Check whether a string is a well-formed permission code."""
    return bool(code) and CODE_RE.match(code) is not None


def split_code(code: str) -> tuple[str, str | None, str]:
    """Split a well-formed code into (module, resource, action)."""
    parts = code.split(".")
    resource = ".".join(parts[1:-1]) or None
    return parts[0], resource, parts[-1]


@dataclass(frozen=True)
class FullWildcard:
    kind = WildcardKind.FULL

    def matches(self, code: str) -> bool:
        return True

    def __str__(self) -> str:
        return FULL_WILDCARD


@dataclass(frozen=True)
class ModulePrefix:
    segments: tuple[str, ...]
    kind = WildcardKind.MODULE

    def matches(self, code: str) -> bool:
        parts = tuple(code.split("."))
        return len(parts) > len(self.segments) and parts[: len(self.segments)] == self.segments

    @property
    def module(self) -> str:
        return self.segments[0]

    def __str__(self) -> str:
        return ".".join(self.segments) + ".*"


@dataclass(frozen=True)
class ActionSuffix:
    action: str
    kind = WildcardKind.ACTION

    def matches(self, code: str) -> bool:
        return code.rsplit(".", 1)[-1] == self.action and "." in code

    def __str__(self) -> str:
        return f"*.{self.action}"


WildcardPattern = FullWildcard | ModulePrefix | ActionSuffix


def is_wildcard(value: str) -> bool:
    """Cheap check for strings that look like a wildcard grant."""
    return "*" in value


@lru_cache(maxsize=1024)
def parse_pattern(value: str) -> WildcardPattern | None:
    """Parse a wildcard string, returning None when it is not valid syntax."""
    if value == FULL_WILDCARD:
        return FullWildcard()
    if value.startswith("*."):
        action = value[2:]
        if SEGMENT_RE.match(action):
            return ActionSuffix(action)
        return None
    if value.endswith(".*"):
        prefix = value[:-2].split(".")
        if prefix and all(SEGMENT_RE.match(p) for p in prefix):
            return ModulePrefix(tuple(prefix))
    return None


def require_pattern(value: str) -> WildcardPattern:
    """Parse a wildcard string or raise ValidationError."""
    pattern = parse_pattern(value)
    if pattern is None:
        raise ValidationError(
            f"Invalid wildcard pattern: {value}. Use '*', 'module.*', or '*.action'"
        )
    return pattern
