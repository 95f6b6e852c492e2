# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for permission code syntax and wildcard parsing."""

import pytest

from src.exceptions import ValidationError
from src.rbac.wildcards import (
    ActionSuffix,
    FullWildcard,
    ModulePrefix,
    WildcardKind,
    is_valid_code,
    parse_pattern,
    require_pattern,
    split_code,
)


class TestPermissionCodes:
    @pytest.mark.parametrize(
        "code",
        ["users.view", "masters.districts.view", "audit.login_attempts", "a1.b2.c3.d4"],
    )
    def test_valid_codes(self, code):
        assert is_valid_code(code) is True

    @pytest.mark.parametrize(
        "code",
        ["users", "Users.view", "users.", ".view", "users..view", "users.*", "users-list.view", ""],
    )
    def test_invalid_codes(self, code):
        assert is_valid_code(code) is False

    def test_split_two_segments(self):
        assert split_code("users.view") == ("users", None, "view")

    def test_split_nested_resource(self):
        assert split_code("masters.districts.view") == ("masters", "districts", "view")
        assert split_code("a.b.c.d") == ("a", "b.c", "d")


class TestParsePattern:
    def test_full_wildcard(self):
        pattern = parse_pattern("*")
        assert isinstance(pattern, FullWildcard)
        assert pattern.kind == WildcardKind.FULL

    def test_module_prefix(self):
        pattern = parse_pattern("masters.*")
        assert pattern == ModulePrefix(("masters",))
        assert pattern.module == "masters"
        assert str(pattern) == "masters.*"

    def test_multi_level_module_prefix(self):
        pattern = parse_pattern("masters.districts.*")
        assert pattern == ModulePrefix(("masters", "districts"))

    def test_action_suffix(self):
        pattern = parse_pattern("*.view")
        assert pattern == ActionSuffix("view")
        assert str(pattern) == "*.view"

    @pytest.mark.parametrize(
        "value", ["**", "*.*", "users*", "*users", "users.*.view", ".*", "*.", "Users.*", "users.view"]
    )
    def test_invalid_patterns(self, value):
        assert parse_pattern(value) is None

    def test_require_pattern_raises_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            require_pattern("users.*.view")
        assert exc_info.value.kind == "validation_error"


class TestMatching:
    def test_module_prefix_matches_only_below_prefix(self):
        pattern = parse_pattern("users.*")
        assert pattern.matches("users.view")
        assert pattern.matches("users.profile.edit")
        assert not pattern.matches("users")
        assert not pattern.matches("usersx.view")
        assert not pattern.matches("roles.view")

    def test_multi_level_prefix(self):
        pattern = parse_pattern("masters.districts.*")
        assert pattern.matches("masters.districts.view")
        assert not pattern.matches("masters.talukas.view")
        assert not pattern.matches("masters.districts")

    def test_action_suffix_matches_last_segment(self):
        pattern = parse_pattern("*.view")
        assert pattern.matches("users.view")
        assert pattern.matches("masters.districts.view")
        assert not pattern.matches("users.view_logs")
        assert not pattern.matches("view")
