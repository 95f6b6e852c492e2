# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for permission matching."""

from src.rbac.evaluator import (
    PermissionEvaluator,
    expand_wildcards,
    has_all_permissions,
    has_any_permission,
    has_permission,
    missing_permissions,
)
from src.rbac.registry import PermissionRegistry


def build_catalog():
    registry = PermissionRegistry()
    registry.register_resource("users", actions=("view", "create"))
    registry.register_resource("masters", "districts", actions=("view", "edit"))
    registry.register_resource("masters", "talukas", actions=("view",))
    return registry.freeze()


class TestHasPermission:
    def test_exact_match(self):
        assert has_permission({"users.view"}, "users.view")
        assert not has_permission({"users.view"}, "users.create")

    def test_full_wildcard(self):
        assert has_permission({"*"}, "anything.at.all")

    def test_module_prefix(self):
        assert has_permission({"users.*"}, "users.create")
        assert not has_permission({"users.*"}, "roles.create")

    def test_module_prefix_is_segment_based(self):
        assert not has_permission({"user.*"}, "users.view")

    def test_action_suffix(self):
        assert has_permission({"*.view"}, "masters.districts.view")
        assert not has_permission({"*.view"}, "users.create")

    def test_multi_level_prefix(self):
        granted = {"masters.districts.*"}
        assert has_permission(granted, "masters.districts.edit")
        assert not has_permission(granted, "masters.talukas.view")

    def test_empty_granted_set(self):
        assert not has_permission(set(), "users.view")

    def test_malformed_entries_only_match_by_equality(self):
        assert not has_permission({"users.*.view"}, "users.list.view")
        assert has_permission({"users.*.view"}, "users.*.view")

    def test_accepts_any_iterable(self):
        assert has_permission(["users.view"], "users.view")


class TestCombinators:
    def test_any(self):
        assert has_any_permission({"users.view"}, ["roles.view", "users.view"])
        assert not has_any_permission({"users.view"}, ["roles.view"])
        assert not has_any_permission({"users.view"}, [])

    def test_all(self):
        assert has_all_permissions({"users.*"}, ["users.view", "users.create"])
        assert not has_all_permissions({"users.view"}, ["users.view", "users.create"])
        assert has_all_permissions(set(), [])

    def test_missing_permissions_keeps_order(self):
        missing = missing_permissions({"users.view"}, ["roles.view", "users.view", "roles.edit"])
        assert missing == ["roles.view", "roles.edit"]


class TestExpandWildcards:
    def test_full_wildcard_expands_to_catalog(self):
        catalog = build_catalog()
        assert expand_wildcards({"*"}, catalog) == catalog.codes

    def test_empty_expands_to_empty(self):
        assert expand_wildcards(set(), build_catalog()) == set()

    def test_module_prefix(self):
        assert expand_wildcards({"masters.*"}, build_catalog()) == {
            "masters.districts.view",
            "masters.districts.edit",
            "masters.talukas.view",
        }

    def test_literals_pass_through(self):
        expanded = expand_wildcards({"*.create", "legacy.code"}, build_catalog())
        assert expanded == {"users.create", "legacy.code"}

    def test_evaluator_uses_injected_catalog(self):
        evaluator = PermissionEvaluator(build_catalog())
        assert evaluator.expand_wildcards({"*.view"}) == {
            "users.view",
            "masters.districts.view",
            "masters.talukas.view",
        }
        assert evaluator.has_permission({"*.view"}, "users.view")
