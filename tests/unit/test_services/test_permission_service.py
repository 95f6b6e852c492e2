# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for permission_service."""

import uuid

import pytest

from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.models import Permission
from src.rbac.registry import PermissionRegistry
from src.services import permission_service


def small_catalog():
    registry = PermissionRegistry()
    registry.register_resource("users", actions=("view", "edit"))
    registry.register_resource("masters", "districts", actions=("view",))
    return registry.freeze()


def test_sync_from_catalog_creates_then_is_idempotent(db_session):
    result = permission_service.sync_from_catalog(db_session, small_catalog())
    assert result == {"created": 3, "updated": 0, "total": 3}

    again = permission_service.sync_from_catalog(db_session, small_catalog())
    assert again == {"created": 0, "updated": 0, "total": 3}
    assert db_session.query(Permission).count() == 3


def test_sync_refreshes_changed_metadata(db_session):
    permission_service.sync_from_catalog(db_session, small_catalog())
    permission = permission_service.get_permission_by_code(db_session, "users.view")
    permission.name = "Old name"
    db_session.commit()

    result = permission_service.sync_from_catalog(db_session, small_catalog())
    assert result["updated"] == 1
    db_session.refresh(permission)
    assert permission.name == "View Users"


def test_create_permission_derives_fields(db_session):
    permission = permission_service.create_permission(
        db_session, "masters.talukas.view", description="View talukas"
    )
    assert permission.module == "masters"
    assert permission.resource == "talukas"
    assert permission.action == "view"
    assert permission.is_active is True


def test_create_permission_rejects_bad_code(db_session):
    with pytest.raises(ValidationError):
        permission_service.create_permission(db_session, "Masters.View")


def test_create_permission_duplicate_conflicts(db_session):
    permission_service.create_permission(db_session, "users.view")
    with pytest.raises(ConflictError):
        permission_service.create_permission(db_session, "users.view")


def test_update_permission_keeps_code(db_session):
    permission = permission_service.create_permission(db_session, "users.view")
    updated = permission_service.update_permission(
        db_session, permission.id, name="See users", is_active=False
    )
    assert updated.code == "users.view"
    assert updated.name == "See users"
    assert updated.is_active is False


def test_delete_permission_is_soft(db_session):
    permission = permission_service.create_permission(db_session, "users.view")
    permission_service.delete_permission(db_session, permission.id)

    assert db_session.query(Permission).filter_by(code="users.view").one().is_deleted is True
    with pytest.raises(NotFoundError):
        permission_service.get_permission(db_session, permission.id)
    assert permission_service.list_permissions(db_session) == []


def test_get_permission_not_found(db_session):
    with pytest.raises(NotFoundError):
        permission_service.get_permission(db_session, uuid.uuid4())


def test_grouped_by_module(db_session):
    permission_service.sync_from_catalog(db_session, small_catalog())
    grouped = permission_service.get_permissions_by_module(db_session)
    assert list(grouped) == ["masters", "users"]
    assert [p.code for p in grouped["users"]] == ["users.edit", "users.view"]


def test_active_catalog_and_wildcard_patterns(db_session):
    permission_service.sync_from_catalog(db_session, small_catalog())
    inactive = permission_service.get_permission_by_code(db_session, "users.edit")
    permission_service.update_permission(db_session, inactive.id, is_active=False)

    catalog = permission_service.load_active_catalog(db_session)
    assert catalog.codes == {"users.view", "masters.districts.view"}

    patterns = permission_service.available_wildcard_patterns(db_session)
    assert [p["pattern"] for p in patterns] == ["*", "masters.*", "users.*", "*.view"]
