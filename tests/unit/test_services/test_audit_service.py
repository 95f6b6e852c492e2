# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for audit_service."""

import logging
import uuid

from sqlalchemy.orm import Session

from src.context.actor_context import actor_scope, authenticated_context
from src.models import ActorType, AuditLog
from src.services import audit_service


def test_record_event_uses_current_actor(db_session):
    actor_id = uuid.uuid4()
    with actor_scope(authenticated_context(actor_id, ActorType.ADMIN)):
        stored = audit_service.record_event(
            db_session, "role.create", "role", "r-1", {"code": "CLERK"}
        )

    assert stored is True
    event = db_session.query(AuditLog).one()
    assert event.actor_id == actor_id
    assert event.actor_type == ActorType.ADMIN
    assert event.entity_id == "r-1"
    assert event.details == {"code": "CLERK"}


def test_record_event_without_context_is_system(db_session):
    audit_service.record_event(db_session, "permission.sync")
    event = db_session.query(AuditLog).one()
    assert event.actor_id is None
    assert event.actor_type == ActorType.SYSTEM


def test_record_event_failure_is_swallowed(db_session, monkeypatch, caplog):
    def broken_commit(self):
        raise RuntimeError("audit table unavailable")

    monkeypatch.setattr(Session, "commit", broken_commit)
    with caplog.at_level(logging.ERROR, logger="src.services.audit_service"):
        stored = audit_service.record_event(db_session, "role.delete", "role", "r-2")

    assert stored is False
    assert "audit table unavailable" in caplog.text
    monkeypatch.undo()
    assert db_session.query(AuditLog).count() == 0


def test_get_events_filters_by_entity(db_session):
    audit_service.record_event(db_session, "role.create", "role", "a")
    audit_service.record_event(db_session, "role.update", "role", "a")
    audit_service.record_event(db_session, "role.create", "role", "b")

    events = audit_service.get_events(db_session, entity_type="role", entity_id="a")
    assert [e.action for e in events] == ["role.update", "role.create"]
