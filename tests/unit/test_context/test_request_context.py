# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for the actor context derived from request headers."""

import uuid

from starlette.datastructures import Headers

from src.api.middleware import context_from_headers
from src.models import ActorType
from src.security import create_access_token


def bearer(subject, actor_type=ActorType.ADMIN):
    return Headers({"authorization": f"Bearer {create_access_token(subject, actor_type)}"})


def test_no_token_is_system(db_session):
    context = context_from_headers(Headers({}), db_session)
    assert context.actor_type == ActorType.SYSTEM
    assert context.actor_id is None


def test_invalid_token_is_system(db_session):
    context = context_from_headers(Headers({"authorization": "Bearer junk"}), db_session)
    assert context.actor_type == ActorType.SYSTEM


def test_active_admin(seeded_db, make_admin):
    user = make_admin("VIEWER", username="reader")
    context = context_from_headers(bearer(user.id), seeded_db)
    assert context.actor_id == user.id
    assert context.actor_type == ActorType.ADMIN


def test_applicant(db_session, applicant):
    context = context_from_headers(bearer(applicant.id, ActorType.APPLICANT), db_session)
    assert context.actor_id == applicant.id
    assert context.actor_type == ActorType.APPLICANT


def test_disabled_admin_falls_back_to_system(seeded_db, make_admin):
    user = make_admin("VIEWER", username="former")
    user.is_active = False
    seeded_db.commit()

    context = context_from_headers(bearer(user.id), seeded_db)
    assert context.actor_id is None
    assert context.actor_type == ActorType.SYSTEM


def test_deleted_admin_falls_back_to_system(seeded_db, make_admin):
    user = make_admin("VIEWER", username="removed")
    user.soft_delete()
    seeded_db.commit()

    context = context_from_headers(bearer(user.id), seeded_db)
    assert context.actor_type == ActorType.SYSTEM


def test_unknown_subject_falls_back_to_system(db_session):
    context = context_from_headers(bearer(uuid.uuid4()), db_session)
    assert context.actor_type == ActorType.SYSTEM
