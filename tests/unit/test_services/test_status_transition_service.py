# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Tests for guarded application status transitions."""

import uuid

import pytest
from sqlalchemy.exc import OperationalError

from src.context.actors import SYSTEM, AdminActor, ApplicantActor
from src.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalFailureError,
    InvalidTransitionError,
)
from src.models import ActorType, Application, ApplicationStatus, ApplicationStatusHistory, AuditLog
from src.rbac.gate import AuthorizationGate
from src.rbac.permissions import (
    APPLICATIONS_APPROVE,
    APPLICATIONS_REJECT,
    APPLICATIONS_REVIEW,
    APPLICATIONS_VERIFY,
)
from src.services import status_transition_service as service

S = ApplicationStatus


def admin(*permissions, role_code="ADMIN"):
    return AdminActor(id=uuid.uuid4(), role_code=role_code, permissions=frozenset(permissions))


@pytest.fixture
def gate():
    return AuthorizationGate("SUPER_ADMIN")


def history(db_session, application):
    return service.get_status_history(db_session, application.id)


class TestApplicantTransitions:
    def test_owner_submits_draft(self, db_session, applicant, draft_application, gate):
        actor = ApplicantActor(id=applicant.id)
        application = service.apply_transition(
            db_session, draft_application, S.SUBMITTED, actor, gate=gate
        )

        assert application.status == S.SUBMITTED
        assert application.is_locked is True
        assert application.submitted_at is not None

        entries = history(db_session, application)
        assert len(entries) == 1
        assert entries[0].old_status == S.DRAFT
        assert entries[0].new_status == S.SUBMITTED
        assert entries[0].changed_by_id == applicant.id
        assert entries[0].changed_by_type == ActorType.APPLICANT

    def test_other_applicant_forbidden(self, db_session, draft_application, gate):
        with pytest.raises(ForbiddenError):
            service.apply_transition(
                db_session, draft_application, S.SUBMITTED, ApplicantActor(id=uuid.uuid4()), gate=gate
            )
        db_session.refresh(draft_application)
        assert draft_application.status == S.DRAFT
        assert history(db_session, draft_application) == []

    def test_applicant_cannot_take_admin_edge(
        self, db_session, applicant, make_application, gate
    ):
        application = make_application(applicant, S.SUBMITTED)
        with pytest.raises(ForbiddenError):
            service.apply_transition(
                db_session, application, S.ELIGIBLE, ApplicantActor(id=applicant.id), gate=gate
            )

    def test_admin_cannot_submit_for_applicant(self, db_session, draft_application, gate):
        with pytest.raises(ForbiddenError):
            service.apply_transition(
                db_session, draft_application, S.SUBMITTED, admin(role_code="SUPER_ADMIN"), gate=gate
            )

    def test_withdraw(self, db_session, applicant, make_application, gate):
        application = make_application(applicant, S.SUBMITTED)
        service.apply_transition(
            db_session, application, S.WITHDRAWN, ApplicantActor(id=applicant.id), gate=gate
        )
        assert application.status == S.WITHDRAWN


class TestAdminTransitions:
    @pytest.mark.parametrize(
        ("from_status", "to_status", "permission"),
        [
            (S.SUBMITTED, S.ELIGIBLE, APPLICATIONS_VERIFY),
            (S.SUBMITTED, S.NOT_ELIGIBLE, APPLICATIONS_VERIFY),
            (S.ELIGIBLE, S.ON_HOLD, APPLICATIONS_REVIEW),
            (S.ON_HOLD, S.ELIGIBLE, APPLICATIONS_REVIEW),
            (S.ELIGIBLE, S.PROVISIONAL_SELECTED, APPLICATIONS_APPROVE),
            (S.PROVISIONAL_SELECTED, S.SELECTED, APPLICATIONS_APPROVE),
            (S.ELIGIBLE, S.SELECTED_IN_OTHER_POST, APPLICATIONS_APPROVE),
            (S.NOT_ELIGIBLE, S.REJECTED, APPLICATIONS_REJECT),
        ],
    )
    def test_required_permission(
        self, db_session, applicant, make_application, gate, from_status, to_status, permission
    ):
        application = make_application(applicant, from_status)
        with pytest.raises(ForbiddenError) as exc_info:
            service.apply_transition(
                db_session, application, to_status, admin("applications.view"), gate=gate
            )
        assert exc_info.value.missing == [permission]

        service.apply_transition(db_session, application, to_status, admin(permission), gate=gate)
        assert application.status == to_status

    def test_hold_release_needs_review_not_verify(
        self, db_session, applicant, make_application, gate
    ):
        application = make_application(applicant, S.ON_HOLD)
        with pytest.raises(ForbiddenError):
            service.apply_transition(
                db_session, application, S.ELIGIBLE, admin(APPLICATIONS_VERIFY), gate=gate
            )

    def test_wildcard_holder_allowed(self, db_session, applicant, make_application, gate):
        application = make_application(applicant, S.SUBMITTED)
        service.apply_transition(
            db_session, application, S.ELIGIBLE, admin("applications.*"), gate=gate
        )
        assert application.status == S.ELIGIBLE

    def test_super_admin_passes(self, db_session, applicant, make_application, gate):
        application = make_application(applicant, S.ELIGIBLE)
        service.apply_transition(
            db_session, application, S.REJECTED, admin(role_code="SUPER_ADMIN"), gate=gate
        )
        assert application.status == S.REJECTED

    def test_system_actor_allowed(self, db_session, applicant, make_application, gate):
        application = make_application(applicant, S.SUBMITTED)
        service.apply_transition(db_session, application, S.NOT_ELIGIBLE, SYSTEM, gate=gate)
        entry = history(db_session, application)[0]
        assert entry.changed_by_id is None
        assert entry.changed_by_type == ActorType.SYSTEM


class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "terminal", [S.SELECTED, S.SELECTED_IN_OTHER_POST, S.REJECTED, S.WITHDRAWN]
    )
    def test_terminal_statuses_admit_nothing(
        self, db_session, applicant, make_application, gate, terminal
    ):
        application = make_application(applicant, terminal)
        for target in ApplicationStatus:
            with pytest.raises(InvalidTransitionError):
                service.apply_transition(
                    db_session, application, target, admin(role_code="SUPER_ADMIN"), gate=gate
                )

    def test_skipping_a_step(self, db_session, draft_application, gate):
        with pytest.raises(InvalidTransitionError) as exc_info:
            service.apply_transition(
                db_session, draft_application, S.SELECTED, admin(role_code="SUPER_ADMIN"), gate=gate
            )
        assert exc_info.value.kind == "invalid_transition"
        assert exc_info.value.from_status == "DRAFT"

    def test_invalid_checked_before_authority(self, db_session, draft_application, gate):
        with pytest.raises(InvalidTransitionError):
            service.apply_transition(
                db_session, draft_application, S.ELIGIBLE, ApplicantActor(id=uuid.uuid4()), gate=gate
            )


def test_remarks_and_metadata_recorded(db_session, applicant, make_application, gate):
    application = make_application(applicant, S.ELIGIBLE)
    service.apply_transition(
        db_session,
        application,
        S.ON_HOLD,
        admin(APPLICATIONS_REVIEW),
        remarks="Awaiting caste certificate",
        metadata={"ticket": 42},
        gate=gate,
    )
    entry = history(db_session, application)[0]
    assert entry.remarks == "Awaiting caste certificate"
    assert entry.metadata_json == {"ticket": 42}


def test_audit_event_recorded_after_commit(db_session, applicant, make_application, gate):
    application = make_application(applicant, S.SUBMITTED)
    service.apply_transition(db_session, application, S.ELIGIBLE, SYSTEM, gate=gate)

    event = db_session.query(AuditLog).filter_by(action="application.status_change").one()
    assert event.entity_id == str(application.id)
    assert event.details == {"from": "SUBMITTED", "to": "ELIGIBLE", "remarks": None}


def test_racing_transitions_one_wins(
    db_session, session_factory, applicant, make_application, gate
):
    application = make_application(applicant, S.ELIGIBLE)
    first_session = session_factory()
    second_session = session_factory()
    try:
        first = first_session.get(Application, application.id)
        second = second_session.get(Application, application.id)

        service.apply_transition(
            first_session, first, S.PROVISIONAL_SELECTED, admin(APPLICATIONS_APPROVE), gate=gate
        )
        with pytest.raises(ConflictError):
            service.apply_transition(
                second_session, second, S.REJECTED, admin(APPLICATIONS_REJECT), gate=gate
            )
    finally:
        first_session.close()
        second_session.close()

    db_session.expire_all()
    stored = db_session.get(Application, application.id)
    assert stored.status == S.PROVISIONAL_SELECTED
    entries = db_session.query(ApplicationStatusHistory).filter_by(application_id=application.id).all()
    assert [e.new_status for e in entries] == [S.PROVISIONAL_SELECTED]


def test_lock_serialized_transitions_one_wins(
    db_session, session_factory, applicant, make_application, gate
):
    # Second request only reads the row after the first committed, as it
    # would after waiting on SELECT ... FOR UPDATE.
    application = make_application(applicant, S.ELIGIBLE)
    first_session = session_factory()
    second_session = session_factory()
    try:
        service.transition_application(
            first_session,
            application.id,
            S.PROVISIONAL_SELECTED,
            admin(APPLICATIONS_APPROVE),
            gate=gate,
            expected_status=S.ELIGIBLE,
        )
        with pytest.raises(ConflictError):
            service.transition_application(
                second_session,
                application.id,
                S.REJECTED,
                admin(APPLICATIONS_REJECT),
                gate=gate,
                expected_status=S.ELIGIBLE,
            )
    finally:
        first_session.close()
        second_session.close()

    db_session.expire_all()
    assert db_session.get(Application, application.id).status == S.PROVISIONAL_SELECTED
    entries = service.get_status_history(db_session, application.id)
    assert [(e.old_status, e.new_status) for e in entries] == [
        (S.ELIGIBLE, S.PROVISIONAL_SELECTED)
    ]


def test_expected_status_checked_before_transition_table(
    db_session, applicant, make_application, gate
):
    application = make_application(applicant, S.REJECTED)
    with pytest.raises(ConflictError):
        service.apply_transition(
            db_session, application, S.ELIGIBLE, SYSTEM, gate=gate, expected_status=S.SUBMITTED
        )


def test_matching_expected_status_passes(db_session, applicant, make_application, gate):
    application = make_application(applicant, S.SUBMITTED)
    service.apply_transition(
        db_session, application, S.ELIGIBLE, SYSTEM, gate=gate, expected_status=S.SUBMITTED
    )
    assert application.status == S.ELIGIBLE


def test_persistence_failure_becomes_internal_failure(
    db_session, applicant, make_application, gate, monkeypatch
):
    application = make_application(applicant, S.SUBMITTED)

    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    with pytest.raises(InternalFailureError) as exc_info:
        service.apply_transition(db_session, application, S.ELIGIBLE, SYSTEM, gate=gate)
    assert exc_info.value.to_dict()["message"] == "An unexpected error occurred"

    monkeypatch.undo()
    db_session.expire_all()
    assert db_session.get(Application, application.id).status == S.SUBMITTED
    assert db_session.query(ApplicationStatusHistory).count() == 0


def test_transition_by_id_and_create(db_session, applicant, gate):
    application = service.create_application(db_session, applicant.id, post_code="POST-07")
    assert application.status == S.DRAFT
    assert application.is_locked is False
    assert application.application_no.startswith("APP-")

    updated = service.transition_application(
        db_session, application.id, S.SUBMITTED, ApplicantActor(id=applicant.id), gate=gate
    )
    assert updated.status == S.SUBMITTED


class TestEnsureEditable:
    def test_owner_can_edit_draft(self, applicant, draft_application):
        service.ensure_editable_by_applicant(draft_application, applicant.id)

    def test_locked_status_rejected(self, applicant, make_application):
        application = make_application(applicant, S.SUBMITTED)
        with pytest.raises(ForbiddenError, match="locked"):
            service.ensure_editable_by_applicant(application, applicant.id)

    def test_non_owner_rejected(self, draft_application):
        with pytest.raises(ForbiddenError):
            service.ensure_editable_by_applicant(draft_application, uuid.uuid4())
