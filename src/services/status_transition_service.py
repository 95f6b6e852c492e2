# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Guarded application status changes.

Every status change goes through :func:`apply_transition`, which checks the
transition table and the authority table, then updates the application and
appends a history entry in a single commit.
"""

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from src.config import get_settings
from src.context.actors import Actor, AdminActor, ApplicantActor
from src.exceptions import (
    ConflictError,
    ForbiddenError,
    InternalFailureError,
    InvalidTransitionError,
    NotFoundError,
)
from src.models import Application, ApplicationStatus, ApplicationStatusHistory
from src.models.base import utcnow
from src.rbac.gate import AuthorizationGate
from src.workflow.transitions import (
    INITIAL_STATUS,
    authority_for,
    is_locked_status,
    is_valid_transition,
)

from . import audit_service

logger = logging.getLogger(__name__)


def _default_gate() -> AuthorizationGate:
    return AuthorizationGate(get_settings().super_admin_role_code)


def authorize_transition(
    application: Application,
    from_status: ApplicationStatus,
    to_status: ApplicationStatus,
    actor: Actor,
    gate: AuthorizationGate | None = None,
) -> None:
    """Raise ForbiddenError unless ``actor`` may take this edge."""
    gate = gate or _default_gate()
    authority = authority_for(from_status, to_status)

    if actor.actor_type not in authority.actor_types:
        logger.warning(
            f"{actor.actor_type.value} may not move application "
            f"{application.application_no} to {to_status.value}"
        )
        raise ForbiddenError(
            f"{actor.actor_type.value.capitalize()} actors cannot move an application "
            f"to {to_status.value}"
        )

    if isinstance(actor, ApplicantActor):
        if authority.owner_only and application.applicant_id != actor.id:
            logger.warning(
                f"Applicant {actor.id} tried to change application "
                f"{application.application_no} they do not own"
            )
            raise ForbiddenError("Applicants may only change their own applications")
        return

    if isinstance(actor, AdminActor) and authority.permission:
        gate.check(actor, [authority.permission])


def apply_transition(
    db: Session,
    application: Application,
    to_status: ApplicationStatus,
    actor: Actor,
    remarks: str | None = None,
    metadata: dict[str, Any] | None = None,
    gate: AuthorizationGate | None = None,
    expected_status: ApplicationStatus | None = None,
) -> Application:
    """Move an application to ``to_status`` and record the change.

    ``expected_status`` is the status the caller based its decision on. When
    given, the change is refused if the application has moved on since.

    Raises:
        ConflictError: If another transaction changed the application first
        InvalidTransitionError: If the edge is not in the transition table
        ForbiddenError: If the actor is not allowed to take the edge
        InternalFailureError: If the commit fails for any other reason
    """
    to_status = ApplicationStatus(to_status)
    from_status = application.status

    if expected_status is not None and from_status != ApplicationStatus(expected_status):
        logger.warning(
            f"Application {application.application_no} is {from_status.value}, "
            f"caller expected {ApplicationStatus(expected_status).value}"
        )
        raise ConflictError(
            f"Application status is {from_status.value}, not "
            f"{ApplicationStatus(expected_status).value}; reload and retry"
        )

    if not is_valid_transition(from_status, to_status):
        logger.warning(
            f"Rejected transition {from_status.value} -> {to_status.value} "
            f"for application {application.application_no}"
        )
        raise InvalidTransitionError(from_status.value, to_status.value)

    authorize_transition(application, from_status, to_status, actor, gate=gate)

    application.status = to_status
    application.is_locked = is_locked_status(to_status)
    if to_status == ApplicationStatus.SUBMITTED:
        application.submitted_at = utcnow()

    db.add(
        ApplicationStatusHistory(
            application_id=application.id,
            old_status=from_status,
            new_status=to_status,
            changed_by_id=actor.id,
            changed_by_type=actor.actor_type,
            remarks=remarks,
            metadata_json=metadata,
        )
    )

    application_no = application.application_no
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.warning(
            f"Concurrent status change on application {application_no}; "
            f"{from_status.value} -> {to_status.value} discarded"
        )
        raise ConflictError(
            "Application status was changed by another request; reload and retry"
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to commit status change for application {application_no}")
        raise InternalFailureError(f"Status change failed: {e}") from e

    db.refresh(application)
    logger.info(
        f"Application {application_no} moved {from_status.value} -> {to_status.value}"
    )
    audit_service.record_event(
        db,
        "application.status_change",
        "application",
        application.id,
        {"from": from_status.value, "to": to_status.value, "remarks": remarks},
    )
    return application


def get_application(
    db: Session, application_id: uuid.UUID, for_update: bool = False
) -> Application:
    query = db.query(Application).filter(
        Application.id == application_id, Application.is_deleted.is_(False)
    )
    if for_update:
        query = query.with_for_update()
    application = query.first()
    if not application:
        raise NotFoundError("Application not found")
    return application


def transition_application(
    db: Session,
    application_id: uuid.UUID,
    to_status: ApplicationStatus,
    actor: Actor,
    remarks: str | None = None,
    metadata: dict[str, Any] | None = None,
    gate: AuthorizationGate | None = None,
    expected_status: ApplicationStatus | None = None,
) -> Application:
    """Load an application under a row lock and apply a transition to it.

    A request that waited on the lock sees the status its competitor
    committed; ``expected_status`` turns that into a ConflictError instead of
    a second transition from the new status.
    """
    application = get_application(db, application_id, for_update=True)
    return apply_transition(
        db,
        application,
        to_status,
        actor,
        remarks=remarks,
        metadata=metadata,
        gate=gate,
        expected_status=expected_status,
    )


def create_application(
    db: Session, applicant_id: uuid.UUID, post_code: str | None = None
) -> Application:
    """Create a new application in the initial status."""
    application = Application(
        application_no=f"APP-{uuid.uuid4().hex[:12].upper()}",
        applicant_id=applicant_id,
        post_code=post_code,
        status=INITIAL_STATUS,
        is_locked=is_locked_status(INITIAL_STATUS),
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info(f"Created application {application.application_no}")
    return application


def get_status_history(
    db: Session, application_id: uuid.UUID
) -> list[ApplicationStatusHistory]:
    """Status history of an application, oldest first."""
    get_application(db, application_id)
    return (
        db.query(ApplicationStatusHistory)
        .filter(ApplicationStatusHistory.application_id == application_id)
        .order_by(ApplicationStatusHistory.created_at, ApplicationStatusHistory.id)
        .all()
    )


def ensure_editable_by_applicant(application: Application, applicant_id: uuid.UUID) -> None:
    """Raise ForbiddenError unless the applicant owns an unlocked application."""
    if application.applicant_id != applicant_id:
        raise ForbiddenError("Applicants may only edit their own applications")
    if application.is_locked or is_locked_status(application.status):
        raise ForbiddenError(
            f"Application is locked in status {application.status.value} and can no "
            "longer be edited"
        )
