# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application status API endpoints."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.api.deps import get_current_actor, get_db, get_gate
from src.context.actors import Actor, AdminActor, ApplicantActor
from src.exceptions import ForbiddenError
from src.models import Application
from src.rbac.gate import AuthorizationGate
from src.rbac.permissions import APPLICATIONS_VIEW
from src.schemas.application import (
    ApplicationSchema,
    StatusHistorySchema,
    TransitionRequest,
)
from src.services import status_transition_service
from src.workflow.transitions import allowed_transitions

router = APIRouter(prefix="/applications", tags=["applications"])


def _to_schema(application: Application) -> ApplicationSchema:
    return ApplicationSchema.model_validate(application).model_copy(
        update={"allowed_transitions": allowed_transitions(application.status)}
    )


def _ensure_can_view(actor: Actor, application: Application, gate: AuthorizationGate) -> None:
    if isinstance(actor, ApplicantActor):
        if application.applicant_id != actor.id:
            raise ForbiddenError("Applicants may only view their own applications")
        return
    if isinstance(actor, AdminActor):
        gate.check(actor, [APPLICATIONS_VIEW])


@router.get("/{application_id}", response_model=ApplicationSchema)
def get_application(
    application_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Get an application with the statuses it can move to next."""
    application = status_transition_service.get_application(db, application_id)
    _ensure_can_view(actor, application, gate)
    return _to_schema(application)


@router.post("/{application_id}/transitions", response_model=ApplicationSchema)
def transition_application(
    application_id: uuid.UUID,
    data: TransitionRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Move an application to a new status.

    The edge must exist in the transition table and the actor must have
    authority for it; otherwise 422 or 403 is returned. When
    ``expected_status`` no longer matches, 409 is returned.
    """
    application = status_transition_service.transition_application(
        db,
        application_id,
        data.status,
        actor,
        remarks=data.remarks,
        metadata=data.metadata,
        gate=gate,
        expected_status=data.expected_status,
    )
    return _to_schema(application)


@router.get("/{application_id}/status-history", response_model=list[StatusHistorySchema])
def get_status_history(
    application_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    gate: AuthorizationGate = Depends(get_gate),
):
    application = status_transition_service.get_application(db, application_id)
    _ensure_can_view(actor, application, gate)
    return status_transition_service.get_status_history(db, application_id)
