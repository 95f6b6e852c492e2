# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Application status schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import ActorType, ApplicationStatus


class ApplicationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    application_no: str
    applicant_id: uuid.UUID
    post_code: str | None
    status: ApplicationStatus
    is_locked: bool
    submitted_at: datetime | None
    allowed_transitions: list[ApplicationStatus] = []


class TransitionRequest(BaseModel):
    """Request body for a status change."""

    status: ApplicationStatus
    # Status the client last saw; 409 if the application has moved on
    expected_status: ApplicationStatus | None = None
    remarks: str | None = Field(default=None, max_length=2000)
    metadata: dict[str, Any] | None = None


class StatusHistorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    old_status: ApplicationStatus | None
    new_status: ApplicationStatus
    changed_by_id: uuid.UUID | None
    changed_by_type: ActorType
    remarks: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="metadata_json")
    created_at: datetime
