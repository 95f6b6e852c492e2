# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Enumeration types for database models."""

from enum import Enum


class ActorType(str, Enum):
    """Kind of principal performing an operation."""

    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"
    APPLICANT = "APPLICANT"


class ApplicationStatus(str, Enum):
    """Application lifecycle status.

    Status flow:
        DRAFT → SUBMITTED → ELIGIBLE ⇄ ON_HOLD
                    ↓           ↓
             NOT_ELIGIBLE   PROVISIONAL_SELECTED → SELECTED
                    ↓           ↓
                REJECTED   SELECTED_IN_OTHER_POST

    WITHDRAWN is reachable from DRAFT and SUBMITTED. See
    ``src.workflow.transitions`` for the authoritative table.
    """

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    ELIGIBLE = "ELIGIBLE"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    ON_HOLD = "ON_HOLD"
    PROVISIONAL_SELECTED = "PROVISIONAL_SELECTED"
    SELECTED = "SELECTED"
    SELECTED_IN_OTHER_POST = "SELECTED_IN_OTHER_POST"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
