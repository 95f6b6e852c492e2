# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Authenticated principals."""

import uuid
from dataclasses import dataclass, field

from src.models.enums import ActorType


@dataclass(frozen=True)
class AdminActor:
    """An administrator with a role and the permissions it carries."""

    id: uuid.UUID
    role_code: str | None = None
    permissions: frozenset[str] = field(default_factory=frozenset)
    actor_type = ActorType.ADMIN


@dataclass(frozen=True)
class ApplicantActor:
    """An applicant acting on their own records. Carries no permissions."""

    id: uuid.UUID
    actor_type = ActorType.APPLICANT

    @property
    def permissions(self) -> frozenset[str]:
        return frozenset()


@dataclass(frozen=True)
class SystemActor:
    """Background jobs and unauthenticated endpoints."""

    actor_type = ActorType.SYSTEM

    @property
    def id(self) -> None:
        return None

    @property
    def permissions(self) -> frozenset[str]:
        return frozenset()


Actor = AdminActor | ApplicantActor | SystemActor

SYSTEM = SystemActor()
