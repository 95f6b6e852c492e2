# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Acting identity and its request-scoped propagation."""

from src.context.actor_context import (
    ActorContext,
    actor_scope,
    authenticated_context,
    context_for_actor,
    current_actor_id,
    current_context,
    run_with_context,
    system_context,
)
from src.context.actors import SYSTEM, Actor, AdminActor, ApplicantActor, SystemActor

__all__ = [
    "SYSTEM",
    "Actor",
    "ActorContext",
    "AdminActor",
    "ApplicantActor",
    "SystemActor",
    "actor_scope",
    "authenticated_context",
    "context_for_actor",
    "current_actor_id",
    "current_context",
    "run_with_context",
    "system_context",
]
