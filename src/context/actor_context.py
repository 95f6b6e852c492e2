# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Request-scoped acting identity used for audit attribution.

A context is established once per request with :func:`actor_scope` (or
:func:`run_with_context`) and read anywhere below it with
:func:`current_context`, including inside coroutines, spawned tasks and
threadpool work, without passing it as an argument.

The context variable holds a scope object rather than the context itself.
Leaving the scope closes that object, so work that copied the variable and
outlives the request (a fire-and-forget task, for example) sees no context
instead of the identity of a request that has already finished.
"""

import inspect
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from src.context.actors import Actor
from src.models.enums import ActorType


@dataclass(frozen=True)
class ActorContext:
    """Who is acting: an id (None for the system) and the actor type."""

    actor_id: uuid.UUID | None
    actor_type: ActorType


class _Scope:
    __slots__ = ("active", "context")

    def __init__(self, context: ActorContext) -> None:
        self.context = context
        self.active = True


_current_scope: ContextVar[_Scope | None] = ContextVar("actor_scope", default=None)


def authenticated_context(actor_id: uuid.UUID, actor_type: ActorType) -> ActorContext:
    """Context for a verified admin or applicant identity."""
    return ActorContext(actor_id=actor_id, actor_type=ActorType(actor_type))


def system_context() -> ActorContext:
    """Context for unauthenticated endpoints and background jobs."""
    return ActorContext(actor_id=None, actor_type=ActorType.SYSTEM)


def context_for_actor(actor: Actor) -> ActorContext:
    if actor.actor_type == ActorType.SYSTEM:
        return system_context()
    return authenticated_context(actor.id, actor.actor_type)


def current_context() -> ActorContext | None:
    """Return the active context, or None outside any established scope."""
    scope = _current_scope.get()
    if scope is None or not scope.active:
        return None
    return scope.context


def current_actor_id() -> uuid.UUID | None:
    context = current_context()
    return context.actor_id if context else None


@contextmanager
def actor_scope(context: ActorContext) -> Iterator[ActorContext]:
    """Establish ``context`` for the body of a ``with`` block.

    The scope is closed and the previous value restored on every exit path.
    """
    scope = _Scope(context)
    token = _current_scope.set(scope)
    try:
        yield context
    finally:
        scope.active = False
        _current_scope.reset(token)


def run_with_context(context: ActorContext, work: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run ``work`` with ``context`` established for its full extent.

    Plain callables run immediately and their result is returned. For
    coroutine functions a coroutine is returned; the scope opens when it is
    awaited and closes when it finishes.
    """
    if inspect.iscoroutinefunction(work):

        async def runner() -> Any:
            with actor_scope(context):
                return await work(*args, **kwargs)

        return runner()

    with actor_scope(context):
        return work(*args, **kwargs)
