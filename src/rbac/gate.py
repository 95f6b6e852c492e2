# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Allow/deny decisions for protected operations."""

import functools
import inspect
import logging
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any

from src.context.actors import Actor, AdminActor
from src.exceptions import ForbiddenError
from src.rbac.evaluator import has_any_permission, missing_permissions
from src.rbac.wildcards import FULL_WILDCARD

logger = logging.getLogger(__name__)


class MatchMode(str, Enum):
    """How several required codes combine."""

    ANY = "any"
    ALL = "all"


class AuthorizationGate:
    """Checks an actor's permissions before a guarded operation runs.

    Super administrators (by role code) and holders of the full wildcard
    pass every check without evaluating individual codes.
    """

    def __init__(self, super_admin_role_code: str = "SUPER_ADMIN") -> None:
        self.super_admin_role_code = super_admin_role_code

    def is_unrestricted(self, actor: Actor) -> bool:
        if not isinstance(actor, AdminActor):
            return False
        return actor.role_code == self.super_admin_role_code or FULL_WILDCARD in actor.permissions

    def is_allowed(
        self, actor: Actor, required: Iterable[str], mode: MatchMode = MatchMode.ANY
    ) -> bool:
        try:
            self.check(actor, required, mode)
        except ForbiddenError:
            return False
        return True

    def check(
        self, actor: Actor, required: Iterable[str], mode: MatchMode = MatchMode.ANY
    ) -> None:
        """Raise ForbiddenError unless the actor satisfies ``required``.

        Under ANY the error names every alternative; under ALL it names the
        first code that is missing.
        """
        required = [required] if isinstance(required, str) else list(required)
        if not required or self.is_unrestricted(actor):
            return

        granted = actor.permissions
        if mode == MatchMode.ALL:
            missing = missing_permissions(granted, required)
            if not missing:
                return
            denied = [missing[0]]
            message = f"Missing permission: {missing[0]}"
        else:
            if has_any_permission(granted, required):
                return
            denied = required
            message = f"Missing permission: {' OR '.join(required)}"

        logger.warning(
            f"Permission denied for {actor.actor_type.value}:{actor.id}: {message}"
        )
        raise ForbiddenError(message, missing=denied)

    def guard(
        self, required: Iterable[str] | str, mode: MatchMode = MatchMode.ANY
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorate a callable that takes an ``actor`` keyword argument.

        The wrapped function only runs when the check passes.
        """
        required = [required] if isinstance(required, str) else list(required)

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            if inspect.iscoroutinefunction(fn):

                @functools.wraps(fn)
                async def async_wrapped(*args: Any, actor: Actor, **kwargs: Any) -> Any:
                    self.check(actor, required, mode)
                    return await fn(*args, actor=actor, **kwargs)

                return async_wrapped

            @functools.wraps(fn)
            def wrapped(*args: Any, actor: Actor, **kwargs: Any) -> Any:
                self.check(actor, required, mode)
                return fn(*args, actor=actor, **kwargs)

            return wrapped

        return decorator
