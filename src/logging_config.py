# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Logging setup."""

import logging

from src.config import Settings
from src.context.actor_context import current_context

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [actor=%(actor)s] %(message)s"


class ActorContextFilter(logging.Filter):
    """Attach the current actor to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_context()
        if context is None:
            record.actor = "-"
        elif context.actor_id is None:
            record.actor = context.actor_type.value
        else:
            record.actor = f"{context.actor_type.value}:{context.actor_id}"
        return True


def configure_logging(settings: Settings) -> None:
    """Configure the root logger once at application start."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(ActorContextFilter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level.upper())
