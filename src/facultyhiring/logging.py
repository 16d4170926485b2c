"""Structured logging for the hiring service and CLI.

Events are JSON lines named ``<area>.<event>`` (``workflow.endorse``,
``renewal.recommendation``). Refusals are logged at warning level.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import structlog

APP_NAME = "facultyhiring"


def _enum_values(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Render enum members (stages, roles, statuses) by their stored value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog JSON output at ``level``."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=log_level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _enum_values,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(app=APP_NAME)
