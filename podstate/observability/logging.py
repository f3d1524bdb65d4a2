"""structlog setup for podstate.

Every log line is a JSON object on stderr. Events carry the component that
emitted them and the name of the configuration being evaluated, so audit
and handler lines from several configurations can be told apart.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO, cast

import structlog
from structlog.typing import FilteringBoundLogger

from podstate.errors import ConfigurationError
from podstate.models.config import PodStateConfig

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(config: PodStateConfig, stream: TextIO | None = None) -> None:
    """Configure structlog from *config*.

    Binds ``config=<config.name>`` into the context of every subsequent
    event and filters below ``config.log_level``.

    Raises:
        ConfigurationError: if ``config.log_level`` is not a known level.
    """
    try:
        level = _LEVELS[config.log_level]
    except KeyError as exc:
        raise ConfigurationError(f"Invalid log level: {config.log_level!r}") from exc

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(config=config.name)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
    )


def get_logger(component: str) -> FilteringBoundLogger:
    """Get a logger bound with a component name."""
    return cast(FilteringBoundLogger, structlog.get_logger(component=component))
