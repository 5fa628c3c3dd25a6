"""
Structured logging for calfield.

Library modules take their logger from :func:`get_logger`, which wraps the
stdlib logger of the module, and emit debug events; nothing is configured on
import, so those events are dropped by stdlib defaults. Applications
(and the ``calfield`` CLI) call :func:`configure_logging` once at startup.

    >>> from calfield.core.logging import configure_logging
    >>> configure_logging(level="DEBUG", json_format=False)
"""

from __future__ import annotations

import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "calfield"


def _add_service_metadata(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: Optional[bool] = None,
    service: str = "calfield",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog and the stdlib root handler it renders through.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not a tty)
        service: Name added to every event
        add_timestamp: Include an ISO timestamp
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]
    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    renderer: Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper()))


def get_logger(name: Optional[str] = None, **initial_values: Any) -> Any:
    """A structlog logger over the stdlib logger `name`.

    Until `configure_logging` runs, events go through stdlib logging and its
    defaults, so debug events from library code stay silent.
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        wrapper_class=structlog.stdlib.BoundLogger,
        **initial_values,
    )
