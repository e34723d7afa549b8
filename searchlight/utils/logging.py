"""
Structured logging for the highlighting service.
"""

import logging
import sys
from typing import Any, List

import structlog

_SHARED_PROCESSORS: List[Any] = [
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
]


def setup_logger(name: str, level: str = "INFO", json_logs: bool = True) -> structlog.BoundLogger:
    """
    Route structlog through stdlib logging on stdout.

    Args:
        name: Logger name
        level: Log level name; unknown names fall back to INFO
        json_logs: JSON lines when True, console rendering otherwise

    Returns:
        Logger bound to the given name
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=getattr(logging, level.upper(), logging.INFO))

    if json_logs:
        renderers = [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=_SHARED_PROCESSORS + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(name)


def log_highlight_event(logger: structlog.BoundLogger, event_type: str, **kwargs: Any) -> None:
    """Log at error for *_failed/*_error, warning for *_degraded/*_warning, debug otherwise."""
    if event_type.endswith(("_error", "_failed")):
        logger.error(event_type, **kwargs)
    elif event_type.endswith(("_warning", "_degraded")):
        logger.warning(event_type, **kwargs)
    else:
        logger.debug(event_type, **kwargs)
