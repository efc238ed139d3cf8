from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping

import structlog

from facility_booking.config import DEBUG, LOG_LEVEL

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

SERVICE_NAME = "facility-booking"

# Libraries whose INFO output drowns out booking events
QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "uvicorn.access")


def add_service_name(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _renderer() -> Processor:
    if DEBUG:
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.JSONRenderer()


def setup_logging() -> None:
    """
    Configure stdlib logging and structlog for the booking service.

    DEBUG renders coloured console lines; any other level emits one JSON
    object per event with the service name, ISO UTC timestamp and whatever
    request context (``request_id``) the middleware bound.
    """
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if not DEBUG:
        # Tracebacks from logger.exception become a string field in JSON output
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
