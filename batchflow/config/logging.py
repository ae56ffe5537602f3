"""
structlog setup for BatchFlow.

Engines log paired ``<operation>_started`` / ``<operation>_complete`` events
carrying batch ids, quantities and costs. Development gets the console
renderer; every other environment gets one JSON object per line.
"""

import logging
import sys
from decimal import Decimal
from enum import Enum
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from batchflow.config.settings import get_settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access", "httpx")


def add_app_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every event with app name, version and environment."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def render_domain_values(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Flatten Decimal money and enum members to plain strings.

    Costs are logged exactly as stored ("1500.00", not 1500.0) and stage or
    status enums by value, so JSON output stays greppable.
    """
    for key, value in event_dict.items():
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
        elif isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def build_processors(json_output: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        render_domain_values,
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(json_output: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        json_output: Force JSON (True) or console (False) rendering. Defaults
            to console in development and JSON elsewhere.
    """
    settings = get_settings()
    if json_output is None:
        json_output = settings.environment != "development"

    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
