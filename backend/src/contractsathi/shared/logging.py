"""Structured logging with structlog.

Events are snake_case names with keyword fields, e.g.
``logger.info("report_generated", contract_id=..., size=...)``. Pipeline
code binds ``contract_id`` once with :func:`contract_log_context` so every
event of a run carries it, including those from the AI clients.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, cast
from uuid import UUID

import structlog

from contractsathi.config import get_settings

SERVICE_NAME = "contractsathi"

# SDK and server loggers that log every request at INFO
QUIET_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "httpx",
    "httpcore",
    "openai",
    "anthropic",
    "botocore",
    "boto3",
    "s3transfer",
)


def _add_service(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def setup_logging() -> None:
    """Configure structlog and the stdlib root logger.

    Console rendering in development, one JSON object per line elsewhere.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.app_debug else logging.INFO

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.is_development:
        renderer: list[Any] = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    else:
        renderer = [
            _add_service,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=shared_processors + renderer,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


@contextmanager
def contract_log_context(contract_id: UUID, **extra: Any) -> Iterator[None]:
    """Bind ``contract_id`` (and extras) to all log events inside the block."""
    with structlog.contextvars.bound_contextvars(contract_id=str(contract_id), **extra):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
