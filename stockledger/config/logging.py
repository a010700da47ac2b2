"""
Structured logging for the ledger using structlog.

Every event carries the app identity and the active ledger backend. Events
emitted while a report is being built also carry the report name and its
request key, bound through contextvars by ``report_context``.
"""

import functools
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from structlog.types import EventDict, Processor

from stockledger.config.settings import Settings, get_settings

T = TypeVar("T")

# Loggers that only report transport or driver chatter
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite")


def add_ledger_context(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("backend", settings.ledger_backend)
    return event_dict


def _renderers(settings: Settings) -> list[Processor]:
    if settings.environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(level: str | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Console output in development, JSON lines elsewhere. ``level`` overrides
    the configured log level, e.g. from a command line flag.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_ledger_context,
        *_renderers(settings),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


AsyncMethod = Callable[..., Awaitable[T]]


def report_context(report: str) -> Callable[[AsyncMethod], AsyncMethod]:
    """
    Bind ``report`` and the request's cache key for the duration of a use case.

    Decorates an ``execute(self, request)`` coroutine.
    """

    def decorator(execute: AsyncMethod) -> AsyncMethod:
        @functools.wraps(execute)
        async def wrapper(self: Any, request: Any, *args: Any, **kwargs: Any) -> T:
            with structlog.contextvars.bound_contextvars(
                report=report, request_key=request.cache_key()
            ):
                return await execute(self, request, *args, **kwargs)

        return wrapper

    return decorator


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
