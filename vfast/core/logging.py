"""
Logging utilities.

Request-scoped context (request id, acting user) lives in structlog's
contextvars so it follows the request through sync and async code. The
stdlib handlers pick it up through ``RequestContextFilter``.
"""

import logging
from typing import Any, Dict, Optional

import structlog

from vfast.config.settings import settings


def bind_request_context(**values: Any) -> None:
    """Bind values (request_id, user_id, ...) for the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def current_context() -> Dict[str, Any]:
    return structlog.contextvars.get_contextvars()


class LoggingConfig:
    """Centralized structlog configuration"""

    @staticmethod
    def configure_structured_logging() -> None:
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
        ]

        if settings.LOG_FORMAT == "json":
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.processors.KeyValueRenderer())

        structlog.configure(
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )


class LoggerAdapter:
    """Thin wrapper over a stdlib logger. Request context comes from the handler filter."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: int, message: str, *args, **kwargs):
        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs):
        kwargs.setdefault('exc_info', True)
        self._log(logging.ERROR, message, *args, **kwargs)


def get_logger(name: Optional[str] = None) -> LoggerAdapter:
    """
    Get configured logger instance.

    Names outside the ``vfast`` namespace are nested under it so the
    application handlers apply.
    """
    name = name or "vfast"
    if not name.startswith("vfast"):
        name = f"vfast.{name}"
    return LoggerAdapter(logging.getLogger(name))


def get_struct_logger(name: Optional[str] = None):
    """structlog logger bound to the same request context."""
    return structlog.get_logger(name or "vfast")


def setup_logging() -> None:
    """Initialize both the stdlib handlers and structlog."""
    from vfast.config.logging import setup_logging as configure_handlers

    configure_handlers()
    LoggingConfig.configure_structured_logging()

    get_logger(__name__).info("Logging system initialized", extra={
        'log_level': settings.LOG_LEVEL,
        'log_format': settings.LOG_FORMAT,
    })


__all__ = [
    'get_logger',
    'get_struct_logger',
    'setup_logging',
    'bind_request_context',
    'clear_request_context',
    'current_context',
    'LoggerAdapter',
    'LoggingConfig',
]
