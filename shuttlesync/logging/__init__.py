"""Structured logging configuration using structlog."""

import logging
import re
import sys

import structlog

from shuttlesync.config.settings import Settings

# Bearer tokens and JWTs as sent to the backend API
_TOKEN_PATTERN = re.compile(
    r"(Bearer\s+[A-Za-z0-9._~+/=-]+|eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+)"
)
_REDACTED = "<TOKEN_REDACTED>"
_SENSITIVE_KEYS = {"access_token", "token", "authorization"}


class TokenRedactingFilter(logging.Filter):
    """Filter that redacts access tokens from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact tokens from log message."""
        if record.msg and isinstance(record.msg, str):
            record.msg = _TOKEN_PATTERN.sub(_REDACTED, record.msg)
        if record.args:
            record.args = tuple(
                _TOKEN_PATTERN.sub(_REDACTED, arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


def _redact_tokens(
    logger: logging.Logger, method_name: str, event_dict: dict
) -> dict:
    """Structlog processor to redact tokens from event dictionaries."""
    for key, value in list(event_dict.items()):
        if key.lower() in _SENSITIVE_KEYS and value:
            event_dict[key] = _REDACTED
        elif isinstance(value, str):
            event_dict[key] = _TOKEN_PATTERN.sub(_REDACTED, value)
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured logging for the application."""
    level = getattr(logging, log_level.upper())
    token_filter = TokenRedactingFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers and add new one with filter
    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(token_filter)
    root_logger.addHandler(handler)

    for logger_name in ("httpx", "httpcore", "urllib3"):
        logging.getLogger(logger_name).addFilter(token_filter)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_tokens,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: Settings) -> None:
    """Set up logging from settings and tag every event with app and environment."""
    setup_logging(settings.log_level)
    structlog.contextvars.bind_contextvars(
        app=settings.app_name, environment=settings.environment
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
