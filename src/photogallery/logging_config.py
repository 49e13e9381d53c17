"""
Structured logging setup for the photogallery application.

Every module logs through structlog with event-style messages
(``images_listed``, ``image_upload_failed``...) and keyword context.
Development runs get a console renderer, everything else gets JSON lines.
"""

import logging
import os
import sys
from typing import Any

import structlog

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Streamlit re-executes the entry script on every interaction
_configured = False


class ColoredJSONRenderer:
    """JSON renderer that colors whole lines by level when attached to a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, colors: bool = False):
        self.colors = colors
        self.json_renderer = structlog.processors.JSONRenderer()

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
        line = str(self.json_renderer(logger, method_name, event_dict))
        if not self.colors:
            return line

        color = self.COLORS.get(str(event_dict.get("level", "")).upper(), "")
        return f"{color}{line}{self.RESET}"


def get_log_level() -> int:
    """
    Resolve the log level from LOG_LEVEL, falling back to INFO.

    Returns:
        int: Log level constant from the logging module
    """
    return LEVELS.get(os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)


def is_development_environment() -> bool:
    """Check whether ENVIRONMENT names a development setup."""
    return os.getenv("ENVIRONMENT", "development").lower() in ["development", "dev", "local"]


def configure_structured_logging(force: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call on every Streamlit rerun; only the first call (or a call
    with ``force=True``) changes the configuration.

    Args:
        force: Reconfigure even if logging was already configured
    """
    global _configured
    if _configured and not force:
        return

    log_level = get_log_level()
    is_dev = is_development_environment()
    use_colors = is_dev and sys.stderr.isatty()

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if is_dev:
        processors.append(ColoredJSONRenderer(colors=True) if use_colors else structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.getLogger().setLevel(log_level)
    _configured = True

    structlog.get_logger("photogallery.logging").info(
        "logging_configured",
        log_level=logging.getLevelName(log_level),
        environment="development" if is_dev else "production",
        colors_enabled=use_colors,
    )


def get_logger(name: str | None = None) -> Any:
    """
    Get a structured logger.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        structlog.BoundLogger: Logger instance
    """
    return structlog.get_logger(name)


def log_performance(operation: str, duration: float, **context: Any) -> None:
    """Log how long an operation took."""
    get_logger("photogallery.performance").info(
        "performance_metric", operation=operation, duration_seconds=round(duration, 4), **context
    )


def log_user_action(action: str, **context: Any) -> None:
    """Log a user-initiated gallery action (upload, delete)."""
    get_logger("photogallery.user_actions").info("user_action", action=action, **context)


def log_error(error: Exception, context: dict[str, Any] | None = None) -> None:
    """
    Log an exception with structured context.

    Args:
        error: Exception that occurred
        context: Additional context information
    """
    error_context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }
    if context:
        error_context.update(context)

    get_logger("photogallery.errors").error("error_occurred", **error_context)
