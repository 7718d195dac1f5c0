"""Structured logging configuration using structlog."""
import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from frontdesk.config.settings import settings


def add_operator_prefix(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add [operator] prefix to log message if an operator is bound.

    The operator is the email of the signed-in front desk user. This
    processor runs before formatters so the prefix appears in both JSON
    and console outputs.

    Args:
        logger: The logger instance
        method_name: The name of the method being called
        event_dict: The event dictionary containing log data

    Returns:
        Modified event dictionary with operator prefix
    """
    operator = event_dict.get("operator")
    if operator:
        current_event = event_dict.get("event", "")
        event_dict["event"] = f"[{operator}] {current_event}"
    return event_dict


def configure_logging() -> None:
    """Configure structlog for the application.

    Log records go to stderr so stdout stays free for command output.
    In json mode structlog hands the event dict to python-json-logger as
    record extras, so each line is encoded exactly once.
    """

    log_level = getattr(logging, settings.logging.level)
    json_format = settings.logging.format == "json"

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Silence noisy third-party loggers
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_operator_prefix,
            structlog.stdlib.render_to_log_kwargs
            if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name, typically __name__

    Returns:
        Configured logger instance
    """
    return structlog.get_logger(name)
