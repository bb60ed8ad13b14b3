"""Logging configuration for the application."""
import logging
import sys
from typing import Any, Optional, TextIO
import structlog
from pythonjsonlogger import jsonlogger

from drawcheck.config import settings


class CheckerJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps level, logger name and environment."""

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = settings.environment


def setup_logging(stream: Optional[TextIO] = None) -> None:
    """Configure structured logging with JSON output.

    Args:
        stream: Log destination (default: stdout). Command-line tools that
            print their result on stdout pass stderr.
    """

    # Configure standard logging
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    # Setup handler
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        CheckerJsonFormatter('%(timestamp)s %(level)s %(logger)s %(message)s', timestamp=True)
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []
    root_logger.addHandler(handler)

    # Configure structlog
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)
