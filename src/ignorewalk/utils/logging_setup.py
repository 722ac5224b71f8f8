"""
Logging configuration for ignorewalk.

Provides environment-aware logging that:
- Writes to stderr so walk output on stdout stays clean
- Outputs JSON lines when running inside a container
- Optionally mirrors records to a rotating log file
- Includes a custom TRACE level for per-path ignore decisions
"""

import sys
import logging
import json
import os
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional, Any

# Define TRACE level (lower number = more detailed)
TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

HUMAN_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def trace(self, message, *args, **kwargs):
    if self.isEnabledFor(TRACE_LEVEL):
        self._log(TRACE_LEVEL, message, args, **kwargs)


logging.Logger.trace = trace


def add_trace_to_logger():
    """Ensure trace method is available on all logger instances"""
    if not hasattr(logging.Logger, 'trace'):
        logging.Logger.trace = trace


class ContainerFormatter(logging.Formatter):
    """JSON formatter for container logs"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'component': record.name,
            'message': record.getMessage(),
            'pid': os.getpid(),
        }

        if hasattr(record, 'extra'):
            log_data.update(record.extra)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def in_container() -> bool:
    """Detect whether we run inside a container"""
    return (
        os.path.exists('/.dockerenv') or
        os.environ.get('DOCKER_CONTAINER', '').lower() == 'true'
    )


def resolve_level(log_level: Optional[str] = None) -> int:
    """
    Resolve a level name to its numeric value.

    IGNOREWALK_LOG_LEVEL takes precedence over LOG_LEVEL; unknown names
    fall back to WARNING.
    """
    level_str = (
        log_level
        or os.environ.get('IGNOREWALK_LOG_LEVEL')
        or os.environ.get('LOG_LEVEL', 'WARNING')
    )
    if level_str.upper() == 'TRACE':
        return TRACE_LEVEL
    return getattr(logging, level_str.upper(), logging.WARNING)


def configure_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    json_output: Optional[bool] = None,
) -> None:
    """
    Configure logging based on environment.

    Args:
        log_level: Override log level (defaults to IGNOREWALK_LOG_LEVEL, LOG_LEVEL or WARNING)
        log_file: Path to an optional rotating log file
        max_bytes: Maximum size of log file before rotation
        backup_count: Number of backup files to keep
        json_output: Force JSON records on or off (defaults to container detection)
    """
    add_trace_to_logger()
    level = resolve_level(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers = []

    if json_output is None:
        json_output = in_container()

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(ContainerFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    root_logger.addHandler(handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(logging.Formatter(HUMAN_FORMAT))
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)

    logger = logging.getLogger('ignorewalk')
    logger.debug(f"Logging configured - Level: {logging.getLevelName(level)}, JSON: {json_output}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance with the trace method available
    """
    add_trace_to_logger()
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any
) -> None:
    """
    Log a message with additional context fields.

    Args:
        logger: Logger instance
        level: Log level (e.g., logging.INFO)
        message: Log message
        **context: Additional fields to include in structured logs
    """
    extra = {'extra': context} if context else {}
    logger.log(level, message, extra=extra)
