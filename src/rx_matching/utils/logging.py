# ============================================================================
# src/rx_matching/utils/logging.py
# ============================================================================
"""
Logging configuration and utilities for the prescription matching engine.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone
import json
import functools


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_json: bool = False
) -> None:
    """
    Setup logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        format_json: Whether to use JSON format
    """
    log_level = getattr(logging, level.upper())

    # Create formatters
    if format_json:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Analysis id set by LogAdapter
        analysis_id = getattr(record, 'analysis_id', None)
        if analysis_id:
            log_data['analysis_id'] = analysis_id

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


class LogAdapter(logging.LoggerAdapter):
    """Logger adapter for adding context to all log messages."""

    def process(self, msg, kwargs):
        """Add extra context to log message."""
        if 'extra' not in kwargs:
            kwargs['extra'] = {}

        kwargs['extra'].update(self.extra)

        return msg, kwargs


def log_performance(logger: logging.Logger, operation: str):
    """
    Decorator to log operation performance.

    Args:
        logger: Logger instance
        operation: Operation name
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start_time = datetime.now()

            try:
                result = func(*args, **kwargs)
                duration = (datetime.now() - start_time).total_seconds()
                logger.debug(f"{operation} completed in {duration:.3f}s")
                return result

            except Exception as e:
                duration = (datetime.now() - start_time).total_seconds()
                logger.error(f"{operation} failed after {duration:.3f}s: {str(e)}")
                raise

        return wrapper
    return decorator
