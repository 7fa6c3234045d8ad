"""Logging configuration for the parallel test harness."""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional
import json
from datetime import datetime

_STANDARD_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "message",
        "asctime",
    )
)

MODULE_LOGGERS = ("runner", "events", "session", "artifacts")


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields from record
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, separators=(",", ":"), default=str)


class ContextTagFilter(logging.Filter):
    """Guarantee every record has a ``context_tag`` for the text format."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "context_tag"):
            record.context_tag = getattr(record, "context_id", None) or "-"
        return True


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[str] = None,
    enable_console: bool = True,
    enable_file: bool = True,
    json_format: Optional[bool] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """
    Setup logging for the harness.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (defaults to logs/)
        enable_console: Enable console logging
        enable_file: Enable file logging
        json_format: Use JSON format for logs (defaults to True in production)
        max_file_size_mb: Maximum size per log file in MB
        backup_count: Number of backup files to keep
    """
    if level is None:
        level = os.getenv("HARNESS_LOG_LEVEL", "INFO")
    level = level.upper()

    if json_format is None:
        json_format = (
            os.getenv("HARNESS_ENVIRONMENT", "development").lower() == "production"
        )

    if log_dir is None:
        log_dir = os.getenv("HARNESS_LOG_DIR", "logs")

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))

    # Clear existing handlers
    root_logger.handlers.clear()

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(threadName)s - [%(context_tag)s] - %(name)s - "
            "%(levelname)s - %(message)s"
        )
    tag_filter = ContextTagFilter()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, level))
        console_handler.setFormatter(formatter)
        console_handler.addFilter(tag_filter)
        root_logger.addHandler(console_handler)

    if enable_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        main_handler = logging.handlers.RotatingFileHandler(
            log_path / "parallel_harness.log",
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        main_handler.setLevel(getattr(logging, level))
        main_handler.setFormatter(formatter)
        main_handler.addFilter(tag_filter)
        root_logger.addHandler(main_handler)

        # Error-only log
        error_handler = logging.handlers.RotatingFileHandler(
            log_path / "parallel_harness_errors.log",
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        error_handler.addFilter(tag_filter)
        root_logger.addHandler(error_handler)

    _setup_module_loggers()


def _setup_module_loggers() -> None:
    """Apply HARNESS_LOG_LEVEL_<MODULE> overrides."""
    for logger_name in MODULE_LOGGERS:
        env_var = f"HARNESS_LOG_LEVEL_{logger_name.upper()}"
        level = os.getenv(env_var, None)
        if level:
            logger = logging.getLogger(f"parallel_harness.{logger_name}")
            logger.setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> logging.Logger:
    """Get logger for specific module."""
    if not name.startswith("parallel_harness."):
        name = f"parallel_harness.{name}"
    return logging.getLogger(name)
