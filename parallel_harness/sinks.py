"""Log sink boundary: leveled, timestamped, context-tagged messages."""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from parallel_harness.logging_config import get_logger


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"


_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


class LogSink:
    """Accepts log records; implementations must be thread-safe."""

    def emit(
        self, level: LogLevel, timestamp: datetime, context_tag: str, message: str
    ) -> None:
        raise NotImplementedError


class LoggerSink(LogSink):
    """Forward sink records to a standard ``logging.Logger``."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("events")

    def emit(self, level, timestamp, context_tag, message):
        self.logger.log(
            _LOGGING_LEVELS[LogLevel(level)],
            message,
            extra={
                "context_tag": context_tag,
                "event_timestamp": timestamp.isoformat(),
            },
        )
