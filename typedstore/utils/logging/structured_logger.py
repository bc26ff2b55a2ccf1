"""
Structured logging with JSON output and performance timing.

This module provides the logger used by the storage services:
- JSON-structured log entries with consistent field names
- Configurable log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- Contextual logging through ``with_context``
- Performance timing through the ``timed`` decorator
- Optional daily log files with retention
"""

import json
import logging
import shutil
import threading
import time
from collections import deque
from datetime import datetime, timedelta, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional, Union, TypeVar, cast

from typedstore.types.models import LogEntry, LogLevel

# Type variable for generic function decorator
F = TypeVar('F', bound=Callable[..., Any])

_PYTHON_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL
}


def _parse_level(level: Union[LogLevel, str]) -> LogLevel:
    if isinstance(level, LogLevel):
        return level
    try:
        return LogLevel[level.upper()]
    except KeyError:
        valid_levels = ", ".join([l.name for l in LogLevel])
        raise ValueError(f"Invalid log level: {level}. Valid levels are: {valid_levels}")


class StructuredLogger:
    """
    Structured logger with JSON formatting and performance monitoring.

    Messages go through Python's ``logging`` under ``typedstore.<name>``.
    Each entry is also kept in a bounded in-memory buffer and, when
    ``log_dir`` is set, appended to daily files.

    Attributes:
        name (str): Logger name
        level (LogLevel): Current log level
        log_dir (Optional[Path]): Directory for log files, None for no files
        retention_days (int): Number of days to keep log files
    """

    def __init__(
        self,
        name: str,
        level: Union[LogLevel, str] = LogLevel.INFO,
        log_dir: Optional[Union[str, Path]] = None,
        max_memory_entries: int = 1000,
        retention_days: int = 7
    ):
        """
        Initialize a new structured logger.

        Args:
            name: Logger name
            level: Log level (default: INFO)
            log_dir: Directory for log files (default: no file output)
            max_memory_entries: Maximum number of log entries to keep in memory
            retention_days: Number of days to keep log files

        Raises:
            ValueError: If invalid log level is provided
        """
        self.name = name
        self.level = _parse_level(level)
        self.log_dir = Path(log_dir) if log_dir else None
        self.retention_days = retention_days
        self._memory_buffer: Deque[LogEntry] = deque(maxlen=max_memory_entries)
        self._buffer_lock = threading.Lock()
        self._context: Dict[str, Any] = {}

        self._logger = logging.getLogger(f"typedstore.{name}")
        self._logger.setLevel(_PYTHON_LEVELS[self.level])

        if self.log_dir is not None:
            self._ensure_log_directory()
            self._cleanup_old_logs()

    def _ensure_log_directory(self) -> None:
        """Create today's log directory if it doesn't exist."""
        today = datetime.now().strftime("%Y-%m-%d")
        (self.log_dir / today).mkdir(parents=True, exist_ok=True)

    def _get_log_file_paths(self) -> Dict[str, Path]:
        """Get paths for the daily log files."""
        today = datetime.now().strftime("%Y-%m-%d")
        daily_log_dir = self.log_dir / today

        return {
            "main": daily_log_dir / "logs.log",
            "error": daily_log_dir / "errors.log",
            "json": daily_log_dir / "logs.json"
        }

    def _cleanup_old_logs(self) -> None:
        """Remove daily log directories older than retention_days."""
        if not self.log_dir.exists():
            return

        cutoff_date = datetime.now() - timedelta(days=self.retention_days)

        for item in self.log_dir.iterdir():
            if not item.is_dir():
                continue

            try:
                dir_date = datetime.strptime(item.name, "%Y-%m-%d")
            except ValueError:
                # Not a date-formatted directory
                continue
            if dir_date < cutoff_date:
                shutil.rmtree(item, ignore_errors=True)

    def _should_log(self, level: LogLevel) -> bool:
        return _PYTHON_LEVELS[level] >= _PYTHON_LEVELS[self.level]

    def _format_line(self, entry: LogEntry) -> str:
        timestamp = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")

        message = f"[{timestamp}] [{entry.level.value}]"
        if entry.service:
            message += f" [{entry.service}]"
        message += f" {entry.message}"

        if entry.context:
            context_str = " ".join([f"{k}={v}" for k, v in entry.context.items()])
            message += f" ({context_str})"

        if entry.operation and entry.duration_ms is not None:
            message += f" [operation={entry.operation}, duration={entry.duration_ms:.2f}ms]"

        if entry.error:
            message += f" [error={entry.error}]"

        return message

    def _write_files(self, entry: LogEntry) -> None:
        log_files = self._get_log_file_paths()
        log_files["main"].parent.mkdir(parents=True, exist_ok=True)
        line = self._format_line(entry)

        with open(log_files["main"], "a", encoding="utf-8") as f:
            f.write(line + "\n")

        if entry.level in (LogLevel.ERROR, LogLevel.CRITICAL):
            with open(log_files["error"], "a", encoding="utf-8") as f:
                f.write(line + "\n")

        with open(log_files["json"], "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), default=str) + "\n")

    def set_level(self, level: Union[LogLevel, str]) -> None:
        """
        Set the log level.

        Raises:
            ValueError: If invalid log level is provided
        """
        self.level = _parse_level(level)
        self._logger.setLevel(_PYTHON_LEVELS[self.level])

    def with_context(self, **context: Any) -> 'ContextLogger':
        """
        Create a new logger with additional context.

        Returns:
            ContextLogger with the specified context
        """
        return ContextLogger(self, context)

    def log(
        self,
        level: LogLevel,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        duration_ms: Optional[float] = None,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        """
        Log a message with the specified level and context.

        Args:
            level: Log level
            message: Log message
            service: Service name (optional)
            operation: Operation name for performance logging (optional)
            duration_ms: Operation duration in milliseconds (optional)
            error: Error message or exception (optional)
            **context: Additional context key-value pairs
        """
        if not self._should_log(level):
            return

        error_str = None
        if error is not None:
            if isinstance(error, Exception):
                error_str = f"{type(error).__name__}: {str(error)}"
            else:
                error_str = str(error)

        entry = LogEntry(
            timestamp=datetime.now(timezone.utc),
            level=level,
            message=message,
            context={**self._context, **context},
            service=service,
            operation=operation,
            duration_ms=duration_ms,
            error=error_str
        )

        with self._buffer_lock:
            self._memory_buffer.append(entry)

        if self.log_dir is not None:
            try:
                self._write_files(entry)
            except OSError:
                self._logger.warning("Failed to write log files", exc_info=True)

        self._logger.log(
            _PYTHON_LEVELS[level],
            message,
            extra={"structured": entry.to_dict()}
        )

    def debug(self, message: str, **context: Any) -> None:
        """Log a debug message."""
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        """Log an info message."""
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        """Log a warning message."""
        self.log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        """
        Log an error message.

        Args:
            message: Log message
            error: Error message or exception (optional)
            **context: Context key-value pairs
        """
        self.log(LogLevel.ERROR, message, error=error, **context)

    def critical(
        self,
        message: str,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        """Log a critical message."""
        self.log(LogLevel.CRITICAL, message, error=error, **context)

    def performance(
        self,
        operation: str,
        duration_ms: float,
        **context: Any
    ) -> None:
        """
        Log a performance metric at debug level.

        Args:
            operation: Operation name
            duration_ms: Operation duration in milliseconds
            **context: Context key-value pairs
        """
        self.log(
            LogLevel.DEBUG,
            f"Performance: {operation} completed in {duration_ms:.2f}ms",
            operation=operation,
            duration_ms=duration_ms,
            **context
        )

    def get_recent_logs(
        self,
        level: Optional[LogLevel] = None,
        limit: Optional[int] = None
    ) -> List[LogEntry]:
        """
        Get recent log entries from the memory buffer.

        Args:
            level: Filter by log level (optional)
            limit: Maximum number of entries to return (optional)

        Returns:
            List of log entries, oldest first
        """
        with self._buffer_lock:
            entries = list(self._memory_buffer)

        if level is not None:
            entries = [e for e in entries if e.level == level]

        if limit is not None:
            entries = entries[-limit:]

        return entries


class ContextLogger:
    """
    Logger with additional context.

    Wraps a StructuredLogger and adds fixed context to every message.
    """

    def __init__(self, logger: StructuredLogger, context: Dict[str, Any]):
        self._logger = logger
        self._context = context

    def with_context(self, **context: Any) -> 'ContextLogger':
        """Create a new logger with the combined context."""
        return ContextLogger(self._logger, {**self._context, **context})

    def log(
        self,
        level: LogLevel,
        message: str,
        service: Optional[str] = None,
        operation: Optional[str] = None,
        duration_ms: Optional[float] = None,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        self._logger.log(
            level,
            message,
            service=service,
            operation=operation,
            duration_ms=duration_ms,
            error=error,
            **{**self._context, **context}
        )

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        self.log(LogLevel.ERROR, message, error=error, **context)

    def critical(
        self,
        message: str,
        error: Optional[Union[str, Exception]] = None,
        **context: Any
    ) -> None:
        self.log(LogLevel.CRITICAL, message, error=error, **context)


def timed(operation_name: str) -> Callable[[F], F]:
    """
    Decorator to time method execution and log performance.

    The timing is logged through ``self.logger`` when the decorated
    function is a method of an object holding a StructuredLogger.

    Args:
        operation_name: Name of the operation for logging
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = None
            if args and isinstance(getattr(args[0], 'logger', None), StructuredLogger):
                logger = args[0].logger

            start_time = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                if logger:
                    duration_ms = (time.perf_counter() - start_time) * 1000
                    logger.performance(operation_name, duration_ms)

        return cast(F, wrapper)
    return decorator


def get_logger(name: str) -> StructuredLogger:
    """
    Build a StructuredLogger configured from the global configuration.

    Args:
        name: Logger name, usually the service name
    """
    from typedstore.core.config import get_config

    config = get_config()
    return StructuredLogger(name, level=config.log_level, log_dir=config.log_dir)
