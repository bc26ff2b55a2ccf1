"""
Data models and type definitions for typedstore.

This module defines the data structures shared across the package with
proper type hints for better type safety and code clarity.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Any, Generic, TypeVar

T = TypeVar('T')


class LogLevel(Enum):
    """Logging levels for structured logging."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MemoryPressure(Enum):
    """System memory pressure levels reported by the pressure monitor."""
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class LookupStatus(Enum):
    """Outcome of a key-value store lookup."""
    PRESENT = "present"
    ABSENT = "absent"
    UNDECODABLE = "undecodable"


class CacheOperation(Enum):
    """Memory cache operations, used for error context."""
    GET = "get"
    SET = "set"
    REMOVE = "remove"


# Configuration data models
@dataclass
class StorageConfig:
    """
    Type-safe configuration for typedstore.

    All values have defaults; the environment only overrides them.
    """
    # Durable store
    preferences_path: str = "~/.typedstore/preferences.json"
    backup_retention_count: int = 3

    # Memory cache
    max_cache_size: int = 10000
    memory_warning_threshold: float = 80.0  # Percentage
    memory_critical_threshold: float = 95.0  # Percentage
    memory_check_interval: float = 5.0  # Seconds

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    # Environment-specific settings
    environment: str = "development"  # development, testing, production
    debug_mode: bool = False

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid
        """
        if not self.preferences_path:
            raise ValueError("preferences_path cannot be empty")

        if self.backup_retention_count < 0:
            raise ValueError("backup_retention_count cannot be negative")

        if self.max_cache_size <= 0:
            raise ValueError("max_cache_size must be positive")

        if not (0 < self.memory_warning_threshold < 100):
            raise ValueError("memory_warning_threshold must be between 0 and 100")

        if not (0 < self.memory_critical_threshold <= 100):
            raise ValueError("memory_critical_threshold must be between 0 and 100")

        if self.memory_warning_threshold >= self.memory_critical_threshold:
            raise ValueError("memory_warning_threshold must be less than memory_critical_threshold")

        if self.memory_check_interval < 0:
            raise ValueError("memory_check_interval cannot be negative")

        valid_log_levels = [level.value for level in LogLevel]
        if self.log_level not in valid_log_levels:
            raise ValueError(f"log_level must be one of {valid_log_levels}")

        valid_environments = ["development", "testing", "production"]
        if self.environment not in valid_environments:
            raise ValueError(f"environment must be one of {valid_environments}")

        if not isinstance(self.debug_mode, bool):
            raise ValueError(f"debug_mode must be a boolean, got {type(self.debug_mode).__name__}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return asdict(self)

    def get_environment_specific_defaults(self) -> Dict[str, Any]:
        """Get environment-specific default values."""
        defaults: Dict[str, Any] = {}

        if self.environment == "development":
            defaults.update({
                "debug_mode": True,
                "log_level": "DEBUG",
            })
        elif self.environment == "testing":
            defaults.update({
                "debug_mode": True,
                "log_level": "DEBUG",
                "backup_retention_count": 0,
                "memory_check_interval": 0.0,
            })
        elif self.environment == "production":
            defaults.update({
                "debug_mode": False,
                "log_level": "INFO",
            })

        return defaults


# Storage data models
@dataclass(frozen=True)
class StoredValue(Generic[T]):
    """
    Tagged result of a key-value store lookup.

    ``value`` is only meaningful when ``status`` is ``PRESENT``; a present
    value may itself be ``None`` when ``None`` was stored explicitly.
    """
    status: LookupStatus
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return self.status is LookupStatus.PRESENT

    def unwrap_or(self, default: Any) -> Any:
        """Return the value when present, otherwise ``default``."""
        return self.value if self.is_present else default


# Cache data models
@dataclass
class CacheStats:
    """Memory cache statistics."""
    total_entries: int
    hit_count: int
    miss_count: int
    eviction_count: int
    memory_usage_bytes: int
    max_size: Optional[int] = None
    hit_rate: float = field(init=False)

    def __post_init__(self):
        """Calculate hit rate after initialization."""
        total_requests = self.hit_count + self.miss_count
        self.hit_rate = self.hit_count / total_requests if total_requests > 0 else 0.0


# Logging data models
@dataclass
class LogEntry:
    """Structured log entry."""
    timestamp: datetime
    level: LogLevel
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    service: Optional[str] = None
    operation: Optional[str] = None
    duration_ms: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON logging."""
        data = {
            'timestamp': self.timestamp.isoformat(),
            'level': self.level.value,
            'message': self.message,
            'context': self.context
        }

        if self.service:
            data['service'] = self.service
        if self.operation:
            data['operation'] = self.operation
        if self.duration_ms is not None:
            data['duration_ms'] = self.duration_ms
        if self.error:
            data['error'] = self.error

        return data
