"""
Type definitions and data models for typedstore.
"""

from .models import (
    # Configuration types
    StorageConfig,

    # Storage types
    LookupStatus,
    StoredValue,

    # Cache types
    CacheOperation,
    CacheStats,
    MemoryPressure,

    # Logging types
    LogEntry,
    LogLevel,
)

__all__ = [
    'StorageConfig',
    'LookupStatus',
    'StoredValue',
    'CacheOperation',
    'CacheStats',
    'MemoryPressure',
    'LogEntry',
    'LogLevel',
]
