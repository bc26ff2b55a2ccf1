"""
Core module for typedstore.

This module contains the core infrastructure components:
- Configuration management system
- Custom exception classes for error categorization
"""

from .config import (
    ConfigManager,
    StorageConfig,
    get_config,
    get_config_manager,
    load_config,
    reset_config,
)
from .exceptions import (
    TypedStoreError,
    ConfigurationError,
    DataPersistenceError,
    ValidationError,
    CacheError,
    StorageError,
    EncodeError,
    DecodeError,
)

__all__ = [
    # Configuration
    'ConfigManager',
    'StorageConfig',
    'get_config',
    'get_config_manager',
    'load_config',
    'reset_config',

    # Exception classes
    'TypedStoreError',
    'ConfigurationError',
    'DataPersistenceError',
    'ValidationError',
    'CacheError',
    'StorageError',
    'EncodeError',
    'DecodeError',
]
