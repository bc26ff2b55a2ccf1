"""
typedstore: typed persistence and caching adapters.

- ``PreferencesStorage``: durable typed key-value store over a
  byte-oriented preferences service
- ``MemoryCache`` / ``SharedMemoryCache``: in-process caches with eviction
  under memory pressure, one shared cache per key/value type pair
- ``DefaultsStorage`` / ``CacheStorage``: declarative bindings over both
"""

from typedstore.core.exceptions import (
    TypedStoreError,
    ConfigurationError,
    DataPersistenceError,
    ValidationError,
    CacheError,
    StorageError,
    EncodeError,
    DecodeError,
)
from typedstore.services.preferences import (
    PreferencesService,
    InMemoryPreferences,
    FilePreferences,
    standard_preferences,
)
from typedstore.services.storage import StorageProtocol, PreferencesStorage, default_storage
from typedstore.services.cache import MemoryCache, SharedMemoryCache, cache_signature
from typedstore.services.bindings import Binding, DefaultsStorage, CacheStorage
from typedstore.types.models import LookupStatus, StoredValue, MemoryPressure
from typedstore.utils.optional import MISSING, AnyOptional, is_nil, is_optional_type
from typedstore.utils.serializer import JSONSerializer, Serializer

__version__ = "1.0.0"

__all__ = [
    'TypedStoreError',
    'ConfigurationError',
    'DataPersistenceError',
    'ValidationError',
    'CacheError',
    'StorageError',
    'EncodeError',
    'DecodeError',
    'PreferencesService',
    'InMemoryPreferences',
    'FilePreferences',
    'standard_preferences',
    'StorageProtocol',
    'PreferencesStorage',
    'default_storage',
    'MemoryCache',
    'SharedMemoryCache',
    'cache_signature',
    'Binding',
    'DefaultsStorage',
    'CacheStorage',
    'LookupStatus',
    'StoredValue',
    'MemoryPressure',
    'MISSING',
    'AnyOptional',
    'is_nil',
    'is_optional_type',
    'JSONSerializer',
    'Serializer',
]
