"""
Typed durable key-value storage.
"""

from .protocol import StorageProtocol
from .preferences_storage import PreferencesStorage, default_storage

__all__ = ['StorageProtocol', 'PreferencesStorage', 'default_storage']
