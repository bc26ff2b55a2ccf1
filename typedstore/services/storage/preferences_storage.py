"""
Typed key-value store over a byte-oriented preferences service.

Values are encoded by a pluggable serializer (JSON by default) and stored
as opaque blobs. Serialization and persistence failures are logged and
degraded: a failed read looks like a missing key, a failed write has no
effect.
"""

import threading
from typing import Any, Optional

from typedstore.core.exceptions import DataPersistenceError, DecodeError, EncodeError
from typedstore.services.preferences.service import PreferencesService, standard_preferences
from typedstore.services.storage.protocol import StorageProtocol
from typedstore.types.models import LookupStatus, StoredValue
from typedstore.utils.logging.structured_logger import StructuredLogger, get_logger, timed
from typedstore.utils.optional import type_name
from typedstore.utils.serializer import JSONSerializer, Serializer


class PreferencesStorage(StorageProtocol):
    """
    Concrete ``StorageProtocol`` backed by a ``PreferencesService``.

    Attributes:
        container (PreferencesService): Byte store holding the records
        serializer (Serializer): Value <-> bytes codec
        logger (StructuredLogger): Logger for the service
    """

    def __init__(
        self,
        container: Optional[PreferencesService] = None,
        serializer: Optional[Serializer] = None,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Initialize the storage.

        Args:
            container: Preferences service (default: the standard suite)
            serializer: Serializer (default: JSONSerializer)
            logger: Structured logger (optional)
        """
        self.container = container if container is not None else standard_preferences()
        self.serializer = serializer or JSONSerializer()
        self.logger = logger or get_logger("preferences_storage")

    @timed("preferences_storage.lookup")
    def lookup(self, key: str, value_type: Any = Any) -> StoredValue:
        """
        Look up a key and report whether it is present, absent or undecodable.

        Args:
            key: The key associated with the value
            value_type: The expected type of the value

        Returns:
            StoredValue tagged with the lookup status
        """
        data = self.container.data(key)
        if data is None:
            return StoredValue(LookupStatus.ABSENT)

        try:
            value = self.serializer.decode(data, value_type)
        except DecodeError as e:
            self.logger.error(
                f"Failed to decode value for key '{key}'",
                error=e,
                service="PreferencesStorage",
                key=key,
                value_type=type_name(value_type)
            )
            return StoredValue(LookupStatus.UNDECODABLE, error=str(e))

        return StoredValue(LookupStatus.PRESENT, value)

    def get_value(self, key: str, value_type: Any = Any) -> Optional[Any]:
        """
        Retrieve the stored value for a key.

        Returns:
            The decoded value, or None if the key is absent or its value
            cannot be decoded as ``value_type``
        """
        return self.lookup(key, value_type).unwrap_or(None)

    def has_value(self, key: str) -> bool:
        """Check whether a record exists for a key, decodable or not."""
        return self.container.data(key) is not None

    @timed("preferences_storage.set_value")
    def set_value(self, value: Any, key: str, value_type: Any = None) -> None:
        """
        Save a value, replacing any previous record.

        Encoding or write failures are logged and the previous record is
        left in place.
        """
        if value_type is None:
            value_type = Any

        try:
            data = self.serializer.encode(value, value_type)
        except EncodeError as e:
            self.logger.error(
                f"Failed to encode value for key '{key}'",
                error=e,
                service="PreferencesStorage",
                key=key,
                value_type=type_name(value_type)
            )
            return

        try:
            self.container.set_data(data, key)
        except DataPersistenceError as e:
            self.logger.error(
                f"Failed to persist value for key '{key}'",
                error=e,
                service="PreferencesStorage",
                key=key
            )
            return

        self.logger.debug(f"Stored value for key '{key}'", service="PreferencesStorage")

    def remove_value(self, key: str) -> None:
        """Remove the stored value for a key; no-op when absent."""
        try:
            self.container.remove(key)
        except DataPersistenceError as e:
            self.logger.error(
                f"Failed to remove value for key '{key}'",
                error=e,
                service="PreferencesStorage",
                key=key
            )
            return

        self.logger.info(f"Removed value for key '{key}'", service="PreferencesStorage")


# Shared storage over the process-wide preferences suite
_default_storage: Optional[PreferencesStorage] = None
_default_storage_lock = threading.Lock()


def default_storage() -> PreferencesStorage:
    """
    Get the shared PreferencesStorage over the standard preferences suite.

    The instance is rebuilt when the standard suite has been reset.
    """
    global _default_storage
    container = standard_preferences()
    with _default_storage_lock:
        if _default_storage is None or _default_storage.container is not container:
            _default_storage = PreferencesStorage(container)
        return _default_storage
