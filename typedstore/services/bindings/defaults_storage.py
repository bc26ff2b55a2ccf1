"""
Binding over the durable key-value store.
"""

from typing import Any, Optional, TypeVar

from typedstore.services.bindings.binding import StorageBinding
from typedstore.services.storage.preferences_storage import default_storage
from typedstore.services.storage.protocol import StorageProtocol
from typedstore.utils.optional import MISSING

T = TypeVar('T')


class DefaultsStorage(StorageBinding[T]):
    """
    Binding that reads and writes straight through to a ``StorageProtocol``.

    Example::

        class Settings:
            username = DefaultsStorage("username", default="Guest")
            token = DefaultsStorage("token", value_type=Optional[str])

        settings = Settings()
        settings.username          # "Guest"
        settings.username = "Brandon"
        settings.token = None      # removes the "token" record

    Without an explicit storage, bindings share the process-wide
    ``default_storage()``, resolved on each access, so declaring a binding
    at class level does not touch the preferences file.
    """

    def __init__(
        self,
        key: str,
        default: Any = MISSING,
        *,
        value_type: Any = None,
        storage: Optional[StorageProtocol] = None
    ):
        super().__init__(key, default, value_type=value_type)
        self._storage = storage

    @property
    def storage(self) -> StorageProtocol:
        if self._storage is None:
            return default_storage()
        return self._storage

    def _read(self) -> Any:
        return self.storage.get_value(self.key, self.value_type)

    def _write(self, value: Any) -> None:
        self.storage.set_value(value, self.key, self.value_type)

    def _delete(self) -> None:
        self.storage.remove_value(self.key)
