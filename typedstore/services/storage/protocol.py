"""
Generic typed key-value storage interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class StorageProtocol(ABC):
    """
    A typed key-value store.

    Implementations never raise serialization failures to the caller: a
    value that cannot be decoded reads as None and a value that cannot be
    encoded is not written.
    """

    @abstractmethod
    def get_value(self, key: str, value_type: Any = Any) -> Optional[Any]:
        """
        Retrieve the stored value for a key.

        Args:
            key: The key associated with the value
            value_type: The expected type of the value

        Returns:
            The decoded value if found, otherwise None
        """

    @abstractmethod
    def set_value(self, value: Any, key: str, value_type: Any = None) -> None:
        """
        Save a value.

        Args:
            value: The value to store
            key: The key to store the value under
            value_type: Declared type used for encoding (inferred when None)
        """

    @abstractmethod
    def remove_value(self, key: str) -> None:
        """
        Remove the stored value for a key; no-op when absent.
        """
