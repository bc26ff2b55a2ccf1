"""
Byte-oriented preferences services.

A preferences service maps string keys to opaque byte blobs and persists
them for the same user across process restarts. It knows nothing about
value types; ``PreferencesStorage`` layers typed encoding on top.
"""

import base64
import binascii
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

from typedstore.core.config import get_config
from typedstore.core.exceptions import DataPersistenceError
from typedstore.utils.file_io.atomic_writer import AtomicWriter
from typedstore.utils.file_io.json_utils import (
    is_valid_json_object,
    read_json_file,
    write_json_file,
)
from typedstore.utils.logging.structured_logger import StructuredLogger, get_logger


class PreferencesService(ABC):
    """Durable string-key to bytes service."""

    @abstractmethod
    def data(self, key: str) -> Optional[bytes]:
        """Return the blob stored under ``key``, or None."""

    @abstractmethod
    def set_data(self, data: bytes, key: str) -> None:
        """Store ``data`` under ``key``, replacing any previous blob."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete the blob under ``key``; no-op when absent."""

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys."""

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.data(key) is not None


class InMemoryPreferences(PreferencesService):
    """Dict-backed preferences for tests and ephemeral suites."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._values: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.RLock()

    def data(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._values.get(key)

    def set_data(self, data: bytes, key: str) -> None:
        with self._lock:
            self._values[key] = bytes(data)

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._values)


class FilePreferences(PreferencesService):
    """
    Preferences persisted in a single JSON document.

    The document maps each key to its base64-encoded blob. It is loaded on
    first access and rewritten atomically after every mutation, keeping
    ``backup_retention_count`` previous versions. A corrupt document is
    restored from the newest readable backup; failing that, the suite
    starts empty.

    Attributes:
        path (Path): Location of the JSON document
        writer (AtomicWriter): Writer used for every save
        logger (StructuredLogger): Logger for the service
    """

    FORMAT_VERSION = 1

    def __init__(
        self,
        path: Union[str, Path],
        backup_retention_count: int = 3,
        logger: Optional[StructuredLogger] = None
    ):
        self.path = Path(path).expanduser()
        self.writer = AtomicWriter(backup_retention_count=backup_retention_count)
        self.logger = logger or get_logger("preferences")
        self._values: Optional[Dict[str, bytes]] = None
        self._lock = threading.RLock()

    def _decode_document(self, document: Dict[str, object]) -> Dict[str, bytes]:
        raw_values = document.get("values", {})
        if not isinstance(raw_values, dict):
            raise DataPersistenceError(
                "Preferences document has no 'values' object",
                file_path=str(self.path),
                operation="read"
            )

        values: Dict[str, bytes] = {}
        for key, encoded in raw_values.items():
            try:
                values[key] = base64.b64decode(encoded, validate=True)
            except (binascii.Error, TypeError, ValueError):
                self.logger.warning(
                    "Dropping unreadable preferences entry",
                    service="FilePreferences",
                    key=key,
                    path=str(self.path)
                )
        return values

    def _load(self) -> Dict[str, bytes]:
        if self._values is not None:
            return self._values

        if not self.path.exists():
            self._values = {}
            return self._values

        try:
            self._values = self._decode_document(read_json_file(self.path))
        except DataPersistenceError as e:
            self.logger.error(
                "Preferences document is unreadable",
                error=e,
                service="FilePreferences",
                path=str(self.path)
            )
            self._values = self._recover()

        self.logger.debug(
            f"Loaded {len(self._values)} preferences",
            service="FilePreferences",
            path=str(self.path)
        )
        return self._values

    def _recover(self) -> Dict[str, bytes]:
        restored = self.writer.restore_from_backup(self.path, is_valid_json_object)
        if restored is not None:
            try:
                return self._decode_document(read_json_file(self.path))
            except DataPersistenceError as e:
                self.logger.error(
                    "Restored preferences document is unreadable",
                    error=e,
                    service="FilePreferences",
                    path=str(self.path)
                )
        self.logger.warning(
            "Starting with empty preferences",
            service="FilePreferences",
            path=str(self.path)
        )
        return {}

    def _save(self, values: Dict[str, bytes]) -> None:
        document = {
            "version": self.FORMAT_VERSION,
            "values": {
                key: base64.b64encode(blob).decode("ascii")
                for key, blob in values.items()
            }
        }
        write_json_file(self.path, document, writer=self.writer)

    def data(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._load().get(key)

    def set_data(self, data: bytes, key: str) -> None:
        """
        Store a blob and persist the document.

        Raises:
            DataPersistenceError: If the document cannot be written; the
                in-memory state is left unchanged in that case
        """
        with self._lock:
            values = dict(self._load())
            values[key] = bytes(data)
            self._save(values)
            self._values = values

    def remove(self, key: str) -> None:
        """
        Delete a blob and persist the document.

        Raises:
            DataPersistenceError: If the document cannot be written
        """
        with self._lock:
            current = self._load()
            if key not in current:
                return
            values = dict(current)
            del values[key]
            self._save(values)
            self._values = values

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._load())

    def reload(self) -> None:
        """Discard the in-memory copy so the next access re-reads the file."""
        with self._lock:
            self._values = None


# Process-wide default suite
_standard: Optional[FilePreferences] = None
_standard_lock = threading.Lock()


def standard_preferences() -> FilePreferences:
    """Get the process-wide preferences suite at the configured path."""
    global _standard
    with _standard_lock:
        if _standard is None:
            config = get_config()
            _standard = FilePreferences(
                config.preferences_path,
                backup_retention_count=config.backup_retention_count
            )
        return _standard


def reset_standard_preferences() -> None:
    """Forget the process-wide suite so the next call rebuilds it."""
    global _standard
    with _standard_lock:
        _standard = None
