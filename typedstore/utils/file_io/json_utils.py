"""
JSON document helpers for the preferences file.

Serialization goes through orjson. Errors surface as
``DataPersistenceError`` carrying the file path and operation.
"""

import logging
from pathlib import Path
from typing import Dict, Any, Optional

import orjson

from typedstore.core.exceptions import DataPersistenceError
from typedstore.utils.file_io.atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)


def dump_json_bytes(data: Dict[str, Any], indent: bool = False) -> bytes:
    """
    Serialize a dictionary to JSON bytes with sorted keys.

    Raises:
        DataPersistenceError: If the data is not JSON serializable
    """
    option = orjson.OPT_SORT_KEYS
    if indent:
        option |= orjson.OPT_INDENT_2
    try:
        return orjson.dumps(data, option=option)
    except TypeError as e:
        raise DataPersistenceError(
            f"Data is not JSON serializable: {str(e)}",
            operation="serialize",
            original_error=e
        )


def load_json_bytes(content: bytes, file_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Parse JSON bytes that must hold an object.

    Raises:
        DataPersistenceError: If the content is not a JSON object
    """
    try:
        data = orjson.loads(content)
    except orjson.JSONDecodeError as e:
        raise DataPersistenceError(
            f"Invalid JSON: {str(e)}",
            file_path=str(file_path) if file_path else None,
            operation="read",
            original_error=e
        )

    if not isinstance(data, dict):
        raise DataPersistenceError(
            f"Expected a JSON object, got {type(data).__name__}",
            file_path=str(file_path) if file_path else None,
            operation="read"
        )
    return data


def is_valid_json_object(content: bytes) -> bool:
    """Check whether bytes parse as a JSON object."""
    try:
        load_json_bytes(content)
    except DataPersistenceError:
        return False
    return True


def read_json_file(file_path: Path) -> Dict[str, Any]:
    """
    Read a JSON object from a file.

    Raises:
        DataPersistenceError: If the file is missing, unreadable or invalid
    """
    if not file_path.exists():
        raise DataPersistenceError(
            f"File not found: {file_path}",
            file_path=str(file_path),
            operation="read"
        )

    try:
        content = file_path.read_bytes()
    except OSError as e:
        logger.error(
            f"Failed to read JSON from file: {file_path}",
            exc_info=True,
            extra={"error": str(e)}
        )
        raise DataPersistenceError(
            f"Failed to read JSON from file: {str(e)}",
            file_path=str(file_path),
            operation="read",
            original_error=e
        )

    return load_json_bytes(content, file_path)


def write_json_file(
    file_path: Path,
    data: Dict[str, Any],
    writer: Optional[AtomicWriter] = None,
    indent: bool = True,
    create_backup: bool = True
) -> None:
    """
    Write a JSON object to a file atomically.

    Args:
        file_path: Path to the output file
        data: Dictionary to serialize
        writer: AtomicWriter to use (a default one is created if None)
        indent: Pretty-print the document
        create_backup: Whether to back up the previous version

    Raises:
        DataPersistenceError: If serialization or the write fails
    """
    writer = writer or AtomicWriter()
    writer.write_atomic(file_path, dump_json_bytes(data, indent=indent), create_backup)
