"""
Typed value serialization for the key-value store.

The store only sees bytes; a serializer turns a typed value into bytes and
back. ``JSONSerializer`` uses pydantic type adapters, so anything pydantic
can validate (builtins, containers, dataclasses, models, ``Optional``
unions, datetimes) round-trips with its declared type.
"""

import threading
from typing import Any, Dict, Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from typedstore.core.exceptions import DecodeError, EncodeError
from typedstore.utils.optional import type_name


class Serializer(Protocol):
    """Value <-> bytes codec used by the key-value store."""

    def encode(self, value: Any, value_type: Any = Any) -> bytes:
        """Encode a value, raising EncodeError on failure."""
        ...

    def decode(self, data: bytes, value_type: Any = Any) -> Any:
        """Decode bytes as ``value_type``, raising DecodeError on failure."""
        ...


class JSONSerializer:
    """
    JSON serializer built on pydantic ``TypeAdapter``.

    Attributes:
        strict (bool): Reject lossy coercions when encoding or decoding
            (e.g. "42" -> 42)
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        self._adapters: Dict[Any, TypeAdapter] = {}
        self._lock = threading.Lock()

    def _adapter(self, value_type: Any) -> TypeAdapter:
        try:
            adapter = self._adapters.get(value_type)
        except TypeError:
            # Unhashable type expressions are not cached
            return TypeAdapter(value_type)

        if adapter is None:
            adapter = TypeAdapter(value_type)
            with self._lock:
                self._adapters[value_type] = adapter
        return adapter

    def encode(self, value: Any, value_type: Any = Any) -> bytes:
        """
        Encode a value as JSON bytes.

        The value is validated against ``value_type`` first, so a value of
        the wrong type is rejected instead of being written in a form that
        cannot be decoded again.

        Raises:
            EncodeError: If the value is not a ``value_type`` or cannot be
                serialized
        """
        try:
            adapter = self._adapter(value_type)
            if value_type is not Any:
                value = adapter.validate_python(value, strict=self.strict)
            return adapter.dump_json(value)
        except (PydanticSerializationError, PydanticValidationError, TypeError, ValueError) as e:
            raise EncodeError(
                f"Cannot encode {type(value).__name__} as {type_name(value_type)}",
                value_type=type_name(value_type),
                original_error=e
            )

    def decode(self, data: bytes, value_type: Any = Any) -> Any:
        """
        Decode JSON bytes as ``value_type``.

        Raises:
            DecodeError: If the bytes are not valid JSON for ``value_type``
        """
        try:
            return self._adapter(value_type).validate_json(data, strict=self.strict)
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise DecodeError(
                f"Cannot decode stored data as {type_name(value_type)}",
                value_type=type_name(value_type),
                original_error=e
            )
