"""
Shared machinery for storage-backed bindings.

A binding pairs a storage key with a default value. It can be used as a
plain accessor object (``value``, ``get``, ``set``, ``remove``) or declared
as a class attribute, in which case attribute reads and writes go through
the binding.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, List, Optional, TypeVar

from typedstore.core.exceptions import ValidationError
from typedstore.utils.optional import MISSING, is_nil, is_optional_type, type_name

T = TypeVar('T')

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Any], None]


class Binding(Generic[T]):
    """
    Two-way binding: a get/set pair exposed as one value.

    UI layers hold a Binding and read or write ``value`` without knowing
    where the value lives.
    """

    __slots__ = ('_getter', '_setter')

    def __init__(self, getter: Callable[[], T], setter: Callable[[T], None]):
        self._getter = getter
        self._setter = setter

    def get(self) -> T:
        return self._getter()

    def set(self, value: T) -> None:
        self._setter(value)

    @property
    def value(self) -> T:
        return self._getter()

    @value.setter
    def value(self, new_value: T) -> None:
        self._setter(new_value)

    @classmethod
    def constant(cls, value: T) -> 'Binding[T]':
        """A read-only binding whose writes are ignored."""
        return cls(lambda: value, lambda _: None)


def resolve_value_type(key: Any, default: Any, value_type: Any) -> Any:
    """
    Work out a binding's value type and check its default.

    Returns:
        The declared value type, or one inferred from ``default``

    Raises:
        ValidationError: If there is no default and the type is not optional
    """
    if value_type is None:
        if default is MISSING or default is None:
            return Optional[Any]
        return type(default)

    if (default is MISSING or default is None) and not is_optional_type(value_type):
        raise ValidationError(
            f"Binding for key '{key}' needs a non-None default value: "
            f"{type_name(value_type)} is not optional",
            field_name=str(key),
            expected_type=type_name(value_type)
        )
    return value_type


class StorageBinding(ABC, Generic[T]):
    """
    Base class for bindings over a backing store.

    Subclasses implement ``_read``, ``_write`` and ``_delete`` against their
    store. Assigning a value that is "no value" (see ``is_nil``) deletes the
    backing record instead of writing it.

    Attributes:
        key: Storage key
        default: Value returned when the store holds nothing
        value_type: Declared type of the value
    """

    def __init__(self, key: Any, default: Any = MISSING, *, value_type: Any = None):
        self.key = key
        self.value_type = resolve_value_type(key, default, value_type)
        self.default = None if default is MISSING else default
        self.optional = is_optional_type(self.value_type)
        self.attribute_name: Optional[str] = None
        self._subscribers: List[ChangeCallback] = []
        self._subscribers_lock = threading.Lock()

    # Store hooks

    @abstractmethod
    def _read(self) -> Any:
        """Current stored value, or None when the store holds nothing."""

    @abstractmethod
    def _write(self, value: Any) -> None:
        """Store a value that is not "no value"."""

    @abstractmethod
    def _delete(self) -> None:
        """Remove the backing record; no-op when absent."""

    # Accessor API

    def get(self) -> T:
        """Current value, or the default when the store holds nothing."""
        value = self._read()
        return self.default if value is None else value

    def set(self, value: T) -> None:
        """
        Assign a value; "no value" removes the backing record.

        Raises:
            ValidationError: If None is assigned to a non-optional binding
        """
        if is_nil(value):
            if not self.optional and value is None:
                raise ValidationError(
                    f"Cannot assign None to non-optional binding '{self.key}'",
                    field_name=str(self.key),
                    expected_type=type_name(self.value_type)
                )
            self._apply(None, remove=True)
        else:
            self._apply(value, remove=False)

    def remove(self) -> None:
        """Remove the backing record; reads fall back to the default."""
        self._apply(None, remove=True)

    def _apply(self, value: Any, remove: bool) -> None:
        if remove:
            self._delete()
        else:
            self._write(value)
        self._notify(self.get())

    @property
    def value(self) -> T:
        return self.get()

    @value.setter
    def value(self, new_value: T) -> None:
        self.set(new_value)

    @property
    def binding(self) -> Binding[T]:
        """Two-way binding routed through this accessor."""
        return Binding(self.get, self.set)

    # Change notification

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """
        Register a callback invoked with the new value after every write.

        Returns:
            A function that unregisters the callback
        """
        with self._subscribers_lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._subscribers_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, value: Any) -> None:
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                # A failing observer must not undo a completed write
                logger.exception(
                    f"Change callback failed for binding '{self.key}'",
                    extra={"key": str(self.key)}
                )

    # Descriptor protocol

    def __set_name__(self, owner: type, name: str) -> None:
        self.attribute_name = name

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return self.get()

    def __set__(self, instance: Any, value: T) -> None:
        self.set(value)

    def __delete__(self, instance: Any) -> None:
        self.remove()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.key!r}, default={self.default!r}, "
            f"value_type={type_name(self.value_type)})"
        )
