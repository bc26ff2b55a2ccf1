"""
Helpers for telling "no value" apart from a value.

Bindings translate an assignment of "no value" into a removal of the
backing record, so they need a uniform way to recognise absence both in
values (``is_nil``) and in declared types (``is_optional_type``).
"""

import types
from typing import Any, Optional, Protocol, Union, get_args, get_origin, runtime_checkable


class _Missing:
    """Sentinel type for "argument not supplied"."""

    _instance: Optional['_Missing'] = None

    def __new__(cls) -> '_Missing':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_NONE_TYPE = type(None)
_UNION_TYPES = (Union, getattr(types, "UnionType", Union))


@runtime_checkable
class AnyOptional(Protocol):
    """
    Values that model their own absence.

    Any object exposing an ``is_nil`` attribute is treated as "no value"
    by the bindings when that attribute is true.
    """

    @property
    def is_nil(self) -> bool: ...


def is_nil(value: Any) -> bool:
    """
    Check whether a value represents "no value".

    Returns True for ``None`` and for ``AnyOptional`` objects whose
    ``is_nil`` is true.
    """
    if value is None or value is MISSING:
        return True
    if isinstance(value, AnyOptional):
        return bool(value.is_nil)
    return False


def is_optional_type(tp: Any) -> bool:
    """
    Check whether a declared type admits "no value".

    True for ``Optional[X]``, ``X | None``, ``None`` itself and ``Any``.
    """
    if tp is Any or tp is None or tp is _NONE_TYPE:
        return True
    if get_origin(tp) in _UNION_TYPES:
        return any(is_optional_type(arg) for arg in get_args(tp))
    return False


def type_name(tp: Any) -> str:
    """Printed name of a type, as used in signatures and log messages."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp).replace("typing.", "")
