"""
Utility modules for typedstore.

This package provides:
- Optional-value detection helpers
- Typed value serialization
- Atomic JSON document I/O
- Structured logging
- Memory pressure monitoring
"""

from .optional import MISSING, AnyOptional, is_nil, is_optional_type, type_name
from .serializer import JSONSerializer, Serializer

__all__ = [
    'MISSING',
    'AnyOptional',
    'is_nil',
    'is_optional_type',
    'type_name',
    'JSONSerializer',
    'Serializer'
]
