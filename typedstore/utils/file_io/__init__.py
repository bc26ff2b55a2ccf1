"""
File I/O utilities for the durable preferences document.

This package provides:
- Atomic writes with backup mechanisms
- orjson-based JSON document reading and writing
"""

from typedstore.utils.file_io.atomic_writer import AtomicWriter
from typedstore.utils.file_io.json_utils import (
    dump_json_bytes,
    load_json_bytes,
    is_valid_json_object,
    read_json_file,
    write_json_file
)

__all__ = [
    'AtomicWriter',
    'dump_json_bytes',
    'load_json_bytes',
    'is_valid_json_object',
    'read_json_file',
    'write_json_file'
]
