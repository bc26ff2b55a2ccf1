"""
Structured logging with performance monitoring.
"""

from .structured_logger import StructuredLogger, ContextLogger, timed, get_logger

__all__ = [
    'StructuredLogger',
    'ContextLogger',
    'timed',
    'get_logger'
]
