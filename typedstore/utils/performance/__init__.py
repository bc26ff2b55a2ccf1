"""
Performance utilities: memory pressure monitoring.
"""

from .memory_monitor import MemoryAlert, MemoryPressureMonitor, system_memory_percent

__all__ = [
    'MemoryAlert',
    'MemoryPressureMonitor',
    'system_memory_percent'
]
