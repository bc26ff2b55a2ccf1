"""
System memory pressure monitoring.

The memory cache has no operating system cache to delegate eviction to,
so it asks this monitor how much pressure the system is under and purges
entries accordingly.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional, Any
from dataclasses import dataclass, field

import psutil

from typedstore.types.models import MemoryPressure

logger = logging.getLogger("typedstore.performance.memory")


@dataclass
class MemoryAlert:
    """Memory pressure alert with context information."""

    timestamp: datetime
    usage_percent: float
    threshold_percent: float
    level: MemoryPressure
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return (
            f"Memory Alert ({self.level.value}): {self.usage_percent:.1f}% "
            f"(threshold: {self.threshold_percent:.1f}%)"
        )


def system_memory_percent() -> float:
    """Current system memory usage in percent, as reported by psutil."""
    return float(psutil.virtual_memory().percent)


class MemoryPressureMonitor:
    """
    Memory pressure monitor with throttled readings.

    Readings are taken at most once per ``check_interval`` seconds; in
    between, the last level is reported. Entering a WARNING or CRITICAL
    level is logged and recorded as an alert.

    Attributes:
        warning_threshold: Usage percent at which pressure is WARNING
        critical_threshold: Usage percent at which pressure is CRITICAL
        check_interval: Minimum seconds between readings
    """

    def __init__(
        self,
        warning_threshold: float = 80.0,
        critical_threshold: float = 95.0,
        check_interval: float = 5.0,
        usage_provider: Optional[Callable[[], float]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize memory pressure monitor.

        Args:
            warning_threshold: Usage percent for WARNING pressure
            critical_threshold: Usage percent for CRITICAL pressure
            check_interval: Minimum seconds between readings (0 reads every time)
            usage_provider: Callable returning usage percent (defaults to psutil)
            logger: Logger instance (optional)

        Raises:
            ValueError: If thresholds are out of order or out of range
        """
        if not (0 < warning_threshold < critical_threshold <= 100):
            raise ValueError(
                "Thresholds must satisfy 0 < warning_threshold < critical_threshold <= 100"
            )
        if check_interval < 0:
            raise ValueError("check_interval cannot be negative")

        self.warning_threshold = warning_threshold
        self.critical_threshold = critical_threshold
        self.check_interval = check_interval
        self.logger = logger or logging.getLogger("typedstore.performance.memory")
        self._usage_provider = usage_provider or system_memory_percent

        self._lock = threading.Lock()
        self._level = MemoryPressure.NORMAL
        self._last_usage = 0.0
        self._last_check: Optional[float] = None
        self._recent_alerts: List[MemoryAlert] = []
        self._stats = {
            "checks": 0,
            "warnings": 0,
            "critical_alerts": 0,
            "read_failures": 0
        }

    def _classify(self, usage: float) -> MemoryPressure:
        if usage >= self.critical_threshold:
            return MemoryPressure.CRITICAL
        if usage >= self.warning_threshold:
            return MemoryPressure.WARNING
        return MemoryPressure.NORMAL

    def _record_transition(self, level: MemoryPressure, usage: float) -> None:
        if level is MemoryPressure.CRITICAL:
            self._stats["critical_alerts"] += 1
            threshold = self.critical_threshold
            self.logger.critical(
                f"Critical memory pressure: {usage:.1f}% (threshold: {threshold:.1f}%)"
            )
        else:
            self._stats["warnings"] += 1
            threshold = self.warning_threshold
            self.logger.warning(
                f"High memory pressure: {usage:.1f}% (threshold: {threshold:.1f}%)"
            )

        self._recent_alerts.append(MemoryAlert(
            timestamp=datetime.now(),
            usage_percent=usage,
            threshold_percent=threshold,
            level=level
        ))
        # Keep only recent alerts (last 10)
        if len(self._recent_alerts) > 10:
            self._recent_alerts = self._recent_alerts[-10:]

    def check(self, force: bool = False) -> MemoryPressure:
        """
        Get the current memory pressure level.

        Args:
            force: Take a reading even if the check interval has not elapsed

        Returns:
            MemoryPressure: Current pressure level
        """
        with self._lock:
            now = time.monotonic()
            if (
                not force
                and self._last_check is not None
                and now - self._last_check < self.check_interval
            ):
                return self._level

            self._last_check = now
            try:
                usage = float(self._usage_provider())
            except (OSError, RuntimeError, ValueError) as e:
                self._stats["read_failures"] += 1
                self.logger.warning(f"Failed to read memory usage: {e}")
                return self._level

            self._stats["checks"] += 1
            self._last_usage = usage
            level = self._classify(usage)

            if level is not MemoryPressure.NORMAL and level is not self._level:
                self._record_transition(level, usage)
            elif level is MemoryPressure.NORMAL and self._level is not MemoryPressure.NORMAL:
                self.logger.info(f"Memory pressure back to normal: {usage:.1f}%")

            self._level = level
            return level

    @property
    def level(self) -> MemoryPressure:
        """Last observed pressure level, without taking a reading."""
        return self._level

    def get_recent_alerts(self) -> List[MemoryAlert]:
        with self._lock:
            return list(self._recent_alerts)

    def get_stats(self) -> Dict[str, Any]:
        """Get monitor statistics."""
        with self._lock:
            return {
                **self._stats,
                "level": self._level.value,
                "last_usage_percent": self._last_usage,
                "warning_threshold": self.warning_threshold,
                "critical_threshold": self.critical_threshold
            }
