"""
Pytest Configuration and Fixtures.

Every test runs against a fresh configuration pointing the standard
preferences suite at a temporary file, and the shared cache registry uses
a memory pressure monitor that always reports normal pressure.
"""

import pytest

from typedstore.core.config import reset_config
from typedstore.services.cache.registry import SharedMemoryCache
from typedstore.services.preferences.service import (
    InMemoryPreferences,
    reset_standard_preferences,
)
from typedstore.services.storage.preferences_storage import PreferencesStorage
from typedstore.utils.logging.structured_logger import StructuredLogger
from typedstore.utils.performance.memory_monitor import MemoryPressureMonitor


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point configuration and the standard suite at a temporary directory."""
    for name in (
        "TYPEDSTORE_ENV_FILE",
        "TYPEDSTORE_LOG_DIR",
        "TYPEDSTORE_LOG_LEVEL",
        "TYPEDSTORE_MAX_CACHE_SIZE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TYPEDSTORE_ENVIRONMENT", "testing")
    monkeypatch.setenv("TYPEDSTORE_PREFERENCES_PATH", str(tmp_path / "preferences.json"))

    reset_config()
    reset_standard_preferences()
    yield tmp_path
    reset_config()
    reset_standard_preferences()


@pytest.fixture(autouse=True, scope="session")
def calm_memory_pressure():
    """Keep the shared caches from reacting to the host's real memory usage."""
    SharedMemoryCache._pressure_monitor = MemoryPressureMonitor(
        check_interval=0.0,
        usage_provider=lambda: 10.0
    )
    yield


@pytest.fixture
def quiet_logger():
    """A structured logger without file output."""
    return StructuredLogger("test", level="DEBUG")


@pytest.fixture
def memory_storage(quiet_logger):
    """A PreferencesStorage over an in-memory preferences service."""
    return PreferencesStorage(container=InMemoryPreferences(), logger=quiet_logger)
