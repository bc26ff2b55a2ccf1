"""
Tests for the typed durable key-value store.
"""

import unittest
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from typedstore.core.exceptions import DataPersistenceError
from typedstore.services.preferences.service import (
    FilePreferences,
    InMemoryPreferences,
    standard_preferences,
)
from typedstore.services.storage.preferences_storage import PreferencesStorage
from typedstore.types.models import LogLevel, LookupStatus
from typedstore.utils.logging.structured_logger import StructuredLogger


@dataclass
class Profile:
    name: str
    age: int
    tags: List[str]


class Unserializable:
    pass


class FailingPreferences(InMemoryPreferences):
    """Preferences whose writes always fail."""

    def set_data(self, data: bytes, key: str) -> None:
        raise DataPersistenceError("disk full", operation="write")


class TestPreferencesStorage(unittest.TestCase):
    """Test cases for PreferencesStorage over in-memory preferences."""

    key = "username"

    def setUp(self):
        self.logger = StructuredLogger("test_storage", level="DEBUG")
        self.container = InMemoryPreferences()
        self.storage = PreferencesStorage(container=self.container, logger=self.logger)

    def test_set_new_value(self):
        """Test storing and retrieving a value."""
        self.storage.set_value("Brandon", self.key)

        self.assertEqual("Brandon", self.storage.get_value(self.key, str))

    def test_update_existing_value(self):
        """Test that a second write replaces the first."""
        self.storage.set_value("Brandon", self.key)
        self.assertEqual("Brandon", self.storage.get_value(self.key, str))

        self.storage.set_value("Steven", self.key)
        self.assertEqual("Steven", self.storage.get_value(self.key, str))

    def test_remove_existing_value(self):
        """Test that a removed value reads as None."""
        self.storage.set_value("Brandon", self.key)
        self.assertEqual("Brandon", self.storage.get_value(self.key, str))

        self.storage.remove_value(self.key)

        self.assertIsNone(self.storage.get_value(self.key, str))
        self.assertFalse(self.storage.has_value(self.key))

    def test_remove_absent_key_is_noop(self):
        """Test removing a missing key, twice."""
        self.storage.set_value(1, "other")

        self.storage.remove_value(self.key)
        self.storage.remove_value(self.key)

        self.assertIsNone(self.storage.get_value(self.key))
        self.assertEqual(1, self.storage.get_value("other", int))

    def test_missing_key_returns_none(self):
        """Test reading a key that was never set."""
        self.assertIsNone(self.storage.get_value("never-set", str))
        self.assertEqual(LookupStatus.ABSENT, self.storage.lookup("never-set", str).status)

    def test_structured_values_round_trip(self):
        """Test dataclasses and containers round-trip with their types."""
        profile = Profile(name="Brandon", age=31, tags=["admin", "beta"])
        self.storage.set_value(profile, "profile", Profile)
        self.storage.set_value({"a": [1, 2], "b": []}, "mapping", Dict[str, List[int]])

        self.assertEqual(profile, self.storage.get_value("profile", Profile))
        self.assertEqual({"a": [1, 2], "b": []}, self.storage.get_value("mapping", Dict[str, List[int]]))

    def test_values_are_stored_as_json(self):
        """Test the bytes handed to the preferences service."""
        self.storage.set_value({"theme": "dark"}, "settings")

        self.assertEqual(b'{"theme":"dark"}', self.container.data("settings"))

    def test_decode_failure_reads_as_absent(self):
        """Test that a value of the wrong type reads as None and is logged."""
        self.storage.set_value("not a number", "count")

        self.assertIsNone(self.storage.get_value("count", int))
        errors = self.logger.get_recent_logs(level=LogLevel.ERROR)
        self.assertEqual(1, len(errors))
        self.assertIn("count", errors[0].message)

    def test_lookup_distinguishes_undecodable_from_absent(self):
        """Test the tagged lookup result."""
        self.container.set_data(b"{broken", "corrupt")

        result = self.storage.lookup("corrupt", int)

        self.assertEqual(LookupStatus.UNDECODABLE, result.status)
        self.assertIsNotNone(result.error)
        self.assertTrue(self.storage.has_value("corrupt"))
        self.assertEqual("fallback", result.unwrap_or("fallback"))

    def test_strict_decoding_rejects_coercion(self):
        """Test that a stored string is not coerced into an int."""
        self.storage.set_value("42", "answer")

        self.assertIsNone(self.storage.get_value("answer", int))
        self.assertEqual("42", self.storage.get_value("answer", str))

    def test_encode_failure_drops_write(self):
        """Test that an unserializable value leaves the previous record."""
        self.storage.set_value("kept", "slot")

        self.storage.set_value(Unserializable(), "slot")

        self.assertEqual("kept", self.storage.get_value("slot", str))
        self.assertEqual(1, len(self.logger.get_recent_logs(level=LogLevel.ERROR)))

    def test_wrong_typed_write_keeps_previous_value(self):
        """Test that a value of the wrong declared type is not written."""
        self.storage.set_value(5, "count", int)

        self.storage.set_value("abc", "count", int)

        self.assertEqual(5, self.storage.get_value("count", int))
        self.assertEqual(b"5", self.container.data("count"))
        self.assertEqual(1, len(self.logger.get_recent_logs(level=LogLevel.ERROR)))

    def test_persistence_failure_is_not_raised(self):
        """Test that a failing preferences service does not raise."""
        storage = PreferencesStorage(container=FailingPreferences(), logger=self.logger)

        storage.set_value("value", "key")

        self.assertIsNone(storage.get_value("key"))

    def test_optional_values(self):
        """Test storing None explicitly for an optional type."""
        self.storage.set_value(None, "maybe", Optional[int])

        self.assertTrue(self.storage.has_value("maybe"))
        result = self.storage.lookup("maybe", Optional[int])
        self.assertEqual(LookupStatus.PRESENT, result.status)
        self.assertIsNone(result.value)


class TestFilePreferences(unittest.TestCase):
    """Test cases for the JSON-file preferences service."""

    @pytest.fixture(autouse=True)
    def _tmp_path(self, tmp_path):
        self.tmp_path = tmp_path

    def setUp(self):
        self.path = self.tmp_path / "prefs" / "preferences.json"
        self.logger = StructuredLogger("test_file_preferences", level="DEBUG")

    def _preferences(self) -> FilePreferences:
        return FilePreferences(self.path, backup_retention_count=3, logger=self.logger)

    def test_values_survive_a_new_instance(self):
        """Test that values are persisted to disk."""
        storage = PreferencesStorage(container=self._preferences(), logger=self.logger)
        storage.set_value(["a", "b"], "letters", List[str])

        reopened = PreferencesStorage(container=self._preferences(), logger=self.logger)

        self.assertEqual(["a", "b"], reopened.get_value("letters", List[str]))
        self.assertTrue(self.path.exists())

    def test_remove_is_persisted(self):
        """Test that removal is written to disk."""
        prefs = self._preferences()
        prefs.set_data(b'"x"', "key")
        prefs.remove("key")

        self.assertNotIn("key", self._preferences())
        self.assertEqual([], self._preferences().keys())

    def test_corrupt_document_is_restored_from_backup(self):
        """Test recovery from the newest valid backup."""
        prefs = self._preferences()
        prefs.set_data(b'"first"', "key")
        prefs.set_data(b'"second"', "key")

        self.path.write_bytes(b"{not json")

        recovered = self._preferences()
        self.assertEqual(b'"first"', recovered.data("key"))

    def test_corrupt_document_without_backup_starts_empty(self):
        """Test that an unrecoverable document yields an empty suite."""
        self.path.parent.mkdir(parents=True)
        self.path.write_bytes(b"[]")

        prefs = self._preferences()

        self.assertEqual([], prefs.keys())
        self.assertTrue(self.logger.get_recent_logs(level=LogLevel.ERROR))

    def test_reload_reads_external_changes(self):
        """Test that reload discards the in-memory copy."""
        first = self._preferences()
        second = self._preferences()
        self.assertEqual([], second.keys())

        first.set_data(b"1", "count")
        self.assertIsNone(second.data("count"))

        second.reload()

        self.assertEqual(b"1", second.data("count"))


class TestStandardPreferences(unittest.TestCase):
    """Test cases for the process-wide default suite."""

    def test_standard_suite_is_shared(self):
        """Test that the standard suite is a singleton at the configured path."""
        first = standard_preferences()
        second = standard_preferences()

        self.assertIs(first, second)
        self.assertEqual("preferences.json", Path(first.path).name)

    def test_default_storage_uses_standard_suite(self):
        """Test that PreferencesStorage defaults to the standard suite."""
        storage = PreferencesStorage()
        storage.set_value("Brandon", "username")

        self.assertEqual("Brandon", PreferencesStorage().get_value("username", str))
        self.assertIn("username", standard_preferences())
