"""
Tests for configuration loading.
"""

import os
import unittest

import pytest

from typedstore.core.config import ConfigManager, get_config, reset_config
from typedstore.core.exceptions import ConfigurationError
from typedstore.types.models import StorageConfig


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager."""

    @pytest.fixture(autouse=True)
    def _fixtures(self, tmp_path, monkeypatch):
        self.tmp_path = tmp_path
        self.monkeypatch = monkeypatch

    def test_testing_environment_defaults(self):
        """Test the defaults applied in the testing environment."""
        config = ConfigManager().load_config()

        self.assertEqual("testing", config.environment)
        self.assertEqual("DEBUG", config.log_level)
        self.assertEqual(0, config.backup_retention_count)
        self.assertEqual(0.0, config.memory_check_interval)
        self.assertEqual(10000, config.max_cache_size)
        self.assertTrue(config.debug_mode)
        self.assertEqual(str(self.tmp_path / "preferences.json"), config.preferences_path)

    def test_explicit_values_override_environment_defaults(self):
        """Test that variables that are set win over environment defaults."""
        self.monkeypatch.setenv("TYPEDSTORE_LOG_LEVEL", "WARNING")
        self.monkeypatch.setenv("TYPEDSTORE_BACKUP_RETENTION_COUNT", "5")
        self.monkeypatch.setenv("TYPEDSTORE_DEBUG_MODE", "no")

        config = ConfigManager().load_config()

        self.assertEqual("WARNING", config.log_level)
        self.assertEqual(5, config.backup_retention_count)
        self.assertFalse(config.debug_mode)

    def test_production_defaults(self):
        self.monkeypatch.setenv("TYPEDSTORE_ENVIRONMENT", "production")

        config = ConfigManager().load_config()

        self.assertEqual("INFO", config.log_level)
        self.assertFalse(config.debug_mode)
        self.assertEqual(3, config.backup_retention_count)

    def test_invalid_number(self):
        """Test that unparseable values are reported together."""
        self.monkeypatch.setenv("TYPEDSTORE_MAX_CACHE_SIZE", "lots")

        with self.assertRaises(ConfigurationError) as ctx:
            ConfigManager().load_config()

        self.assertIn("TYPEDSTORE_MAX_CACHE_SIZE", ctx.exception.invalid_values)
        self.assertIn("TYPEDSTORE_MAX_CACHE_SIZE", ctx.exception.get_troubleshooting_message())

    def test_validation_failure(self):
        """Test that out-of-range values fail validation."""
        self.monkeypatch.setenv("TYPEDSTORE_MEMORY_WARNING_THRESHOLD", "96")

        with self.assertRaises(ConfigurationError) as ctx:
            ConfigManager().load_config()

        self.assertEqual("CONFIG_ERROR", ctx.exception.error_code)
        self.assertTrue(ctx.exception.validation_errors)

    def test_env_file(self):
        """Test loading variables from a .env file."""
        env_file = self.tmp_path / "typedstore.env"
        env_file.write_text("TYPEDSTORE_MAX_CACHE_SIZE=500\n")
        self.addCleanup(os.environ.pop, "TYPEDSTORE_MAX_CACHE_SIZE", None)

        manager = ConfigManager(str(env_file))
        config = manager.load_config()

        self.assertEqual(500, config.max_cache_size)
        self.assertEqual(str(env_file), manager.get_troubleshooting_info()['env_file_path'])

    def test_missing_env_file_is_tolerated(self):
        config = ConfigManager(str(self.tmp_path / "absent.env")).load_config()

        self.assertEqual(10000, config.max_cache_size)

    def test_config_is_cached_until_reload(self):
        """Test that reload picks up changed variables."""
        manager = ConfigManager()
        first = manager.get_config()
        self.assertIs(first, manager.get_config())

        self.monkeypatch.setenv("TYPEDSTORE_MAX_CACHE_SIZE", "42")
        reloaded = manager.reload_config()

        self.assertEqual(42, reloaded.max_cache_size)

    def test_summary(self):
        manager = ConfigManager()
        self.assertEqual({'status': 'not_loaded'}, manager.get_config_summary())

        manager.load_config()
        summary = manager.get_config_summary()

        self.assertEqual('loaded', summary['status'])
        self.assertEqual('testing', summary['environment'])

    def test_global_config(self):
        """Test the process-wide configuration accessors."""
        first = get_config()
        self.assertIs(first, get_config())

        reset_config()

        self.assertIsNot(first, get_config())


class TestStorageConfig(unittest.TestCase):
    """Test cases for StorageConfig validation."""

    def test_defaults_are_valid(self):
        StorageConfig().validate()

    def test_invalid_values(self):
        invalid = [
            {"max_cache_size": 0},
            {"backup_retention_count": -1},
            {"memory_warning_threshold": 96.0},
            {"log_level": "LOUD"},
            {"environment": "staging"},
        ]
        for overrides in invalid:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ValueError):
                    StorageConfig(**overrides).validate()
