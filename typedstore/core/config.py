"""
Centralized configuration management system.

This module provides type-safe configuration loading and validation
with clear error messages and environment-specific defaults. Every
variable is optional; an empty environment yields a valid configuration.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Any

from dotenv import load_dotenv

from ..types.models import StorageConfig
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "TYPEDSTORE_"
ENV_FILE_VAR = f"{ENV_PREFIX}ENV_FILE"


class ConfigManager:
    """
    Centralized configuration manager with validation and type safety.

    Loads configuration from ``TYPEDSTORE_*`` environment variables
    (optionally seeded from a ``.env`` file), converts them to their
    declared types and validates the result.
    """

    # Optional environment variables (without prefix) with their defaults
    OPTIONAL_VARS = {
        'PREFERENCES_PATH': "~/.typedstore/preferences.json",
        'BACKUP_RETENTION_COUNT': 3,
        'MAX_CACHE_SIZE': 10000,
        'MEMORY_WARNING_THRESHOLD': 80.0,
        'MEMORY_CRITICAL_THRESHOLD': 95.0,
        'MEMORY_CHECK_INTERVAL': 5.0,
        'LOG_LEVEL': 'INFO',
        'LOG_DIR': None,
        'ENVIRONMENT': 'development',
        'DEBUG_MODE': 'false'
    }

    # Environment variable types for validation
    VAR_TYPES = {
        'PREFERENCES_PATH': str,
        'BACKUP_RETENTION_COUNT': int,
        'MAX_CACHE_SIZE': int,
        'MEMORY_WARNING_THRESHOLD': float,
        'MEMORY_CRITICAL_THRESHOLD': float,
        'MEMORY_CHECK_INTERVAL': float,
        'LOG_LEVEL': str,
        'LOG_DIR': str,
        'ENVIRONMENT': str,
        'DEBUG_MODE': bool
    }

    def __init__(self, env_file_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            env_file_path: Optional path to a .env file. Falls back to the
                          TYPEDSTORE_ENV_FILE variable when not provided.
        """
        self._config: Optional[StorageConfig] = None
        self._env_file_path = env_file_path or os.getenv(ENV_FILE_VAR)
        self._load_environment(self._env_file_path)

    def _load_environment(self, env_file_path: Optional[str] = None) -> None:
        """
        Load environment variables from a .env file, if one is configured.

        Args:
            env_file_path: Optional path to .env file
        """
        if not env_file_path:
            return

        env_path = Path(env_file_path)
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)
        else:
            logger.warning(
                f"Environment file not found at {env_path}",
                extra={"env_file_path": str(env_path)}
            )

    def load_config(self) -> StorageConfig:
        """
        Load and validate configuration from environment variables.

        Returns:
            StorageConfig: Validated configuration object

        Raises:
            ConfigurationError: If any variable is invalid
        """
        if self._config is not None:
            return self._config

        config_data = self._extract_config_values()

        try:
            config = StorageConfig(**config_data)
            self._config = config
            self._apply_environment_specific_defaults()
            config.validate()
        except ValueError as e:
            self._config = None
            raise ConfigurationError(
                f"Invalid configuration: {str(e)}",
                validation_errors=[str(e)],
                env_file_path=self._env_file_path
            )

        return config

    def _extract_config_values(self) -> Dict[str, Any]:
        """
        Extract and convert configuration values from environment variables.

        Returns:
            Dict[str, Any]: Dictionary of configuration values

        Raises:
            ConfigurationError: If any values cannot be converted
        """
        config_data: Dict[str, Any] = {}
        invalid_values = {}

        for var, default_value in self.OPTIONAL_VARS.items():
            env_var = f"{ENV_PREFIX}{var}"
            field_name = var.lower()
            env_value = os.getenv(env_var)

            if env_value is None:
                env_value = default_value
                if env_value is None:
                    config_data[field_name] = None
                    continue
                if not isinstance(env_value, str):
                    config_data[field_name] = env_value
                    continue

            try:
                var_type = self.VAR_TYPES.get(var)
                if var_type == int:
                    config_data[field_name] = int(env_value)
                elif var_type == float:
                    config_data[field_name] = float(env_value)
                elif var_type == bool:
                    config_data[field_name] = env_value.lower() in ('true', 'yes', '1', 'y')
                else:
                    config_data[field_name] = env_value
            except (ValueError, TypeError):
                invalid_values[env_var] = env_value

        if invalid_values:
            raise ConfigurationError(
                f"Invalid values for environment variables: {invalid_values}. "
                f"Please check the data types and formats.",
                invalid_values=invalid_values,
                env_file_path=self._env_file_path
            )

        return config_data

    def _apply_environment_specific_defaults(self) -> None:
        """
        Apply environment-specific defaults for values not set explicitly.
        """
        if not self._config:
            return

        env_defaults = self._config.get_environment_specific_defaults()

        for key, value in env_defaults.items():
            if os.getenv(f"{ENV_PREFIX}{key.upper()}") is None:
                setattr(self._config, key, value)

    def get_config(self) -> StorageConfig:
        """
        Get the current configuration, loading it on first use.

        Returns:
            StorageConfig: Current configuration object
        """
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self) -> StorageConfig:
        """
        Reload configuration from environment variables.

        Returns:
            StorageConfig: Updated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self._load_environment(self._env_file_path)
        self._config = None
        return self.load_config()

    def get_troubleshooting_info(self) -> Dict[str, Any]:
        """
        Get troubleshooting information about the configuration state.

        Returns:
            Dict containing the current environment variables and
            validation status.
        """
        info: Dict[str, Any] = {
            'optional_variables': [f"{ENV_PREFIX}{var}" for var in self.OPTIONAL_VARS],
            'current_env_vars': {},
            'config_loaded': self._config is not None,
            'env_file_path': self._env_file_path,
            'validation_errors': []
        }

        for var, default_value in self.OPTIONAL_VARS.items():
            env_var = f"{ENV_PREFIX}{var}"
            value = os.getenv(env_var)
            info['current_env_vars'][env_var] = value if value else f'DEFAULT ({default_value})'

        if self._config:
            try:
                self._config.validate()
            except ValueError as e:
                info['validation_errors'].append(str(e))

        return info

    def get_config_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the current configuration.

        Returns:
            Dict containing a summary of the current configuration
        """
        if not self._config:
            return {'status': 'not_loaded'}

        config_dict = self._config.to_dict()
        return {
            'status': 'loaded',
            'environment': config_dict.get('environment', 'development'),
            'debug_mode': config_dict.get('debug_mode', False),
            'values': config_dict
        }


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config() -> StorageConfig:
    """Load configuration using the global configuration manager."""
    return get_config_manager().load_config()


def get_config() -> StorageConfig:
    """Get the current configuration using the global configuration manager."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Drop the global configuration manager so the next call reloads."""
    global _config_manager
    _config_manager = None
