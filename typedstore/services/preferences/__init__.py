"""
Preferences services: durable string-key to bytes stores.
"""

from .service import (
    PreferencesService,
    InMemoryPreferences,
    FilePreferences,
    standard_preferences,
    reset_standard_preferences
)

__all__ = [
    'PreferencesService',
    'InMemoryPreferences',
    'FilePreferences',
    'standard_preferences',
    'reset_standard_preferences'
]
