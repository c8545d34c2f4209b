"""Configuration module for trialforms."""

from trialforms.config.base import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_INTERACTION_TIMEOUT_MS,
    FormConfig,
    Settings,
)
from trialforms.config.loader import get_settings

__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_INTERACTION_TIMEOUT_MS",
    "FormConfig",
    "Settings",
    "get_settings",
]
