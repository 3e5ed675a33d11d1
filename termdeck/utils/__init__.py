"""Utilities for termdeck."""

from .config_manager import ConfigManager

__all__ = [
    'ConfigManager'
]
