"""Configuration package for the GDP decomposer.

Provides YAML-backed settings with dot-notation access:
- ConfigurationManager: layered defaults + user override
- get_config: process-wide accessor
- ConfigurationError: unreadable or malformed configuration
"""

from .config_manager import (
    ConfigurationError,
    ConfigurationManager,
    get_config,
)

__all__ = [
    'ConfigurationError',
    'ConfigurationManager',
    'get_config',
]
