"""Configuration management for the GDP decomposer.

Settings live in YAML. ``defaults.yaml`` next to this module is always
loaded first; a user file named by the ``GDP_DECOMPOSER_CONFIG`` environment
variable (or passed explicitly) is deep-merged on top of it.

Keys are read with dot notation::

    >>> cfg = get_config()
    >>> cfg.get('decomposition.frequency')
    4
"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
ENV_VAR = "GDP_DECOMPOSER_CONFIG"

VALID_MERGE_POLICIES = ("inner", "left", "outer")


class ConfigurationError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot load configuration file {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping at top level")
    return content


class ConfigurationManager:
    """Layered YAML configuration with dot-notation access."""

    def __init__(self, override_path: Optional[Union[str, Path]] = None):
        """
        Parameters
        ----------
        override_path : str or Path, optional
            YAML file merged over the defaults. Falls back to the path in the
            ``GDP_DECOMPOSER_CONFIG`` environment variable when omitted.
        """
        self.loaded_files: List[str] = []
        self._config = _read_yaml(DEFAULTS_PATH)
        self.loaded_files.append(str(DEFAULTS_PATH))

        if override_path is None and os.environ.get(ENV_VAR):
            override_path = os.environ[ENV_VAR]

        if override_path is not None:
            path = Path(override_path)
            if not path.is_file():
                raise ConfigurationError(f"Configuration override not found: {path}")
            self._config = _deep_merge(self._config, _read_yaml(path))
            self.loaded_files.append(str(path))
            logger.info("Loaded configuration override from %s", path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Return the value at a dot-separated ``key_path`` or ``default``."""
        current: Any = self._config
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return copy.deepcopy(current)

    def get_section(self, name: str) -> Dict[str, Any]:
        section = self.get(name, {})
        return section if isinstance(section, dict) else {}

    def validate_configuration(self) -> Dict[str, List[str]]:
        """
        Check value ranges of the known sections.

        Returns
        -------
        Dict[str, List[str]]
            Mapping of section name to a list of problems. Empty when valid.
        """
        errors: Dict[str, List[str]] = {}

        def add(section: str, message: str) -> None:
            errors.setdefault(section, []).append(message)

        frequency = self.get("decomposition.frequency")
        if not isinstance(frequency, int) or frequency < 2:
            add("decomposition", f"frequency must be an integer >= 2, got {frequency!r}")

        window = self.get("decomposition.seasonal_window")
        if window != "periodic" and not (isinstance(window, int) and window >= 3 and window % 2 == 1):
            add("decomposition", f"seasonal_window must be 'periodic' or an odd integer >= 3, got {window!r}")

        inner = self.get("decomposition.inner_iter")
        max_inner = self.get("decomposition.max_inner_iter")
        if not isinstance(inner, int) or inner < 1:
            add("decomposition", f"inner_iter must be a positive integer, got {inner!r}")
        elif not isinstance(max_inner, int) or max_inner < inner:
            add("decomposition", "max_inner_iter must be an integer >= inner_iter")

        for key in ("first_merge_how", "merge_how"):
            how = self.get(f"alignment.{key}")
            if how not in VALID_MERGE_POLICIES:
                add("alignment", f"{key} must be one of {VALID_MERGE_POLICIES}, got {how!r}")

        max_cond = self.get("regression.max_condition_number")
        if not isinstance(max_cond, (int, float)) or max_cond <= 1:
            add("regression", f"max_condition_number must be a number > 1, got {max_cond!r}")

        alpha = self.get("diagnostics.significance_level")
        if not isinstance(alpha, (int, float)) or not 0 < alpha < 1:
            add("diagnostics", f"significance_level must lie in (0, 1), got {alpha!r}")

        return errors

    def get_configuration_summary(self) -> Dict[str, Any]:
        return {
            "loaded_configs": list(self.loaded_files),
            "sections": sorted(self._config.keys()),
        }


_instance: Optional[ConfigurationManager] = None


def get_config(override_path: Optional[Union[str, Path]] = None, reload: bool = False) -> ConfigurationManager:
    """Return the process-wide configuration manager, creating it on first use."""
    global _instance
    if _instance is None or reload or override_path is not None:
        _instance = ConfigurationManager(override_path)
    return _instance
