# src/wcag_auditor/managers/config_manager.py
import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from wcag_auditor.exceptions import ConfigError
from wcag_auditor.settings import RuleConfiguration

logger = logging.getLogger(__name__)

SETTINGS_PATH = Path(__file__).resolve().parent.parent / "settings.json"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Returns a new dict with `override` merged recursively into `base`."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigManager:
    """
    Loads application settings and builds RuleConfiguration objects.

    Layering (last wins): built-in defaults, the selected profile from
    settings.json, optional user threshold file, explicit overrides.
    Every call to `build_configuration` returns a fresh, validated object.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = settings_path or SETTINGS_PATH
        self._settings: Dict[str, Any] = {}
        self.reset()

    def reset(self) -> None:
        """(Re)loads settings.json. A missing file falls back to an empty config."""
        try:
            if not self.settings_path.exists():
                logger.warning("settings.json not found at %s. Using empty config.", self.settings_path)
                self._settings = {}
                return
            with open(self.settings_path, "r", encoding="utf-8") as f:
                self._settings = json.load(f)
            logger.debug("Settings loaded from %s", self.settings_path)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load {self.settings_path}: {e}") from e

    def get_all(self) -> Dict[str, Any]:
        return self._settings

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value from the settings.
        e.g., 'debug.level'.
        """
        value = self._settings
        for key in key_path.split('.'):
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
        return value if value is not None else default

    @staticmethod
    def load_threshold_file(path: Union[str, Path]) -> Dict[str, Any]:
        """Reads a user-supplied JSON threshold table."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read configuration file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file {path} must contain a JSON object")
        return data

    def build_configuration(
            self,
            config_path: Optional[Union[str, Path]] = None,
            profile: Optional[str] = None,
            overrides: Optional[Dict[str, Any]] = None
    ) -> RuleConfiguration:
        """Merges all configuration layers and validates the result."""
        raw: Dict[str, Any] = RuleConfiguration().model_dump()

        profile = profile or self.get_nested("engine.default_profile")
        if profile:
            profiles = self.get_nested("profiles", {})
            if profile not in profiles:
                raise ConfigError(f"Unknown configuration profile '{profile}'")
            raw = deep_merge(raw, profiles[profile])
            logger.debug("Applied configuration profile '%s'", profile)

        if config_path:
            raw = deep_merge(raw, self.load_threshold_file(config_path))

        if overrides:
            raw = deep_merge(raw, overrides)

        return build_rule_configuration(raw)


def build_rule_configuration(raw: Dict[str, Any]) -> RuleConfiguration:
    """Validates a raw threshold table, converting pydantic errors into ConfigError."""
    try:
        return RuleConfiguration.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid rule configuration: {e}") from e
