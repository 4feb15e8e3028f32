"""
Centralized configuration manager.
Loads YAML configs and provides typed access with defaults.

    - config.yaml     thresholds, timeouts, device and UI settings
    - catalogue.yaml  selectable entries and their synonyms
"""

import os
import yaml
import logging

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

# Schema: sections and the expected types of their fields
_CONFIG_SCHEMA = {
    "camera": {
        "device_id": int,
        "width": int,
        "height": int,
    },
    "landmarks": {
        "display_width": int,
        "display_height": int,
        "mirror": bool,
    },
    "gesture": {
        "open_threshold": float,
        "close_threshold": float,
        "rearm_cooldown_ms": int,
        "max_open_ms": int,
    },
    "capture": {
        "cooldown_ms": int,
        "max_capture_ms": int,
    },
    "resolver": {
        "random_on_timeout": bool,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance = None
    _data = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None, catalogue_path=None):
        """Load configuration from YAML files."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")
        catalogue_path = catalogue_path or os.path.join(_CONFIG_DIR, "catalogue.yaml")

        try:
            with open(config_path, "r") as f:
                self._data = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            self._data = {}

        try:
            with open(catalogue_path, "r") as f:
                self._data["catalogue"] = yaml.safe_load(f) or {}
            logger.info("Loaded catalogue from %s", catalogue_path)
        except FileNotFoundError:
            logger.warning("Catalogue file not found: %s", catalogue_path)

        self._validate()
        return self

    def load_dict(self, data: dict):
        """Use an in-memory config (tests, embedding)."""
        self._data = dict(data or {})
        self._validate()
        return self

    def override(self, data: dict):
        """Deep-merge overrides (e.g. from the command line)."""
        self._data = _deep_merge(self._data, data)
        return self

    def _validate(self):
        """Validate config fields against schema. Problems are logged, not raised."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name not in section:
                    continue
                value = section[field_name]
                # bool is an int subclass; never accept it as a number
                if expected_type in (int, float) and isinstance(value, bool):
                    pass
                elif expected_type is float and isinstance(value, (int, float)):
                    continue
                elif isinstance(value, expected_type):
                    continue
                warnings.append(
                    f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )

        gesture = self._data.get("gesture") or {}
        if isinstance(gesture, dict):
            open_t = gesture.get("open_threshold")
            close_t = gesture.get("close_threshold")
            if isinstance(open_t, (int, float)) and isinstance(close_t, (int, float)) and close_t >= open_t:
                warnings.append(
                    f"gesture.close_threshold ({close_t}) should be below open_threshold ({open_t})"
                )

        for w in warnings:
            logger.warning("Config validation: %s", w)
        if not warnings:
            logger.debug("Config validation passed")
        self._warnings = warnings
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'gesture.max_open_ms'."""
        keys = key_path.split(".")
        value = self._data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def get_section(self, section: str) -> dict:
        """Get an entire config section."""
        return self._data.get(section) or {}

    @property
    def camera(self) -> dict:
        return self.get_section("camera")

    @property
    def face_mesh(self) -> dict:
        return self.get_section("face_mesh")

    @property
    def landmarks(self) -> dict:
        return self.get_section("landmarks")

    @property
    def gesture(self) -> dict:
        return self.get_section("gesture")

    @property
    def capture(self) -> dict:
        return self.get_section("capture")

    @property
    def navigation(self) -> dict:
        return self.get_section("navigation")

    @property
    def resolver(self) -> dict:
        return self.get_section("resolver")

    @property
    def feedback(self) -> dict:
        return self.get_section("feedback")

    @property
    def speech(self) -> dict:
        return self.get_section("speech")

    @property
    def visualization(self) -> dict:
        return self.get_section("visualization")

    @property
    def catalogue(self):
        return self._data.get("catalogue")

    @property
    def warnings(self) -> list:
        return list(getattr(self, "_warnings", []))

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = {}
