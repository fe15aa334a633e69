"""
Centralized configuration manager.
Loads a YAML config over built-in defaults and provides dot-path access.

Every component receives a plain dict section (``config.detection``,
``config.session``, ...) and reads its keys with defaults, so a partial
YAML file is always enough.
"""

import os
import copy
import yaml
import logging

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
_CONFIG_DIR = os.path.join(_BASE_DIR, "config")

DEFAULTS = {
    "camera": {
        "width": 640,
        "height": 480,
        "fps": 30,
        "buffer_size": 1,
        "backend": "auto",
    },
    "processing": {
        "working_width": 320,
        "working_height": 240,
    },
    "calibration": {
        "background_frames": 1,
        "max_attempts": 3,
    },
    "detection": {
        "motion": {"weight": 0.4, "blur_kernel": 15, "diff_threshold": 25,
                   "kernel_size": 5, "min_area": 500},
        "color": {"weight": 0.3, "hsv_lower": [0, 48, 80], "hsv_upper": [20, 255, 255],
                  "ycrcb_lower": [0, 133, 77], "ycrcb_upper": [255, 173, 127],
                  "kernel_size": 5, "min_area": 1000},
        "brightness": {"weight": 0.3, "threshold": 60, "kernel_size": 5, "min_area": 1000},
        "background_refresh": {"strategy": "random", "probability": 0.01,
                               "interval_frames": 100},
    },
    "fusion": {
        "confidence_gate": 0.5,
    },
    "recognition": {
        "required_consecutive": 1,
    },
    "scheduler": {
        "interval_ms": 150,
        "max_workers": 4,
    },
    "session": {
        "settle_delay_ms": 1000,
        "stop_timeout_ms": 500,
        "read_failure_limit": 3,
    },
    "bridge": {
        "guess_cooldown_ms": 1500,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "max_size_mb": 10,
        "backup_count": 3,
        "levels": {},
    },
}

# Schema: sections and the expected types of their critical fields
_CONFIG_SCHEMA = {
    "camera": {
        "width": int,
        "height": int,
        "fps": int,
    },
    "processing": {
        "working_width": int,
        "working_height": int,
    },
    "fusion": {
        "confidence_gate": float,
    },
    "scheduler": {
        "interval_ms": int,
        "max_workers": int,
    },
    "session": {
        "settle_delay_ms": int,
        "stop_timeout_ms": int,
        "read_failure_limit": int,
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
    _data = copy.deepcopy(DEFAULTS)

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def load(self, config_path=None):
        """Load configuration from a YAML file merged over the defaults."""
        config_path = config_path or os.path.join(_CONFIG_DIR, "config.yaml")

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            logger.info("Loaded config from %s", config_path)
        except FileNotFoundError:
            logger.warning("Config file not found: %s, using defaults", config_path)
            loaded = {}

        if not isinstance(loaded, dict):
            logger.warning("Config root should be a mapping, got %s; using defaults",
                           type(loaded).__name__)
            loaded = {}

        Config._data = _deep_merge(copy.deepcopy(DEFAULTS), loaded)
        self._validate()
        return self

    def load_dict(self, overrides: dict):
        """Apply in-memory overrides (CLI flags, tests) on top of the current data."""
        Config._data = _deep_merge(Config._data, overrides or {})
        self._validate()
        return self

    def _validate(self):
        """Validate critical config fields against schema."""
        warnings = []
        for section_name, fields in _CONFIG_SCHEMA.items():
            section = self._data.get(section_name)
            if section is None:
                warnings.append(f"Missing config section: '{section_name}'")
                continue
            if not isinstance(section, dict):
                warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
                continue
            for field_name, expected_type in fields.items():
                if field_name in section:
                    value = section[field_name]
                    # Allow int where float is expected
                    if expected_type is float and isinstance(value, (int, float)):
                        continue
                    if not isinstance(value, expected_type):
                        warnings.append(
                            f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                            f"got {type(value).__name__} ({value!r})"
                        )

        if warnings:
            for w in warnings:
                logger.warning("Config validation: %s", w)
        else:
            logger.debug("Config validation passed")
        return warnings

    def get(self, key_path: str, default=None):
        """Get nested config value using dot notation: 'session.settle_delay_ms'."""
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
        return self._data.get(section, {})

    @property
    def camera(self) -> dict:
        return self._data.get("camera", {})

    @property
    def processing(self) -> dict:
        return self._data.get("processing", {})

    @property
    def calibration(self) -> dict:
        return self._data.get("calibration", {})

    @property
    def detection(self) -> dict:
        return self._data.get("detection", {})

    @property
    def fusion(self) -> dict:
        return self._data.get("fusion", {})

    @property
    def recognition(self) -> dict:
        return self._data.get("recognition", {})

    @property
    def scheduler(self) -> dict:
        return self._data.get("scheduler", {})

    @property
    def session(self) -> dict:
        return self._data.get("session", {})

    @property
    def bridge(self) -> dict:
        return self._data.get("bridge", {})

    @property
    def logging(self) -> dict:
        return self._data.get("logging", {})

    @property
    def data(self) -> dict:
        return self._data

    @property
    def base_dir(self) -> str:
        return _BASE_DIR

    @classmethod
    def reset(cls):
        """Reset singleton instance (for testing)."""
        cls._instance = None
        cls._data = copy.deepcopy(DEFAULTS)
