"""
YAML configuration loading.

The file is merged over DEFAULTS, so any subset of keys may be given.
Type mismatches against the schema are logged, never raised.
"""

import copy
import logging
import os
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

_BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
DEFAULT_CONFIG_PATH = os.path.join(_BASE_DIR, "config", "config.yaml")

DEFAULTS = {
    "camera": {
        "device_id": 0,
        "width": 1280,
        "height": 720,
        "fps": 30,
    },
    "detection": {
        "model_path": "",
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "min_presence_confidence": 0.5,
    },
    "recognition": {
        "open_threshold": 1.8,
        "direction_epsilon": 1e-6,
    },
    "stabilizer": {
        "smoothing": {"mode": "fixed", "alpha": 0.1},
        "deactivation_cutoff": 0.01,
        "rest_on_release": False,
    },
    "overlay": {
        "fov_deg": 75.0,
        "camera_distance": 5.0,
        "show_hint": True,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}

SMOOTHING_MODES = ("fixed", "exponential")

# section -> {field: expected type}
_CONFIG_SCHEMA = {
    "camera": {"device_id": int, "width": int, "height": int, "fps": int},
    "detection": {
        "model_path": str,
        "min_detection_confidence": float,
        "min_tracking_confidence": float,
        "min_presence_confidence": float,
    },
    "recognition": {"open_threshold": float, "direction_epsilon": float},
    "stabilizer": {"smoothing": dict, "deactivation_cutoff": float, "rest_on_release": bool},
    "overlay": {"fov_deg": float, "camera_distance": float, "show_hint": bool},
    "logging": {"level": str},
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: dict) -> list:
    """Return human-readable schema warnings (also logged)."""
    warnings = []
    for section_name, fields in _CONFIG_SCHEMA.items():
        section = data.get(section_name)
        if not isinstance(section, dict):
            warnings.append(f"Section '{section_name}' should be a dict, got {type(section).__name__}")
            continue
        for field_name, expected_type in fields.items():
            if field_name not in section:
                continue
            value = section[field_name]
            # Allow int where float is expected
            if expected_type is float and isinstance(value, (int, float)) and not isinstance(value, bool):
                continue
            if not isinstance(value, expected_type):
                warnings.append(
                    f"{section_name}.{field_name}: expected {expected_type.__name__}, "
                    f"got {type(value).__name__} ({value!r})"
                )

    stabilizer = data.get("stabilizer")
    smoothing = stabilizer.get("smoothing") if isinstance(stabilizer, dict) else None
    if isinstance(smoothing, dict) and "mode" in smoothing:
        mode = smoothing["mode"]
        if not isinstance(mode, str) or mode.lower() not in SMOOTHING_MODES:
            warnings.append(
                f"stabilizer.smoothing.mode: expected one of {', '.join(SMOOTHING_MODES)}, got {mode!r}"
            )

    for w in warnings:
        logger.warning("Config validation: %s", w)
    return warnings


def load_config(config_path: Optional[str] = None) -> dict:
    """Load YAML config merged over DEFAULTS. A missing file yields the defaults."""
    config_path = config_path or DEFAULT_CONFIG_PATH

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded config from %s", config_path)
    except FileNotFoundError:
        logger.warning("Config file not found: %s, using defaults", config_path)
        data = {}

    if not isinstance(data, dict):
        logger.warning("Config root should be a mapping, got %s; using defaults", type(data).__name__)
        data = {}

    merged = _deep_merge(DEFAULTS, data)
    validate_config(merged)
    return merged
