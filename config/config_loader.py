"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml once and caches it.

Only I/O, logging and display settings live in config. Detection thresholds
are fixed constants in the detector module so results stay reproducible.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_CACHE: Dict[str, Any] = {}


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "config.yaml")

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r") as f:
        _CONFIG_CACHE = yaml.safe_load(f)

    return _CONFIG_CACHE


def get_input_config() -> Dict[str, Any]:
    """Returns the input block (column contract, default path)."""
    return load_config()["input"]


def get_output_config() -> Dict[str, Any]:
    """Returns the output block."""
    return load_config()["output"]


def get_logging_config() -> Dict[str, Any]:
    return load_config()["logging"]


def get_display_config() -> Dict[str, Any]:
    """
    Returns the display block (frequency labels, billing periods).

    Raises:
        KeyError: If either label table is missing.
    """
    display = load_config()["display"]
    for key in ("frequency_labels", "billing_periods"):
        if key not in display:
            raise KeyError(
                f"Display config is missing '{key}'. "
                f"Available: {list(display.keys())}"
            )
    return display


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE
    _CONFIG_CACHE = {}
