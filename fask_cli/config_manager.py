"""Read and write the ``[scan]`` section of fask's TOML config file."""

from __future__ import annotations

import logging
from typing import Any, Dict

import toml

from . import config

logger = logging.getLogger(__name__)

SCAN_KEYS = ("pattern", "context", "workers", "ignore_case", "exclude")


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections).

    Returns:
        Parsed config, or an empty dict if the file is missing or invalid.
    """
    if not config.CONFIG_FILE.exists():
        return {}
    try:
        with open(config.CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return {}


def _save_full_config(data: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    config.ensure_base_dir()
    try:
        with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(data, f)
        return True
    except OSError as exc:
        logger.warning("Failed to write config %s: %s", config.CONFIG_FILE, exc)
        return False


def load_scan_config() -> Dict[str, Any]:
    """Load scan defaults from the ``[scan]`` section.

    Unknown keys are dropped.
    """
    section = load_full_config().get("scan", {})
    if not isinstance(section, dict):
        return {}
    return {k: v for k, v in section.items() if k in SCAN_KEYS}


def save_scan_config(**values: Any) -> bool:
    """Merge ``values`` into the ``[scan]`` section.

    Keys whose value is ``None`` are left unchanged. Other sections of the
    file are preserved.

    Returns:
        True if saved successfully.
    """
    unknown = set(values) - set(SCAN_KEYS)
    if unknown:
        raise ValueError(f"Unknown scan setting(s): {', '.join(sorted(unknown))}")

    data = load_full_config()
    section = data.setdefault("scan", {})
    section.update({k: v for k, v in values.items() if v is not None})
    return _save_full_config(data)


def clear_scan_config() -> bool:
    """Remove the ``[scan]`` section, restoring built-in defaults."""
    data = load_full_config()
    data.pop("scan", None)
    return _save_full_config(data)


def resolve_scan_defaults() -> Dict[str, Any]:
    """Built-in scan defaults overlaid with the saved ``[scan]`` values."""
    resolved = dict(config.DEFAULT_SCAN)
    resolved.update(load_scan_config())
    return resolved
