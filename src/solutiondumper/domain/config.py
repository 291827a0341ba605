from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user preferences (scan rules, last opened
folder, theme) as JSON, and validates untrusted values coming from the CLI
or hand-edited files. Tree and selection state are never persisted.
"""

import copy
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from solutiondumper.domain import constants as const
from solutiondumper.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")


def get_default_scan_options() -> Dict[str, Any]:
    """
    Generate the default enumeration rules.

    Returns:
        Dict[str, Any]: Extensions, excluded directories and size limit.
    """
    return {
        "extensions": list(const.DEFAULT_EXTENSIONS),
        "excluded_dirs": list(const.DEFAULT_EXCLUDED_DIRS),
        "max_file_size_bytes": const.DEFAULT_MAX_FILE_SIZE_BYTES,
    }


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default application state structure.

    Returns:
        Dict[str, Any]: The full JSON structure for config.json.
    """
    return {
        "version": const.CURRENT_CONFIG_VERSION,
        "app_settings": {
            "theme": "System",
            "last_solution_dir": "",
        },
        "scan_options": get_default_scan_options(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk, merged over the defaults.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    default_state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return default_state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return default_state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return default_state

    state = copy.deepcopy(default_state)
    for section in ("app_settings", "scan_options"):
        if isinstance(data.get(section), dict):
            state[section].update(data[section])

    state["version"] = const.CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """
    Persist application state to disk.

    Args:
        state: The state dictionary to save.
    """
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        state["version"] = const.CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


def load_scan_options(app_state: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Retrieve the persisted scan options, validated.

    Args:
        app_state: Already loaded state; read from disk when omitted.

    Returns:
        Dict[str, Any]: Clean scan options (constraint warnings are logged).
    """
    state = app_state if app_state is not None else load_app_state()
    clean, warnings = validate_scan_options(state.get("scan_options", {}))
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")
    return clean


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------
def validate_scan_options(
        options: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a scan options dictionary.

    Converts untrusted inputs into strictly typed values and fills missing
    keys with the defaults.

    Args:
        options: Raw options (usually a dictionary).
        strict: If True, raise on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized options and warnings.
    """
    warnings: List[str] = []
    defaults = get_default_scan_options()

    if not isinstance(options, dict):
        msg = f"Invalid scan options type: expected dict, received {type(options).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in options.items() if v is not None})

    merged["extensions"] = _normalize_extensions(
        _as_list_str(merged["extensions"], defaults["extensions"], "extensions", warnings, strict)
    )
    merged["excluded_dirs"] = _as_list_str(
        merged["excluded_dirs"], defaults["excluded_dirs"], "excluded_dirs", warnings, strict
    )
    merged["max_file_size_bytes"] = _as_positive_int(
        merged["max_file_size_bytes"], defaults["max_file_size_bytes"],
        "max_file_size_bytes", warnings, strict
    )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_list_str(
        value: Any,
        fallback: List[str],
        field: str,
        warnings: List[str],
        strict: bool
) -> List[str]:
    """Accept a list of strings or a CSV string."""
    if isinstance(value, str):
        value = value.split(",")

    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        cleaned = [v.strip() for v in value if v.strip()]
        if cleaned:
            return cleaned

    msg = f"Invalid field '{field}': expected a non-empty list of strings."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_positive_int(
        value: Any,
        fallback: int,
        field: str,
        warnings: List[str],
        strict: bool
) -> int:
    if isinstance(value, bool):
        value = None
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0

    if number > 0:
        return number

    msg = f"Invalid field '{field}': expected a positive integer, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _normalize_extensions(extensions: List[str]) -> List[str]:
    """Lower-case entries and prepend a dot to bare extensions ('cs' -> '.cs')."""
    out: List[str] = []
    for ext in extensions:
        e = ext.lower()
        if not e.startswith(".") and "." not in e:
            e = "." + e
        if e not in out:
            out.append(e)
    return out
