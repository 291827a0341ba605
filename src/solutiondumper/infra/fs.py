from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation and user data directory
resolution. Acts as an abstraction over the 'os' module so that path
comparison and relative-path rendering behave the same on Windows and
Unix-like systems.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "SolutionDumper"
UNIX_APP_DIR_NAME = ".solutiondumper"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/SolutionDumper
    - Linux/Mac: ~/.solutiondumper

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is blank.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def path_key(path: str) -> str:
    """Comparison key for filesystem paths (case-insensitive where the OS is)."""
    return os.path.normcase(os.path.normpath(path))


def safe_relpath(root: str, path: str) -> str:
    """
    Render 'path' relative to 'root' with forward slashes.

    Falls back to the forward-slash form of the original path when no
    relative form exists (e.g. different drives on Windows).
    """
    try:
        rel = os.path.relpath(path, root)
    except ValueError:
        rel = path
    return rel.replace("\\", "/")
