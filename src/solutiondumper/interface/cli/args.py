from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema, including help messages,
argument types, and defaults. Provides logic to translate raw argparse
namespaces into scan option overrides and selection parameters.
"""

import argparse
from typing import Any, Dict, List, Optional

from solutiondumper.domain import constants as const

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the SolutionDumper CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="solutiondumper",
        description="Concatenate the files of a .NET solution into a single text dump.",
    )

    p.add_argument(
        "solution",
        nargs="?",
        default=None,
        help="Path to the .sln or .slnx file.",
    )

    # --- Scan Rules ---
    p.add_argument(
        "--ext",
        dest="extensions",
        default=None,
        help="Comma-separated allowed extensions or suffixes (e.g. '.cs,.razor.css').",
    )
    p.add_argument(
        "--exclude-dirs",
        dest="excluded_dirs",
        default=None,
        help="Comma-separated directory names to skip (matched as path segments).",
    )
    p.add_argument(
        "--max-size",
        dest="max_file_size_bytes",
        type=int,
        default=None,
        help="Largest selectable file size in bytes.",
    )

    # --- Selection ---
    p.add_argument(
        "--project",
        dest="projects",
        action="append",
        default=None,
        help="Project to include (repeatable or comma-separated). Defaults to all projects.",
    )
    p.add_argument(
        "--filter",
        dest="filter_term",
        default=None,
        help="Only select files whose name or path contains TERM.",
    )
    p.add_argument(
        "--no-solution-file",
        action="store_true",
        help="Leave the solution file itself out of the dump.",
    )

    # --- Output ---
    p.add_argument(
        "-o", "--output",
        dest="output",
        default=None,
        help=f"Destination file (e.g. {const.DEFAULT_DUMP_FILE_NAME}). Defaults to stdout.",
    )
    p.add_argument(
        "--list",
        dest="list_only",
        action="store_true",
        help="Print the ordered export list with sizes instead of the dump.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print a machine-readable summary.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration and use built-in defaults.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective scan options and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into scan option overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Only the options given on the command line.
    """
    overrides: Dict[str, Any] = {}

    if args.extensions:
        overrides["extensions"] = _split_csv(args.extensions)
    if args.excluded_dirs:
        overrides["excluded_dirs"] = _split_csv(args.excluded_dirs)
    if args.max_file_size_bytes is not None:
        overrides["max_file_size_bytes"] = args.max_file_size_bytes

    return overrides


def selected_projects(args: argparse.Namespace) -> Optional[List[str]]:
    """Flatten repeated/CSV '--project' values. None means every project."""
    if not args.projects:
        return None
    names: List[str] = []
    for value in args.projects:
        names.extend(_split_csv(value) or [])
    return names or None

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]
