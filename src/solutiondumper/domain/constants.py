from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes application-wide constants: versioning, the default scan rules
inherited from the .NET solution layout, the manifest and bucket rules used
to order the export, debounce intervals and the textual markers of the dump
format.
"""

from typing import Dict, List, Tuple

CURRENT_CONFIG_VERSION = "1.0.0"
APP_TITLE = "SolutionDumper"
DEFAULT_DUMP_FILE_NAME = "code_dump.txt"

# -----------------------------------------------------------------------------
# SCAN DEFAULTS
# -----------------------------------------------------------------------------

DEFAULT_EXTENSIONS: List[str] = [
    # C# / MSBuild
    ".cs", ".csproj", ".fsproj", ".vbproj", ".props", ".targets",
    ".sln", ".slnx", ".resx", ".xaml",

    # Blazor / Razor
    ".razor", ".cshtml", ".razor.css", ".razor.js",

    # Web assets (wwwroot)
    ".js", ".mjs", ".ts", ".css", ".scss", ".json", ".html",

    # Configs
    ".xml", ".config", ".yml", ".yaml",

    # Static assets
    ".png", ".svg", ".ico", ".jpg", ".jpeg", ".webp", ".woff", ".woff2",
]

DEFAULT_EXCLUDED_DIRS: List[str] = ["bin", "obj", ".git", ".vs", "packages", "node_modules"]

DEFAULT_MAX_FILE_SIZE_BYTES = 512 * 1024

# -----------------------------------------------------------------------------
# SOLUTION AND PROJECT MANIFESTS
# -----------------------------------------------------------------------------

SOLUTION_EXTENSIONS: Tuple[str, ...] = (".sln", ".slnx")
PROJECT_MANIFEST_EXTENSIONS: Tuple[str, ...] = (".csproj", ".fsproj", ".vbproj")

# -----------------------------------------------------------------------------
# EXPORT ORDERING
# -----------------------------------------------------------------------------

BUCKET_MANIFEST = "manifest"
BUCKET_PROPERTIES = "properties"
BUCKET_WEB = "web"
BUCKET_REST = "rest"

BUCKET_ORDER: Tuple[str, ...] = (BUCKET_MANIFEST, BUCKET_PROPERTIES, BUCKET_WEB, BUCKET_REST)

PROPERTIES_PREFIX = "Properties/"
WEB_ROOT_PREFIX = "wwwroot/"

# -----------------------------------------------------------------------------
# TIMINGS (milliseconds)
# -----------------------------------------------------------------------------

FILTER_DEBOUNCE_MS = 220
AGGREGATION_DEBOUNCE_MS = 60

STATUS_EXPIRY_MS: Dict[str, int] = {
    "info": 1500,
    "success": 1500,
    "warning": 2000,
    "error": 3000,
}

# -----------------------------------------------------------------------------
# DUMP FORMAT
# -----------------------------------------------------------------------------

DUMP_HEADER_GENERATED = "### CODE DUMP GENERATED: {timestamp}"
DUMP_HEADER_SOLUTION = "### SLN: {solution}"
DUMP_HEADER_COUNT = "### FILE COUNT: {count}"
DUMP_FILE_MARKER = "===== FILE: {path} ====="
DUMP_READ_FAILURE = "[[FAILED TO READ FILE]] {error}"

READ_BUFFER_CHARS = 32 * 1024
