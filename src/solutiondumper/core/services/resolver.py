from __future__ import annotations

"""
Solution Manifest Resolver.

Turns a solution descriptor (classic '.sln' text or XML '.slnx') into the
ordered list of projects it declares. Only project names and manifest paths
are extracted; build semantics are ignored. Entries whose manifest does not
exist on disk are dropped.
"""

import logging
import os
import re
import xml.etree.ElementTree as ET
from typing import Iterable, List, Tuple

from solutiondumper.domain import constants as const
from solutiondumper.domain.errors import ResolutionError
from solutiondumper.domain.models import ProjectDescriptor

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# REGEX CONSTANTS
# -----------------------------------------------------------------------------

_MANIFEST_ALTERNATION = "|".join(re.escape(ext) for ext in const.PROJECT_MANIFEST_EXTENSIONS)

# Project("{TYPE-GUID}") = "Name", "relative\path\Name.csproj", "{PROJECT-GUID}"
_PROJECT_LINE = re.compile(
    r'Project\([^)]+\)\s*=\s*"([^"]+)"\s*,\s*"([^"]+(?:' + _MANIFEST_ALTERNATION + r'))"',
    re.IGNORECASE,
)

# ==============================================================================
# PUBLIC API
# ==============================================================================

def resolve_solution(solution_path: str) -> List[ProjectDescriptor]:
    """
    Resolve the projects declared by a solution file.

    Args:
        solution_path: Path to a '.sln' or '.slnx' file.

    Returns:
        List[ProjectDescriptor]: Projects in declaration order, restricted to
                                 manifests that exist on disk.

    Raises:
        ResolutionError: If the file is missing, unreadable or malformed.
    """
    full_path = os.path.abspath(solution_path)
    if not os.path.isfile(full_path):
        raise ResolutionError(f"Solution file not found: {solution_path}")

    try:
        with open(full_path, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ResolutionError(f"Cannot read solution '{solution_path}': {e}") from e

    if full_path.lower().endswith(".slnx"):
        entries = _parse_slnx(text, solution_path)
    else:
        entries = _parse_sln(text)

    root_dir = os.path.dirname(full_path)
    projects = list(_existing_projects(root_dir, entries))

    logger.info(f"Resolved {len(projects)} project(s) from {os.path.basename(full_path)}")
    return projects


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _parse_sln(text: str) -> List[Tuple[str, str]]:
    """Extract (name, relative manifest path) pairs from classic solution text."""
    entries: List[Tuple[str, str]] = []
    for line in text.splitlines():
        m = _PROJECT_LINE.search(line)
        if m:
            entries.append((m.group(1), m.group(2)))
    return entries


def _parse_slnx(text: str, solution_path: str) -> List[Tuple[str, str]]:
    """Extract (name, relative manifest path) pairs from an XML solution."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ResolutionError(f"Malformed solution '{solution_path}': {e}") from e

    entries: List[Tuple[str, str]] = []
    for element in root.iter("Project"):
        rel = element.get("Path", "")
        if not rel.lower().endswith(const.PROJECT_MANIFEST_EXTENSIONS):
            continue
        name = element.get("Name") or _manifest_stem(rel)
        entries.append((name, rel))
    return entries


def _manifest_stem(rel_path: str) -> str:
    base = rel_path.replace("\\", "/").rsplit("/", 1)[-1]
    return os.path.splitext(base)[0]


def _existing_projects(
        root_dir: str,
        entries: Iterable[Tuple[str, str]]
) -> Iterable[ProjectDescriptor]:
    for name, rel in entries:
        rel_native = rel.replace("\\", os.sep).replace("/", os.sep)
        full = os.path.normpath(os.path.join(root_dir, rel_native))

        if not os.path.isfile(full):
            logger.warning(f"Skipping project '{name}': manifest not found at {full}")
            continue

        yield ProjectDescriptor(name=name, manifest_path=full)
