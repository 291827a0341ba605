from __future__ import annotations

"""
File Discovery Service.

Walks a project directory and lazily yields the candidate files that pass
the extension allow-list and directory exclusion rules, each tagged with
its byte size. Files above the size limit are still yielded so that the
tree can show them as non-selectable entries.
"""

import logging
import os
from typing import Iterator

from solutiondumper.domain.errors import EnumerationError
from solutiondumper.domain.models import CandidateFile, ScanRules

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API (DISCOVERY SERVICES)
# ==============================================================================

def enumerate_project_files(project_dir: str, rules: ScanRules) -> Iterator[CandidateFile]:
    """
    Traverse the project directory and yield allowed files with their sizes.

    Excluded directories are matched against whole path segments and pruned
    in place so that their subtrees are never visited. A file whose size
    cannot be read is skipped without aborting the walk.

    Args:
        project_dir: Absolute path to the project root.
        rules: Extension, exclusion and size rules.

    Yields:
        CandidateFile: Absolute path and size of each allowed file.
    """
    root_abs = os.path.abspath(project_dir)

    for root, dirs, files in os.walk(root_abs, onerror=_log_walk_error):
        # In-place directory pruning to optimize traversal
        dirs[:] = sorted(d for d in dirs if not rules.is_excluded_dir(d))
        files.sort()

        for file_name in files:
            if not rules.allows(file_name):
                continue

            file_path = os.path.join(root, file_name)
            try:
                size = _file_size(file_path)
            except EnumerationError as e:
                logger.warning(f"Skipping unreadable file: {e}")
                continue

            yield CandidateFile(path=file_path, size=size)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _file_size(file_path: str) -> int:
    try:
        return os.stat(file_path).st_size
    except OSError as e:
        raise EnumerationError(file_path, e.strerror or str(e)) from e


def _log_walk_error(error: OSError) -> None:
    logger.warning(f"Cannot list directory '{error.filename}': {error.strerror}")
