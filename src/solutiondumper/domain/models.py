from __future__ import annotations

"""
Core Domain Models.

Immutable records exchanged between the resolver, the enumerator, the
selection tree and the export sink, plus the small enumerations used for
check state and status reporting.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Tuple

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class CheckState(Enum):
    """Tri-state checkbox value. INDETERMINATE is only ever derived."""
    UNCHECKED = "unchecked"
    CHECKED = "checked"
    INDETERMINATE = "indeterminate"


class StatusKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


# -----------------------------------------------------------------------------
# DISCOVERY RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectDescriptor:
    """
    A project declared by a solution.

    Attributes:
        name: Display name declared in the solution.
        manifest_path: Absolute path to the project manifest (e.g. .csproj).
    """
    name: str
    manifest_path: str

    @property
    def project_dir(self) -> str:
        return os.path.dirname(self.manifest_path)


@dataclass(frozen=True)
class CandidateFile:
    """
    A file surfaced by the enumerator.

    Attributes:
        path: Absolute filesystem path.
        size: Size in bytes at scan time.
    """
    path: str
    size: int


@dataclass(frozen=True)
class ScanRules:
    """
    Immutable rule set applied while enumerating a project directory.

    Attributes:
        extensions: Lower-cased allowed extensions or file-name suffixes.
        excluded_dirs: Case-folded directory names pruned as path segments.
        max_file_size_bytes: Largest file that may still be selected.
    """
    extensions: FrozenSet[str]
    excluded_dirs: FrozenSet[str]
    max_file_size_bytes: int

    @classmethod
    def create(
            cls,
            extensions: Iterable[str],
            excluded_dirs: Iterable[str],
            max_file_size_bytes: int
    ) -> ScanRules:
        return cls(
            extensions=frozenset(e.lower() for e in extensions if e),
            excluded_dirs=frozenset(d.casefold() for d in excluded_dirs if d),
            max_file_size_bytes=int(max_file_size_bytes),
        )

    @classmethod
    def from_options(cls, options: Dict[str, Any]) -> ScanRules:
        """Build rules from a validated 'scan_options' dictionary."""
        return cls.create(
            options["extensions"],
            options["excluded_dirs"],
            options["max_file_size_bytes"],
        )

    def allows(self, file_name: str) -> bool:
        """Check the extension allow-list, accepting multi-dot suffixes such as '.razor.css'."""
        lowered = file_name.lower()
        _, ext = os.path.splitext(lowered)
        if ext in self.extensions:
            return True
        return any(lowered.endswith(sfx) for sfx in self.extensions)

    def is_excluded_dir(self, dir_name: str) -> bool:
        return dir_name.casefold() in self.excluded_dirs

    def is_oversized(self, size: int) -> bool:
        return size > self.max_file_size_bytes


# -----------------------------------------------------------------------------
# EXPORT RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ExportList:
    """
    Ordered, de-duplicated selection ready to be written.

    Attributes:
        files: Absolute paths in export order.
        total_size: Sum of on-disk sizes (unreadable files count as zero).
    """
    files: Tuple[str, ...] = ()
    total_size: int = 0

    def __len__(self) -> int:
        return len(self.files)

    @property
    def size_text(self) -> str:
        return f"{self.total_size / 1024.0 / 1024.0:.2f} MB"


@dataclass(frozen=True)
class DumpHeader:
    """Fixed three-line header written at the top of every dump."""
    generated_at: datetime
    solution_name: str
    file_count: int

    @classmethod
    def now(cls, solution_path: str, file_count: int) -> DumpHeader:
        return cls(
            generated_at=datetime.now().astimezone(),
            solution_name=os.path.basename(solution_path),
            file_count=file_count,
        )


@dataclass(frozen=True)
class StatusMessage:
    kind: StatusKind
    text: str
