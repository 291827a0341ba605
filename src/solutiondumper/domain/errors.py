from __future__ import annotations

"""
Error Taxonomy.

Whole-operation failures (resolving a solution, opening an export
destination, writing the clipboard) escalate to the caller. Per-file
failures (enumeration, export reads) are raised close to the I/O and
recovered by the aggregate operation that owns the loop.
"""


class SolutionDumperError(Exception):
    """Base class for every application-level error."""


class ResolutionError(SolutionDumperError):
    """The solution descriptor is missing, unreadable or malformed."""


class EnumerationError(SolutionDumperError):
    """A single candidate file could not be inspected during a project scan."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class FilterCancelled(SolutionDumperError):
    """A visibility scan was superseded before it finished."""


class ExportIOError(SolutionDumperError):
    """A single file could not be read while writing a dump."""

    def __init__(self, path: str, reason: str):
        super().__init__(reason)
        self.path = path
        self.reason = reason


class ExportDestinationError(SolutionDumperError):
    """The export destination could not be opened or written."""


class ClipboardError(SolutionDumperError):
    """The system clipboard rejected the dump."""
