from __future__ import annotations

"""
Dump Sink and Formatting.

Writes the ordered export list into a text sink: a fixed three-line header
followed by one marked section per file. The same routine feeds the file
destination and the in-memory clipboard buffer, so both produce identical
text for the same input.
"""

import io
import logging
import os
from typing import List, Sequence, TextIO

from solutiondumper.core.export.reader import stream_file_chunks
from solutiondumper.domain import constants as const
from solutiondumper.domain.errors import ExportDestinationError, ExportIOError
from solutiondumper.domain.models import DumpHeader
from solutiondumper.infra.fs import safe_relpath

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# FORMATTING
# -----------------------------------------------------------------------------

def format_header(header: DumpHeader) -> str:
    lines = [
        const.DUMP_HEADER_GENERATED.format(timestamp=header.generated_at.isoformat()),
        const.DUMP_HEADER_SOLUTION.format(solution=header.solution_name),
        const.DUMP_HEADER_COUNT.format(count=header.file_count),
    ]
    return "\n".join(lines) + "\n"


# -----------------------------------------------------------------------------
# SINK OPERATIONS
# -----------------------------------------------------------------------------

def write_dump(
        out: TextIO,
        files: Sequence[str],
        header: DumpHeader,
        root_dir: str,
) -> List[str]:
    """
    Stream the header and every file section into 'out'.

    A file that cannot be read gets a placeholder line instead of (or after
    the part of) its content; the remaining files are still written.

    Args:
        out: Text sink opened without newline translation.
        files: Absolute paths in export order.
        header: Header values.
        root_dir: Directory the section markers are made relative to.

    Returns:
        List[str]: Paths that failed to read.
    """
    failures: List[str] = []
    out.write(format_header(header))

    for path in files:
        rel = safe_relpath(root_dir, path)
        out.write("\n\n" + const.DUMP_FILE_MARKER.format(path=rel) + "\n")

        try:
            for chunk in stream_file_chunks(path):
                out.write(chunk)
        except ExportIOError as e:
            logger.warning(f"Export read failure for '{rel}': {e.reason}")
            out.write(const.DUMP_READ_FAILURE.format(error=e.reason) + "\n")
            failures.append(path)

    return failures


def export_to_file(
        destination: str,
        files: Sequence[str],
        header: DumpHeader,
        root_dir: str,
) -> List[str]:
    """
    Write the dump to a file on disk (UTF-8, no BOM, '\\n' line endings).

    Returns:
        List[str]: Paths that failed to read.

    Raises:
        ExportDestinationError: If the destination cannot be opened or written.
    """
    logger.info(f"Exporting {len(files)} file(s) to {destination}")
    try:
        parent = os.path.dirname(os.path.abspath(destination))
        os.makedirs(parent, exist_ok=True)
        with open(destination, "w", encoding="utf-8", newline="") as out:
            failures = write_dump(out, files, header, root_dir)
    except OSError as e:
        logger.error(f"Export destination failure: {e}")
        raise ExportDestinationError(f"Cannot write '{destination}': {e.strerror or e}") from e

    logger.info(f"Export finished: {len(files) - len(failures)} written, {len(failures)} failed")
    return failures


def render_dump(files: Sequence[str], header: DumpHeader, root_dir: str) -> str:
    """Render the dump into a string (clipboard and stdout sink)."""
    buffer = io.StringIO(newline="")
    write_dump(buffer, files, header, root_dir)
    return buffer.getvalue()
