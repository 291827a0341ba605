from __future__ import annotations

"""
Resilient File Reading Component.

Streams file content in bounded chunks so that one export never holds more
than a single buffer of any file in memory. Encoding problems are absorbed
('replace' strategy, BOM stripped); only genuine I/O failures surface, as
ExportIOError.
"""

from typing import Iterator

from solutiondumper.domain import constants as const
from solutiondumper.domain.errors import ExportIOError

# -----------------------------------------------------------------------------
# STREAM READING OPERATIONS
# -----------------------------------------------------------------------------

def stream_file_chunks(file_path: str, chunk_size: int = const.READ_BUFFER_CHARS) -> Iterator[str]:
    """
    Generate the decoded text of a file in fixed-size chunks.

    Line endings are passed through untranslated so that the dump carries
    the file's raw text.

    Args:
        file_path: Absolute path to the target file.
        chunk_size: Maximum characters per chunk.

    Yields:
        str: Consecutive chunks of file text.

    Raises:
        ExportIOError: If the file cannot be opened or read.
    """
    try:
        with open(file_path, "r", encoding="utf-8-sig", errors="replace", newline="") as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk
    except OSError as e:
        raise ExportIOError(file_path, e.strerror or str(e)) from e
