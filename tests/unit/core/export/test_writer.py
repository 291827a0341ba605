from __future__ import annotations

"""
Unit tests for the Dump Sink and the chunked reader.

Verifies the exact dump layout, inline placeholders for unreadable files,
identical output for the file and in-memory sinks, and destination errors.
"""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from solutiondumper.core.export.reader import stream_file_chunks
from solutiondumper.core.export.writer import export_to_file, format_header, render_dump
from solutiondumper.domain.errors import ExportDestinationError, ExportIOError
from solutiondumper.domain.models import DumpHeader

STAMP = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone(timedelta(hours=2)))


@pytest.fixture
def files(tmp_path: Path):
    root = tmp_path / "sln"
    (root / "src").mkdir(parents=True)
    a = root / "src" / "a.cs"
    a.write_bytes("\ufeffclass A {}\r\n".encode("utf-8"))
    b = root / "b.json"
    b.write_bytes(b"{\xff}")
    return root, [str(a), str(b)]


def test_header_format() -> None:
    header = DumpHeader(STAMP, "App.sln", 2)
    assert format_header(header) == (
        "### CODE DUMP GENERATED: 2024-05-01T12:30:00+02:00\n"
        "### SLN: App.sln\n"
        "### FILE COUNT: 2\n"
    )


def test_dump_layout(files) -> None:
    root, paths = files
    text = render_dump(paths, DumpHeader(STAMP, "App.sln", 2), str(root))

    assert text == (
        "### CODE DUMP GENERATED: 2024-05-01T12:30:00+02:00\n"
        "### SLN: App.sln\n"
        "### FILE COUNT: 2\n"
        "\n\n===== FILE: src/a.cs =====\n"
        "class A {}\r\n"
        "\n\n===== FILE: b.json =====\n"
        "{\ufffd}"
    )


def test_unreadable_file_gets_placeholder_and_export_continues(files) -> None:
    root, paths = files
    missing = str(root / "gone.cs")

    text = render_dump([missing, paths[1]], DumpHeader(STAMP, "App.sln", 2), str(root))

    assert "===== FILE: gone.cs =====\n[[FAILED TO READ FILE]] " in text
    assert text.endswith("===== FILE: b.json =====\n{\ufffd}")


def test_file_and_memory_sinks_are_identical(files, tmp_path: Path) -> None:
    root, paths = files
    header = DumpHeader(STAMP, "App.sln", 2)
    dest = tmp_path / "out" / "dump.txt"

    failures = export_to_file(str(dest), paths, header, str(root))

    assert failures == []
    assert dest.read_bytes() == render_dump(paths, header, str(root)).encode("utf-8")


def test_export_reports_failed_reads(files, tmp_path: Path) -> None:
    root, paths = files
    missing = str(root / "gone.cs")

    failures = export_to_file(str(tmp_path / "d.txt"), [missing] + paths, DumpHeader(STAMP, "x", 3), str(root))

    assert failures == [missing]


def test_destination_failure_raises(files, tmp_path: Path) -> None:
    root, paths = files
    blocker = tmp_path / "occupied"
    blocker.write_text("file, not a directory", encoding="utf-8")

    with pytest.raises(ExportDestinationError):
        export_to_file(str(blocker / "dump.txt"), paths, DumpHeader(STAMP, "x", 2), str(root))


def test_reader_streams_in_chunks(tmp_path: Path) -> None:
    path = tmp_path / "long.cs"
    path.write_text("x" * 10, encoding="utf-8")

    assert list(stream_file_chunks(str(path), chunk_size=4)) == ["xxxx", "xxxx", "xx"]


def test_reader_wraps_os_errors(tmp_path: Path) -> None:
    with pytest.raises(ExportIOError) as exc_info:
        list(stream_file_chunks(str(tmp_path / "missing.cs")))
    assert exc_info.value.path == os.path.join(str(tmp_path), "missing.cs")
