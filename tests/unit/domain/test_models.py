from __future__ import annotations

"""
Unit tests for the Core Domain Models.

Focuses on the rule predicates used during enumeration and the dump
header/record helpers.
"""

import os

from solutiondumper.domain.models import (
    DumpHeader,
    ExportList,
    ProjectDescriptor,
    ScanRules,
)


def test_scan_rules_normalize_case() -> None:
    rules = ScanRules.create([".CS", "", ".Razor.Css"], ["Bin", "OBJ", ""], "100")

    assert rules.extensions == frozenset({".cs", ".razor.css"})
    assert rules.excluded_dirs == frozenset({"bin", "obj"})
    assert rules.max_file_size_bytes == 100


def test_scan_rules_allows_extensions_and_suffixes() -> None:
    rules = ScanRules.create([".cs", ".razor.css"], [], 10)

    assert rules.allows("Program.CS")
    assert rules.allows("Index.razor.css")
    assert not rules.allows("site.css")
    assert not rules.allows("README")


def test_scan_rules_directory_and_size_predicates() -> None:
    rules = ScanRules.create([".cs"], ["bin"], 10)

    assert rules.is_excluded_dir("BIN")
    assert not rules.is_excluded_dir("binary")
    assert not rules.is_oversized(10)
    assert rules.is_oversized(11)


def test_scan_rules_from_options() -> None:
    rules = ScanRules.from_options({
        "extensions": [".json"],
        "excluded_dirs": ["node_modules"],
        "max_file_size_bytes": 5,
    })

    assert rules == ScanRules.create([".json"], ["node_modules"], 5)


def test_project_descriptor_dir() -> None:
    manifest = os.path.join("work", "src", "Web", "Web.csproj")
    assert ProjectDescriptor("Web", manifest).project_dir == os.path.join("work", "src", "Web")


def test_export_list_len_and_size_text() -> None:
    export_list = ExportList(("a", "b"), 3 * 1024 * 1024 // 2)

    assert len(export_list) == 2
    assert export_list.size_text == "1.50 MB"
    assert len(ExportList()) == 0


def test_dump_header_uses_solution_file_name() -> None:
    header = DumpHeader.now(os.path.join("work", "App.sln"), 4)

    assert header.solution_name == "App.sln"
    assert header.file_count == 4
    assert header.generated_at.tzinfo is not None
