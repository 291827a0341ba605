from __future__ import annotations

"""
Unit tests for Selection Tree Assembly.

Uses an injected enumerator so that folder reuse, de-duplication and the
size-limit tooltip can be checked without touching the filesystem.
"""

import os
from typing import Dict, Iterator, List

import pytest

from solutiondumper.core.tree.builder import build_solution_tree, size_limit_tooltip
from solutiondumper.domain.models import CandidateFile, CheckState, ProjectDescriptor, ScanRules

ROOT = os.path.abspath(os.sep + "repo")


def _p(*parts: str) -> str:
    return os.path.join(ROOT, *parts)


def _enumerator(candidates: Dict[str, List[CandidateFile]]):
    def _enumerate(project_dir: str, _rules: ScanRules) -> Iterator[CandidateFile]:
        yield from candidates.get(project_dir, [])
    return _enumerate


@pytest.fixture
def rules() -> ScanRules:
    return ScanRules.create([".cs", ".csproj"], ["bin"], 1000)


def test_tree_layout(rules: ScanRules) -> None:
    project = ProjectDescriptor("Web", _p("Web", "Web.csproj"))
    enumerate_files = _enumerator({
        _p("Web"): [
            CandidateFile(_p("Web", "Web.csproj"), 10),
            CandidateFile(_p("Web", "Program.cs"), 10),
            CandidateFile(_p("Web", "Services", "A.cs"), 10),
            CandidateFile(_p("Web", "services", "B.cs"), 10),
        ]
    })

    tree = build_solution_tree(_p("App.sln"), [project], rules, enumerate_files=enumerate_files)
    root = tree.root

    assert root.name == "Solution 'App'"
    assert [c.name for c in root.children] == ["Web", "App.sln"]
    assert root.children[-1].is_file
    assert root.children[-1].path == _p("App.sln")

    web = root.children[0]
    assert not web.is_file and web.path is None
    # Manifest first and not duplicated; folders matched case-insensitively
    assert [c.name for c in web.children] == ["Web.csproj", "Program.cs", "Services"]
    assert [c.name for c in web.children[2].children] == ["A.cs", "B.cs"]


def test_oversized_candidate_is_locked_with_tooltip(rules: ScanRules) -> None:
    project = ProjectDescriptor("Core", _p("Core", "Core.csproj"))
    enumerate_files = _enumerator({_p("Core"): [CandidateFile(_p("Core", "big.cs"), 2000)]})

    tree = build_solution_tree(_p("App.sln"), [project], rules, enumerate_files=enumerate_files)
    big = tree.root.children[0].children[1]

    assert big.name == "big.cs"
    assert big.selectable is False
    assert big.size == 2000
    assert big.tooltip == size_limit_tooltip(2000) == "Excluded by size limit (1 KB)"

    tree.root.set_checked(CheckState.CHECKED)
    assert big.check is CheckState.UNCHECKED


def test_new_tree_is_unchecked_and_visible(rules: ScanRules) -> None:
    project = ProjectDescriptor("Core", _p("Core", "Core.csproj"))
    tree = build_solution_tree(_p("App.sln"), [project], rules, enumerate_files=_enumerator({}))

    for node in tree.walk():
        assert node.check is CheckState.UNCHECKED
        assert node.visible is True


def test_builds_from_disk(solution_dir, small_rules: ScanRules) -> None:
    from solutiondumper.core.services.resolver import resolve_solution

    sln = str(solution_dir / "App.sln")
    tree = build_solution_tree(sln, resolve_solution(sln), small_rules)

    names = {n.name for n in tree.walk() if n.is_file}
    assert {"Web.csproj", "Program.cs", "launchSettings.json", "app.js", "Thing.cs"} <= names
    assert "Web.dll.config" not in names
    assert "notes.txt" not in names

    big = next(n for n in tree.walk() if n.name == "big.cs")
    assert big.selectable is False
