from __future__ import annotations

"""
Unit tests for the Loaded Solution Session.

Drives a real solution on disk through ManualScheduler: all-or-nothing
loading, debounced aggregation, filtering, export and status expiry.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterator, List, Optional

import pytest

from solutiondumper.core.engine.scheduler import ManualScheduler
from solutiondumper.core.session import SolutionSession
from solutiondumper.domain.errors import ExportDestinationError, ResolutionError
from solutiondumper.domain.models import CheckState, ExportList, ScanRules, StatusKind, StatusMessage


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session(scheduler: ManualScheduler, small_rules: ScanRules) -> Iterator[SolutionSession]:
    pool = ThreadPoolExecutor(max_workers=1)
    s = SolutionSession(scheduler, small_rules, executor=pool)
    yield s
    s.close()
    pool.shutdown(wait=True)


def _node(session: SolutionSession, name: str):
    return next(n for n in session.tree.walk() if n.name == name)


def test_load_builds_tree_and_reports_success(session: SolutionSession, solution_dir: Path) -> None:
    tree = session.load(str(solution_dir / "App.sln"))

    assert session.is_loaded
    assert session.version == 1
    assert [c.name for c in tree.root.children] == ["Web", "Core", "App.sln"]
    assert len(session.index) == len(list(tree.walk()))
    assert tree.root.expanded is True
    assert session.status == StatusMessage(StatusKind.SUCCESS, "Loaded 'App.sln' (2 projects)")
    assert session.export_list == ExportList()


def test_failed_load_keeps_previous_tree(session: SolutionSession, solution_dir: Path) -> None:
    first = session.load(str(solution_dir / "App.sln"))

    with pytest.raises(ResolutionError):
        session.load(str(solution_dir / "Missing.sln"))

    assert session.tree is first
    assert session.version == 1
    assert session.status is not None
    assert session.status.kind is StatusKind.ERROR
    assert session.status.text.startswith("Failed to load solution:")


def test_check_changes_rebuild_after_debounce(
        scheduler: ManualScheduler, small_rules: ScanRules, solution_dir: Path
) -> None:
    rebuilt: List[ExportList] = []
    session = SolutionSession(scheduler, small_rules, on_selection_changed=rebuilt.append)
    session.load(str(solution_dir / "App.sln"))
    rebuilt.clear()

    session.check_all()
    scheduler.advance(59)
    assert rebuilt == []

    scheduler.advance(1)
    assert len(rebuilt) == 1

    names = [p.replace("\\", "/").rsplit("/", 1)[-1] for p in rebuilt[0].files]
    assert names == [
        "App.sln",
        "Web.csproj",
        "launchSettings.json",
        "app.js",
        "Program.cs",
        "Thing.cs",
        "Core.csproj",
        "Model.cs",
    ]
    assert session.can_export
    session.close()


def test_reload_resets_selection(session: SolutionSession, solution_dir: Path) -> None:
    session.load(str(solution_dir / "App.sln"))
    session.check_all()
    assert len(session.refresh_selection()) > 0

    session.load(str(solution_dir / "App.sln"))

    assert session.version == 2
    assert len(session.export_list) == 0


def test_filter_now_and_toggle(session: SolutionSession, solution_dir: Path) -> None:
    session.load(str(solution_dir / "App.sln"))

    visible = session.filter_now("thing")
    shown = {n.name for n in session.tree.walk() if n.visible}
    assert visible == len(shown)
    assert {"Thing.cs", "Services", "Web"} <= shown
    assert _node(session, "Program.cs").visible is False

    session.toggle(_node(session, "Thing.cs"))
    assert _node(session, "Web").check is CheckState.INDETERMINATE
    assert [os.path.basename(p) for p in session.refresh_selection().files] == ["Thing.cs"]


def test_render_dump_flushes_pending_aggregation(
        session: SolutionSession, scheduler: ManualScheduler, solution_dir: Path
) -> None:
    session.load(str(solution_dir / "App.sln"))
    session.set_checked(_node(session, "Model.cs"), CheckState.CHECKED)
    assert session.aggregator.is_pending

    text = session.render_dump()

    assert "### FILE COUNT: 1" in text
    assert "===== FILE: src/Core/Model.cs =====\nclass Model {}" in text


def test_export_to_file_success_and_failure(
        session: SolutionSession, solution_dir: Path, tmp_path: Path
) -> None:
    session.load(str(solution_dir / "App.sln"))
    session.check_all()

    dest = tmp_path / "dump.txt"
    assert session.export_to_file(str(dest)) == []
    assert dest.read_text(encoding="utf-8").startswith("### CODE DUMP GENERATED: ")
    assert session.status.text == f"Exported ({len(session.export_list)} files)"

    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    with pytest.raises(ExportDestinationError):
        session.export_to_file(str(blocker / "dump.txt"))
    assert session.status.kind is StatusKind.ERROR
    assert session.status.text.startswith("Export failed:")


def test_export_with_empty_selection_warns(
        session: SolutionSession, solution_dir: Path, tmp_path: Path
) -> None:
    session.load(str(solution_dir / "App.sln"))

    assert session.export_to_file(str(tmp_path / "dump.txt")) == []
    assert not (tmp_path / "dump.txt").exists()
    assert session.status.kind is StatusKind.WARNING


def test_status_expires_per_kind(scheduler: ManualScheduler, small_rules: ScanRules) -> None:
    seen: List[Optional[StatusMessage]] = []
    session = SolutionSession(scheduler, small_rules, on_status=seen.append)

    session.show_status(StatusKind.ERROR, "boom")
    scheduler.advance(2999)
    assert session.status is not None
    scheduler.advance(1)
    assert session.status is None
    assert seen[-1] is None

    session.show_status(StatusKind.INFO, "sticky", expiry_ms=0)
    scheduler.advance(100_000)
    assert session.status == StatusMessage(StatusKind.INFO, "sticky")
    session.close()


def test_newer_status_replaces_expiry(scheduler: ManualScheduler, small_rules: ScanRules) -> None:
    session = SolutionSession(scheduler, small_rules)

    session.show_status(StatusKind.SUCCESS, "first")
    scheduler.advance(1000)
    session.show_status(StatusKind.WARNING, "second")
    scheduler.advance(1000)

    assert session.status == StatusMessage(StatusKind.WARNING, "second")
    scheduler.advance(1000)
    assert session.status is None
    session.close()
