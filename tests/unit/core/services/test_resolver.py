from __future__ import annotations

"""
Unit tests for the Solution Manifest Resolver.

Covers classic '.sln' text, XML '.slnx', missing manifests and the
failure modes that abort a load.
"""

import os
from pathlib import Path

import pytest

from solutiondumper.core.services.resolver import resolve_solution
from solutiondumper.domain.errors import ResolutionError

from conftest import SLN_TEMPLATE, write_file


def test_resolves_projects_in_declaration_order(solution_dir: Path) -> None:
    projects = resolve_solution(str(solution_dir / "App.sln"))

    assert [p.name for p in projects] == ["Web", "Core"]
    assert projects[0].manifest_path == str(solution_dir / "src" / "Web" / "Web.csproj")
    assert projects[0].project_dir == str(solution_dir / "src" / "Web")
    assert all(os.path.isabs(p.manifest_path) for p in projects)


def test_missing_manifest_is_skipped(tmp_path: Path) -> None:
    extra = (
        'Project("{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}") = "Gone", '
        '"src\\Gone\\Gone.csproj", "{33333333-3333-3333-3333-333333333333}"\nEndProject\n'
    )
    sln = write_file(tmp_path / "App.sln", SLN_TEMPLATE.format(extra=extra))
    write_file(tmp_path / "src" / "Web" / "Web.csproj")

    projects = resolve_solution(str(sln))

    assert [p.name for p in projects] == ["Web"]


def test_solution_folders_are_ignored(tmp_path: Path) -> None:
    extra = (
        'Project("{2150E333-8FDC-42A3-9474-1A3956D46DE8}") = "docs", "docs", '
        '"{44444444-4444-4444-4444-444444444444}"\nEndProject\n'
    )
    sln = write_file(tmp_path / "App.sln", SLN_TEMPLATE.format(extra=extra))
    write_file(tmp_path / "src" / "Web" / "Web.csproj")
    write_file(tmp_path / "src" / "Core" / "Core.csproj")

    assert [p.name for p in resolve_solution(str(sln))] == ["Web", "Core"]


def test_slnx_projects(tmp_path: Path) -> None:
    slnx = write_file(
        tmp_path / "App.slnx",
        "<Solution>\n"
        "  <Folder Name=\"/src/\">\n"
        "    <Project Path=\"src/Api/Api.csproj\" />\n"
        "  </Folder>\n"
        "  <Project Path=\"src\\Lib\\Lib.fsproj\" Name=\"Library\" />\n"
        "  <Project Path=\"tools/setup.wixproj\" />\n"
        "</Solution>\n",
    )
    write_file(tmp_path / "src" / "Api" / "Api.csproj")
    write_file(tmp_path / "src" / "Lib" / "Lib.fsproj")
    write_file(tmp_path / "tools" / "setup.wixproj")

    projects = resolve_solution(str(slnx))

    assert [(p.name, os.path.basename(p.manifest_path)) for p in projects] == [
        ("Api", "Api.csproj"),
        ("Library", "Lib.fsproj"),
    ]


def test_missing_solution_raises(tmp_path: Path) -> None:
    with pytest.raises(ResolutionError):
        resolve_solution(str(tmp_path / "nope.sln"))


def test_malformed_slnx_raises(tmp_path: Path) -> None:
    slnx = write_file(tmp_path / "Bad.slnx", "<Solution><Project Path=")
    with pytest.raises(ResolutionError):
        resolve_solution(str(slnx))
