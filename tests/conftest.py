from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A small two-project solution laid out on disk under tmp_path.
3. Node factories for tree-level tests that do not need a filesystem.
"""

import os
import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from solutiondumper.core.tree.node import TreeNode  # noqa: E402
from solutiondumper.domain.models import ScanRules  # noqa: E402

SLN_TEMPLATE = """Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio Version 17
Project("{{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}}") = "Web", "src\\Web\\Web.csproj", "{{11111111-1111-1111-1111-111111111111}}"
EndProject
Project("{{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}}") = "Core", "src\\Core\\Core.csproj", "{{22222222-2222-2222-2222-222222222222}}"
EndProject
{extra}Global
EndGlobal
"""


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
def write_file(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline="")
    return path


@pytest.fixture
def solution_dir(tmp_path: Path) -> Path:
    """
    Create a small solution on disk.

    Structure:
    /solution
      App.sln
      /src/Web
        Web.csproj
        Program.cs
        /Properties/launchSettings.json
        /wwwroot/app.js
        /Services/Thing.cs
        /bin/Debug/Web.dll.config  (excluded dir)
        notes.txt                  (extension not allowed)
      /src/Core
        Core.csproj
        Model.cs
        big.cs                     (2000 bytes)
    """
    root = tmp_path / "solution"
    write_file(root / "App.sln", SLN_TEMPLATE.format(extra=""))

    web = root / "src" / "Web"
    write_file(web / "Web.csproj", "<Project Sdk=\"Microsoft.NET.Sdk.Web\" />")
    write_file(web / "Program.cs", "var app = 1;\n")
    write_file(web / "Properties" / "launchSettings.json", "{}")
    write_file(web / "wwwroot" / "app.js", "console.log(1);")
    write_file(web / "Services" / "Thing.cs", "class Thing {}")
    write_file(web / "bin" / "Debug" / "Web.dll.config", "<configuration />")
    write_file(web / "notes.txt", "ignored")

    core = root / "src" / "Core"
    write_file(core / "Core.csproj", "<Project Sdk=\"Microsoft.NET.Sdk\" />")
    write_file(core / "Model.cs", "class Model {}")
    write_file(core / "big.cs", "a" * 2000)

    return root


@pytest.fixture
def small_rules() -> ScanRules:
    """Default-like rules with a 1000 byte size limit."""
    return ScanRules.create(
        [".cs", ".csproj", ".json", ".js", ".sln", ".config"],
        ["bin", "obj"],
        1000,
    )


@pytest.fixture
def make_node() -> Callable[..., TreeNode]:
    """Factory for detached file nodes."""
    def _make(
            name: str,
            path: Optional[str] = None,
            *,
            selectable: bool = True,
            size: Optional[int] = None,
    ) -> TreeNode:
        return TreeNode(name, path or f"/p/{name}", is_file=True, selectable=selectable, size=size)
    return _make
