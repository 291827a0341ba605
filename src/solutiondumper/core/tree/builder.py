from __future__ import annotations

"""
Selection Tree Assembly.

Builds the node hierarchy for one solution: a synthetic root, one folder
node per project (manifest first, then enumerated files inserted along
their relative paths) and finally the solution file itself.
"""

import logging
import os
from typing import Callable, Dict, Iterable, Iterator, Set, Tuple

from solutiondumper.core.services.scanner import enumerate_project_files
from solutiondumper.core.tree.node import SelectionTree, TreeNode
from solutiondumper.domain.models import CandidateFile, ProjectDescriptor, ScanRules
from solutiondumper.infra.fs import path_key

logger = logging.getLogger(__name__)

FileEnumerator = Callable[[str, ScanRules], Iterator[CandidateFile]]


# ==============================================================================
# PUBLIC API
# ==============================================================================

def build_solution_tree(
        solution_path: str,
        projects: Iterable[ProjectDescriptor],
        rules: ScanRules,
        *,
        enumerate_files: FileEnumerator = enumerate_project_files,
        track_changes: bool = True,
) -> SelectionTree:
    """
    Assemble the selection tree for a resolved solution.

    Args:
        solution_path: Path to the solution file.
        projects: Resolved projects in declaration order.
        rules: Rules forwarded to the enumerator (size limit drives selectability).
        enumerate_files: Candidate file source, replaceable for tests.
        track_changes: Collect property changes for a presentation layer.

    Returns:
        SelectionTree: The new tree, all nodes unchecked and visible.
    """
    solution_abs = os.path.abspath(solution_path)
    stem = os.path.splitext(os.path.basename(solution_abs))[0]

    root = TreeNode(f"Solution '{stem}'")
    file_count = 0

    for project in projects:
        builder = _ProjectTreeBuilder(project)
        for candidate in enumerate_files(project.project_dir, rules):
            builder.add(candidate, rules)
        root.add_child(builder.node)
        file_count += builder.file_count

    root.add_child(TreeNode(os.path.basename(solution_abs), solution_abs, is_file=True))

    logger.info(f"Tree assembled for '{stem}': {len(root.children) - 1} project(s), {file_count} file(s)")
    return SelectionTree(root, track_changes=track_changes)


def size_limit_tooltip(size: int) -> str:
    return f"Excluded by size limit ({size // 1024} KB)"


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

class _ProjectTreeBuilder:
    """Inserts candidate files under one project node, reusing folder nodes."""

    def __init__(self, project: ProjectDescriptor):
        self.project_dir = project.project_dir
        self.node = TreeNode(project.name)
        self.file_count = 1

        manifest = TreeNode(
            os.path.basename(project.manifest_path),
            project.manifest_path,
            is_file=True,
        )
        self.node.add_child(manifest)

        self._folders: Dict[Tuple[int, str], TreeNode] = {}
        self._files: Set[str] = {path_key(project.manifest_path)}

    def add(self, candidate: CandidateFile, rules: ScanRules) -> None:
        key = path_key(candidate.path)
        if key in self._files:
            return
        self._files.add(key)

        rel = os.path.relpath(candidate.path, self.project_dir)
        *folders, file_name = rel.replace("\\", "/").split("/")

        current = self.node
        for folder_name in folders:
            current = self._folder(current, folder_name)

        too_large = rules.is_oversized(candidate.size)
        current.add_child(TreeNode(
            file_name,
            candidate.path,
            is_file=True,
            selectable=not too_large,
            size=candidate.size,
            tooltip=size_limit_tooltip(candidate.size) if too_large else None,
        ))
        self.file_count += 1

    def _folder(self, parent: TreeNode, name: str) -> TreeNode:
        key = (id(parent), name.casefold())
        folder = self._folders.get(key)
        if folder is None:
            folder = parent.add_child(TreeNode(name))
            self._folders[key] = folder
        return folder
