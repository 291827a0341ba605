from __future__ import annotations

"""
Selection Aggregation Engine.

Flattens the checked subset of the selection tree into the canonical
export order: checked solution files first, then one block per project in
root child order. Inside a block files are partitioned into buckets
(manifest, properties, web assets, rest), each bucket is sorted on its own
key, and paths already emitted by an earlier block are skipped.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from solutiondumper.core.engine.scheduler import Debouncer, Scheduler
from solutiondumper.core.tree.node import TreeNode
from solutiondumper.domain import constants as const
from solutiondumper.domain.models import CheckState, ExportList
from solutiondumper.infra.fs import path_key, safe_relpath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BucketRules:
    """
    Classification rules for one project block.

    Attributes:
        manifest_extensions: Suffixes of project manifests (lead their block).
        solution_extensions: Suffixes of solution files emitted before all blocks.
        properties_prefix: Relative prefix of the properties bucket.
        web_prefix: Relative prefix of the web assets bucket.
    """
    manifest_extensions: Tuple[str, ...] = const.PROJECT_MANIFEST_EXTENSIONS
    solution_extensions: Tuple[str, ...] = const.SOLUTION_EXTENSIONS
    properties_prefix: str = const.PROPERTIES_PREFIX
    web_prefix: str = const.WEB_ROOT_PREFIX

    def is_manifest(self, path: str) -> bool:
        return path.lower().endswith(self.manifest_extensions)

    def is_solution(self, path: str) -> bool:
        return path.lower().endswith(self.solution_extensions)


DEFAULT_BUCKET_RULES = BucketRules()


# ==============================================================================
# ORDERING PRIMITIVES
# ==============================================================================

def ordinal_ignore_case(value: str) -> Tuple[str, str]:
    """Case-insensitive ordinal sort key; the raw string breaks ties deterministically."""
    return value.upper(), value


def collect_checked_files(node: TreeNode) -> List[str]:
    """Checked file paths beneath 'node' in tree (pre-order) order."""
    return [
        n.path for n in node.walk()
        if n.is_file and n.path and n.check is CheckState.CHECKED
    ]


def project_base_dir(files: List[str], rules: BucketRules = DEFAULT_BUCKET_RULES) -> str:
    """Directory of the first checked manifest, else of the first checked file."""
    for path in files:
        if rules.is_manifest(path):
            return os.path.dirname(path)
    return os.path.dirname(files[0])


def classify(path: str, base_dir: str, rules: BucketRules = DEFAULT_BUCKET_RULES) -> str:
    """Assign a path to its bucket, testing manifest, properties, web, rest in that order."""
    if rules.is_manifest(path):
        return const.BUCKET_MANIFEST

    rel = safe_relpath(base_dir, path).lower()
    if rel.startswith(rules.properties_prefix.lower()):
        return const.BUCKET_PROPERTIES
    if rel.startswith(rules.web_prefix.lower()):
        return const.BUCKET_WEB
    return const.BUCKET_REST


def order_project_files(files: List[str], rules: BucketRules = DEFAULT_BUCKET_RULES) -> List[str]:
    """
    Bucket and sort the checked files of one project.

    The manifest bucket is sorted by full path; the other buckets by the
    path relative to the project base directory.
    """
    if not files:
        return []

    base_dir = project_base_dir(files, rules)
    buckets: Dict[str, List[str]] = {name: [] for name in const.BUCKET_ORDER}
    for path in files:
        buckets[classify(path, base_dir, rules)].append(path)

    ordered: List[str] = []
    for name in const.BUCKET_ORDER:
        if name == const.BUCKET_MANIFEST:
            key: Callable[[str], Tuple[str, str]] = ordinal_ignore_case
        else:
            key = lambda p: ordinal_ignore_case(safe_relpath(base_dir, p))  # noqa: E731
        ordered.extend(sorted(buckets[name], key=key))
    return ordered


def build_export_files(root: TreeNode, rules: BucketRules = DEFAULT_BUCKET_RULES) -> List[str]:
    """
    Compute the ordered, de-duplicated export list from the current check state.

    Args:
        root: Solution root node.
        rules: Bucket classification rules.

    Returns:
        List[str]: Absolute paths, first occurrence wins across projects.
    """
    ordered: List[str] = []
    seen: Set[str] = set()

    def _append_unique(paths: Iterable[str]) -> None:
        for p in paths:
            k = path_key(p)
            if k not in seen:
                seen.add(k)
                ordered.append(p)

    _append_unique(
        child.path for child in root.children
        if child.is_file and child.path and child.is_checked and rules.is_solution(child.path)
    )

    for child in root.children:
        if child.is_file:
            continue
        files = collect_checked_files(child)
        if not files:
            continue
        _append_unique(order_project_files(files, rules))

    return ordered


# ==============================================================================
# SIZE LOOKUP
# ==============================================================================

class SizeCache:
    """On-disk size lookup memoized per path; unreadable files count as zero."""

    def __init__(self) -> None:
        self._sizes: Dict[str, int] = {}

    def size_of(self, path: str) -> int:
        cached = self._sizes.get(path)
        if cached is not None:
            return cached

        try:
            size = os.path.getsize(path)
        except OSError as e:
            logger.debug(f"Size lookup failed for '{path}': {e}. Counting as 0.")
            size = 0

        self._sizes[path] = size
        return size

    def total(self, paths: Iterable[str]) -> int:
        return sum(self.size_of(p) for p in paths)

    def clear(self) -> None:
        self._sizes.clear()

    def __len__(self) -> int:
        return len(self._sizes)


# ==============================================================================
# DEBOUNCED AGGREGATOR
# ==============================================================================

class SelectionAggregator:
    """
    Keeps the ExportList in sync with the tree's check state.

    Check-changed signals only arm a coalescing debounce; the rebuild runs
    once per burst on the owner scheduler.
    """

    def __init__(
            self,
            scheduler: Scheduler,
            on_rebuilt: Optional[Callable[[ExportList], None]] = None,
            delay_ms: int = const.AGGREGATION_DEBOUNCE_MS,
            rules: BucketRules = DEFAULT_BUCKET_RULES,
    ):
        self._on_rebuilt = on_rebuilt
        self._rules = rules
        self._debouncer = Debouncer(scheduler, delay_ms, self._on_debounce_elapsed, restart=False)
        self._root: Optional[TreeNode] = None
        self._sizes = SizeCache()
        self._current = ExportList()
        self.rebuild_count = 0

    @property
    def current(self) -> ExportList:
        return self._current

    @property
    def is_pending(self) -> bool:
        return self._debouncer.is_pending

    def bind(self, root: Optional[TreeNode]) -> None:
        """Switch to a new tree; sizes cached for the previous solution are dropped."""
        self._debouncer.cancel()
        self._root = root
        self._sizes.clear()
        self._current = ExportList()

    def schedule(self, *_: object) -> None:
        """Check-changed listener: arm (or join) the pending rebuild."""
        self._debouncer.trigger()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def size_of(self, path: str) -> int:
        return self._sizes.size_of(path)

    def rebuild_now(self) -> ExportList:
        self._debouncer.cancel()
        if self._root is None:
            self._current = ExportList()
            return self._current

        files = build_export_files(self._root, self._rules)
        self._current = ExportList(files=tuple(files), total_size=self._sizes.total(files))
        self.rebuild_count += 1
        logger.debug(
            f"Export list rebuilt: {len(self._current)} file(s), {self._current.size_text}"
        )
        return self._current

    def _on_debounce_elapsed(self) -> None:
        export_list = self.rebuild_now()
        if self._on_rebuilt is not None:
            self._on_rebuilt(export_list)
