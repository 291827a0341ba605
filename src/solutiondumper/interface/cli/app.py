from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and
merging of scan options (defaults, persistent storage, and CLI overrides),
solution loading, headless selection, and dump or summary rendering. Acts
as the primary interface for automation and headless environments.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from solutiondumper.core.engine.aggregation import DEFAULT_BUCKET_RULES
from solutiondumper.core.engine.scheduler import ManualScheduler
from solutiondumper.core.session import SolutionSession
from solutiondumper.domain import constants as const
from solutiondumper.domain.config import (
    get_default_scan_options,
    load_scan_options,
    validate_scan_options,
)
from solutiondumper.domain.errors import ExportDestinationError, ResolutionError
from solutiondumper.domain.models import CheckState, ExportList, ScanRules
from solutiondumper.infra.fs import normalize_path, safe_relpath
from solutiondumper.infra.logging import LoggingConfig, configure_logging, get_logger
from solutiondumper.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_EXPORT_FAILED = 1
EXIT_RESOLUTION_FAILED = 2
EXIT_EMPTY_SELECTION = 3
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (see EXIT_* constants).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (CLI-specific: Console stderr)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=None))

    logger.debug("CLI execution initiated. Resolving scan options...")

    # 3. Resolve base options (Default vs Persistent state) and merge overrides
    if args.use_defaults:
        base_options = get_default_scan_options()
    else:
        base_options = load_scan_options()

    raw_options = dict(base_options)
    raw_options.update(cli_args.args_to_overrides(args))

    clean_options, warnings = validate_scan_options(raw_options, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_options, ensure_ascii=False, indent=2))
        return EXIT_OK

    if not args.solution:
        parser.print_usage(sys.stderr)
        print("ERROR: a solution file is required.", file=sys.stderr)
        return EXIT_RESOLUTION_FAILED

    # 4. Load and select
    session = SolutionSession(
        ManualScheduler(),
        ScanRules.from_options(clean_options),
        track_changes=False,
    )
    try:
        try:
            session.load(normalize_path(args.solution, args.solution))
        except ResolutionError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return EXIT_RESOLUTION_FAILED

        _apply_selection(
            session,
            cli_args.selected_projects(args),
            args.filter_term,
            include_solution_file=not args.no_solution_file,
        )
        export_list = session.refresh_selection()

        if not export_list.files:
            print("ERROR: no files selected.", file=sys.stderr)
            return EXIT_EMPTY_SELECTION

        # 5. Output rendering phase
        output = normalize_path(args.output, const.DEFAULT_DUMP_FILE_NAME) if args.output else None
        failures: List[str] = []
        if output:
            try:
                failures = session.export_to_file(output)
            except ExportDestinationError as e:
                print(f"ERROR: {e}", file=sys.stderr)
                return EXIT_EXPORT_FAILED

        if args.json_output:
            print(json.dumps(
                _build_summary(session, export_list, output, failures),
                ensure_ascii=False,
                indent=2,
            ))
        elif args.list_only:
            _print_export_list(session, export_list)
        elif output:
            print(f"Exported {len(export_list)} file(s) ({export_list.size_text}) to {output}")
        else:
            sys.stdout.write(session.render_dump())

    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    finally:
        session.close()

    return EXIT_OK

# -----------------------------------------------------------------------------
# HEADLESS SELECTION
# -----------------------------------------------------------------------------

def _apply_selection(
        session: SolutionSession,
        project_names: Optional[List[str]],
        filter_term: Optional[str],
        *,
        include_solution_file: bool = True,
) -> None:
    """
    Check tree nodes the way a user would in the GUI.

    Without a filter whole projects are checked; with a filter only the
    file nodes it makes visible are checked.
    """
    root = session.root
    if root is None:
        return

    wanted = {n.casefold() for n in project_names} if project_names else None
    project_nodes = [c for c in root.children if not c.is_file]

    if wanted is not None:
        known = {p.name.casefold() for p in project_nodes}
        for missing in sorted(wanted - known):
            logger.warning(f"Unknown project '{missing}' ignored.")
        project_nodes = [p for p in project_nodes if p.name.casefold() in wanted]

    filtering = bool(filter_term and filter_term.strip())
    if filtering:
        session.filter_now(filter_term)

    for project in project_nodes:
        if not filtering:
            project.set_checked(CheckState.CHECKED)
            continue
        for node in project.walk():
            if node.is_file and node.visible and node.selectable:
                node.set_checked(CheckState.CHECKED)

    if include_solution_file:
        for child in root.children:
            if not child.is_file or not child.path or not DEFAULT_BUCKET_RULES.is_solution(child.path):
                continue
            if not filtering or child.visible:
                child.set_checked(CheckState.CHECKED)

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_export_list(session: SolutionSession, export_list: ExportList) -> None:
    for path in export_list.files:
        size = session.aggregator.size_of(path)
        print(f"{size:>10}  {safe_relpath(session.root_dir, path)}")
    print(f"{len(export_list)} file(s), {export_list.size_text}")


def _build_summary(
        session: SolutionSession,
        export_list: ExportList,
        output: Optional[str],
        failures: List[str],
) -> Dict[str, Any]:
    return {
        "solution": session.solution_path,
        "projects": [p.name for p in session.projects],
        "file_count": len(export_list),
        "total_size": export_list.total_size,
        "files": [safe_relpath(session.root_dir, p) for p in export_list.files],
        "output": os.path.abspath(output) if output else None,
        "failed_reads": [safe_relpath(session.root_dir, p) for p in failures],
    }

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
