#!/usr/bin/env python3
"""
CLI for snapshot history operations.

Usage:
    docvault init    [--project DIR] [--docs PATH] [--no-git]
    docvault save    [--project DIR] [--note TEXT]
    docvault history [--project DIR] [--compact] [--json]
    docvault diff    v1 [v2] [--project DIR] [--file NAME] [--json]
    docvault squash  v2 v4 [--project DIR] [--fold] [--json]
    docvault note    v3 [TEXT] [--project DIR]
"""

import argparse
import json
import logging
import re
import sys
from pathlib import Path
from typing import Dict, Optional

from dotenv import find_dotenv, load_dotenv

from .api import create_snapshot, diff_files, squash_range
from .config.config_loader import ProjectConfig, init_project, is_initialized
from .core.exceptions import DocvaultError
from .core.logging import configure_logging
from .diff.render import format_diffs, format_file_list, summarize
from .snapshot.git_info import format_git_info
from .snapshot.store import SnapshotStore, compact_history, find_index, resolve_full_snapshot

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^v?(\d+)$")


def parse_version(raw: str) -> int:
    """Parse ``v3`` or ``3`` into 3."""
    match = _VERSION_RE.match(raw.strip())
    if not match:
        raise argparse.ArgumentTypeError(f"invalid version {raw!r}, expected e.g. v3")
    return int(match.group(1))


def _project_root(args) -> Path:
    return Path(args.project).resolve() if args.project else Path.cwd()


def _require_initialized(project_root: Path) -> bool:
    if not is_initialized(project_root):
        logger.error("Project not initialized. Run `docvault init` first.")
        return False
    return True


def cmd_init(args) -> int:
    """Initialize a project."""
    project_root = _project_root(args)

    if is_initialized(project_root):
        logger.error(f"Project already initialized: {project_root}")
        return 1

    config = init_project(project_root, docs_path=args.docs, track_git=not args.no_git)
    print(f"Initialized docvault project: {project_root}")
    print(f"  Tracked folder: {config.docs_dir}")
    print(f"  History: {config.history_dir}")
    return 0


def cmd_save(args) -> int:
    """Create a snapshot of the tracked folder."""
    project_root = _project_root(args)
    if not _require_initialized(project_root):
        return 1

    store = SnapshotStore(project_root)
    if not store.tracked_files():
        logger.warning(f"No files to save in {store.docs_dir}")
        return 0

    info = create_snapshot(project_root, note=args.note)

    msg = f"v{info.version} saved"
    if info.snapshot.git:
        msg += f" · {info.snapshot.git.commit}"
        if info.snapshot.git.dirty:
            msg += " (uncommitted)"
    print(msg)
    print(f"  Changed: {len(info.changed_files)}  Unchanged: {len(info.skipped_files)}")
    for path in info.files:
        marker = "*" if path in info.changed_files else " "
        print(f"  {marker} {path}")
    return 0


def cmd_history(args) -> int:
    """List snapshots."""
    project_root = _project_root(args)
    if not _require_initialized(project_root):
        return 1

    config = ProjectConfig(project_root)
    history = SnapshotStore(project_root, config).list()

    if not history:
        print("No snapshots saved yet. Save one with `docvault save`.")
        return 0

    shown, hidden = history, []
    if args.compact:
        shown, hidden = compact_history(history, threshold=config.compact_threshold)

    if args.json:
        print(json.dumps(
            {
                "total": len(history),
                "hidden": hidden,
                "snapshots": [s.to_meta() for s in shown],
            },
            indent=2,
        ))
        return 0

    if args.compact:
        print(f"History ({len(shown)} shown, {len(hidden)} hidden)")
    else:
        print(f"History ({len(history)} total)")

    for snapshot in shown:
        header = f"v{snapshot.version} - {snapshot.timestamp}"
        if snapshot.git:
            header += f" · {format_git_info(snapshot.git)}"
        if snapshot.squashed_from:
            header += f" (squashed {', '.join(f'v{v}' for v in snapshot.squashed_from)})"
        print("")
        print(header)
        if snapshot.note:
            print(f"  {snapshot.note}")
        for path in snapshot.files or ["(no files)"]:
            print(f"  - {path}")

    if hidden:
        print("")
        print(f"Hidden versions (minor changes): {', '.join(f'v{v}' for v in hidden)}")

    return 0


def _filter_file(files: Dict[str, str], name: Optional[str]) -> Dict[str, str]:
    if name is None:
        return files
    return {name: files[name]} if name in files else {}


def cmd_diff(args) -> int:
    """Diff two versions, or a version against the working copy."""
    project_root = _project_root(args)
    if not _require_initialized(project_root):
        return 1

    config = ProjectConfig(project_root)
    store = SnapshotStore(project_root, config)
    history = store.list()
    if not history:
        logger.error("No snapshots found.")
        return 1

    old_files = resolve_full_snapshot(history, find_index(history, args.old))
    if args.new is None:
        new_files = store.read_working_copy()
        target_label = "working copy"
    else:
        new_files = resolve_full_snapshot(history, find_index(history, args.new))
        target_label = f"v{args.new}"

    old_files = _filter_file(old_files, args.file)
    new_files = _filter_file(new_files, args.file)
    if args.file and not old_files and not new_files:
        logger.error(f'File "{args.file}" not found in either version.')
        return 1

    diffs = diff_files(old_files, new_files, context_lines=config.context_lines)
    summary = summarize(diffs)

    if args.json:
        print(json.dumps(
            {
                "from": f"v{args.old}",
                "to": target_label,
                "summary": summary.to_dict(),
                "files": [{"file": d.file_name, "status": d.status.value} for d in diffs],
            },
            indent=2,
        ))
        return 0

    print(f"diff v{args.old} -> {target_label}")
    if not diffs:
        print("No differences found.")
        return 0

    print("Changed files:")
    print(format_file_list(diffs))
    print("")
    print(format_diffs(diffs))
    print("")
    print(summary.describe())
    return 0


def cmd_squash(args) -> int:
    """Squash a version range."""
    project_root = _project_root(args)
    if not _require_initialized(project_root):
        return 1

    result = squash_range(project_root, args.from_version, args.to_version, fold=args.fold)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.summary())

    return 0 if result.success else 1


def cmd_note(args) -> int:
    """Set or clear the note on a snapshot."""
    project_root = _project_root(args)
    if not _require_initialized(project_root):
        return 1

    snapshot = SnapshotStore(project_root).annotate(args.version, args.text)
    if snapshot.note:
        print(f"v{snapshot.version}: {snapshot.note}")
    else:
        print(f"v{snapshot.version}: note cleared")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docvault",
        description="Snapshot history for a folder of text documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit log lines as JSON",
    )

    project = argparse.ArgumentParser(add_help=False)
    project.add_argument("--project", help="Project root (default: current directory)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    init_parser = subparsers.add_parser("init", parents=[project], help="Initialize a project")
    init_parser.add_argument("--docs", help="Tracked folder, relative to the project root")
    init_parser.add_argument("--no-git", action="store_true", help="Do not record git state")

    save_parser = subparsers.add_parser("save", parents=[project], help="Save a snapshot")
    save_parser.add_argument("--note", help="Annotation for the snapshot")

    history_parser = subparsers.add_parser("history", parents=[project], help="List snapshots")
    history_parser.add_argument("--compact", action="store_true", help="Hide versions with minor changes")
    history_parser.add_argument("--json", action="store_true", help="Output as JSON")

    diff_parser = subparsers.add_parser("diff", parents=[project], help="Diff versions")
    diff_parser.add_argument("old", type=parse_version, help="Base version (e.g. v1)")
    diff_parser.add_argument("new", type=parse_version, nargs="?",
                             help="Target version (default: working copy)")
    diff_parser.add_argument("--file", help="Limit the diff to one file")
    diff_parser.add_argument("--json", action="store_true", help="Output summary as JSON")

    squash_parser = subparsers.add_parser("squash", parents=[project], help="Squash a version range")
    squash_parser.add_argument("from_version", type=parse_version, help="First version (kept)")
    squash_parser.add_argument("to_version", type=parse_version, help="Last version")
    squash_parser.add_argument("--fold", action="store_true",
                               help="Carry the last version's file state into the kept version")
    squash_parser.add_argument("--json", action="store_true", help="Output result as JSON")

    note_parser = subparsers.add_parser("note", parents=[project], help="Annotate a snapshot")
    note_parser.add_argument("version", type=parse_version, help="Version to annotate")
    note_parser.add_argument("text", nargs="?", help="Note text (omit to clear)")

    return parser


COMMANDS = {
    "init": cmd_init,
    "save": cmd_save,
    "history": cmd_history,
    "diff": cmd_diff,
    "squash": cmd_squash,
    "note": cmd_note,
}


def main(argv=None) -> int:
    """Main entry point."""
    load_dotenv(find_dotenv(usecwd=True))
    args = build_parser().parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        structured=args.log_json,
    )

    handler = COMMANDS.get(args.command)
    if handler is None:
        print("No command specified. Use --help for usage.", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except DocvaultError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
