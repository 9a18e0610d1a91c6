"""CLI entrypoints for deadlint commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from .errors import DeadlintError
from .logging import configure_logging
from .orchestrator import Orchestrator, ScanOutcome
from .reporting import ReportRenderer, render_json

EXIT_DEAD_CODE_FOUND = 2


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=False,
        help="Only log warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )


def _add_project_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-p",
        "--path",
        dest="project",
        default=None,
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Project root given positionally; must come before --entry/--exclude.",
    )
    parser.add_argument(
        "--entry",
        nargs="+",
        metavar="PATTERN",
        default=None,
        help="Entry point glob patterns (replace the configured ones).",
    )
    parser.add_argument(
        "--exclude",
        nargs="+",
        metavar="PATTERN",
        default=None,
        help="Glob patterns to exclude from the scan (replace the configured ones).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deadlint",
        description="Find unreachable files, unused exports and unused CSS classes.",
    )
    _add_verbose_option(parser)
    _add_output_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan",
        help="Scan the project for dead code.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_project_options(scan_parser)
    scan_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON.",
    )
    scan_parser.add_argument(
        "--fail-on-dead",
        action="store_true",
        help=f"Exit with status {EXIT_DEAD_CODE_FOUND} when dead code is found.",
    )

    prune_parser = subparsers.add_parser(
        "prune",
        help="Delete dead files found in the project.",
    )
    _add_verbose_option(prune_parser, suppress_default=True)
    _add_project_options(prune_parser)
    prune_parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Delete without asking for confirmation.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for deadlint commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file
    )

    if args.project is not None and args.path is not None:
        parser.error("give the project root either positionally or with -p/--path, not both")
    project = args.project or args.path or "."

    orchestrator = Orchestrator()

    try:
        outcome = orchestrator.run_scan(project, entries=args.entry, excludes=args.exclude)
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except DeadlintError as exc:
        parser.exit(1, f"deadlint {args.command} failed: {exc}\nRun with --verbose for more details.\n")

    if args.command == "scan":
        _print_scan(outcome, as_json=bool(args.json))
        if args.fail_on_dead and not outcome.report.is_clean:
            parser.exit(EXIT_DEAD_CODE_FOUND)
    elif args.command == "prune":
        _prune(orchestrator, outcome, force=bool(args.force))
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_scan(outcome: ScanOutcome, *, as_json: bool) -> None:
    if as_json:
        print(render_json(outcome.report, outcome.root))
        return
    print(f"Scanned {outcome.files_scanned} files in {outcome.root}")
    print()
    print(ReportRenderer().render_text(outcome.report, outcome.root))


def _prune(orchestrator: Orchestrator, outcome: ScanOutcome, *, force: bool) -> None:
    if not outcome.report.dead_files:
        print("No dead files to prune!")
        return

    result = orchestrator.run_prune(
        outcome.root,
        confirm=None if force else _confirm_deletion,
        outcome=outcome,
    )
    if result.cancelled:
        print("Prune cancelled.")
        return
    for rel_path in result.deleted:
        print(f"Deleted: {rel_path}")
    for rel_path, reason in result.failed:
        print(f"Failed to delete {rel_path}: {reason}", file=sys.stderr)
    print("Prune complete.")


def _confirm_deletion(files: List[str]) -> bool:
    print(f"Found {len(files)} dead files:")
    for rel_path in files:
        print(rel_path)
    try:
        answer = input(f"Are you sure you want to delete these {len(files)} files? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


if __name__ == "__main__":
    main(sys.argv[1:])
