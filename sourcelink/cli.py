"""CLI entrypoints for sourcelink commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .config import ConfigError, SourceLinkConfig, load_config
from .linker import SourceLinker
from .logging import configure_logging
from .models import Project, Reflection, SourceFile, SourceReference
from .paths import normalize_path
from .scanner import SourceScanner


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


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of tab-separated lines.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sourcelink",
        description="Resolve source files to their repositories and hosted URLs.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .sourcelink.yml or the directory containing it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Print the hosted URL of each given file.",
    )
    _add_verbose_option(resolve_parser, suppress_default=True)
    _add_json_option(resolve_parser)
    resolve_parser.add_argument("paths", nargs="+", help="Files to resolve.")
    resolve_parser.add_argument(
        "--line",
        type=int,
        default=None,
        help="Anchor every URL to this 1-based line number.",
    )

    scan_parser = subparsers.add_parser(
        "scan",
        help="Resolve every file found under a directory.",
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_json_option(scan_parser)
    scan_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to scan (defaults to current directory).",
    )

    return parser


def _build_linker(config: SourceLinkConfig) -> SourceLinker:
    return SourceLinker(config=config)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for sourcelink commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    linker = _build_linker(config)

    if args.command == "resolve":
        if args.line is not None and args.line < 1:
            parser.exit(1, "--line must be a positive line number\n")
        project = _project_for_paths(args.paths, args.line)
        linker.link(project)
        rows = _rows(project, line=args.line)
        _print_rows(rows, as_json=bool(args.json))
    elif args.command == "scan":
        scanner = SourceScanner(config.scan.exclude_paths)
        try:
            project = scanner.scan(args.path)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        summary = linker.link(project)
        _print_rows(_rows(project), as_json=bool(args.json))
        if not args.json:
            print(
                f"Linked {summary.files_linked} of {summary.files_total} files "
                f"in {len(summary.repositories)} repositories"
            )
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _project_for_paths(paths: List[str], line: Optional[int]) -> Project:
    files = [SourceFile(full_path=normalize_path(Path(path).expanduser().resolve())) for path in paths]
    reflections = []
    if line is not None:
        reflections = [
            Reflection(name=source.full_path, sources=[SourceReference(file=source, line=line)])
            for source in files
        ]
    return Project(files=files, reflections=reflections)


def _rows(project: Project, *, line: Optional[int] = None) -> List[Dict[str, Optional[str]]]:
    if line is None:
        return [{"path": source.full_path, "url": source.url} for source in project.files]
    return [
        {"path": reference.file.full_path, "url": reference.url}
        for reference in project.iter_references()
        if reference.file is not None
    ]


def _print_rows(rows: List[Dict[str, Optional[str]]], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(rows, indent=2))
        return
    for row in rows:
        print(f"{row['path']}\t{row['url'] or '-'}")


if __name__ == "__main__":
    main(sys.argv[1:])
