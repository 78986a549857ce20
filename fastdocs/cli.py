"""CLI entrypoints for fastdocs commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import load_config
from .links import LinkChecker, format_report
from .logging import configure_logging
from .navigation import SidebarCompiler
from .preview import PreviewSession
from .scanner import TreeScanner, validate_root


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


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the documentation directory (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fastdocs",
        description="Build navigation, check links and stage live previews for markdown docs.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser(
        "check-links",
        help="Report local links that point at missing documents.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_path_argument(check_parser)
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print broken links as JSON instead of the text report.",
    )

    sidebar_parser = subparsers.add_parser(
        "sidebar",
        help="Print the compiled sidebar navigation as JSON.",
    )
    _add_verbose_option(sidebar_parser, suppress_default=True)
    _add_path_argument(sidebar_parser)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Stage the docs and keep the staging copy in sync with edits.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument(
        "--debounce-ms",
        type=int,
        default=None,
        help="Quiet period before navigation is regenerated (default 300).",
    )
    serve_parser.add_argument(
        "--cooldown-ms",
        type=int,
        default=None,
        help="Delay after a regeneration before another may be scheduled (default 1000).",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for fastdocs commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        root = validate_root(Path(args.path))
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "check-links":
        report = LinkChecker().check(root)
        if getattr(args, "json", False):
            print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(format_report(report))
        if not report.ok:
            parser.exit(1)
    elif args.command == "sidebar":
        config = load_config(root)
        compiler = SidebarCompiler(
            title_max_length=config.sidebar.title_max_length,
            collapse_folders=config.sidebar.collapse_folders,
        )
        print(json.dumps(compiler.compile_dicts(root), indent=2, ensure_ascii=False))
    elif args.command == "serve":
        if next(TreeScanner().iter_markdown_files(root), None) is None:
            parser.exit(1, "No markdown files found in directory\n")
        session = PreviewSession(
            root,
            debounce_ms=args.debounce_ms,
            cooldown_ms=args.cooldown_ms,
        )
        print(session.config.title)
        try:
            staging_root = session.start()
            print(f"Staging directory: {staging_root}")
            print("Watching for changes. Press Ctrl+C to stop.")
            session.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...")
        finally:
            session.close()
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
