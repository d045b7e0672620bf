"""Folio CLI — folio produce / folio paths / folio props.

Entry point for the ``folio`` command-line interface.
"""

from __future__ import annotations

import argparse
import json
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the folio CLI."""
    parser = argparse.ArgumentParser(
        prog="folio",
        description="Turn content records into page snapshots for static-site builds.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # folio produce
    produce_parser = subparsers.add_parser(
        "produce",
        help="Build a snapshot from a records file",
    )
    produce_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    produce_parser.add_argument(
        "--records", required=True, help="JSON or YAML file of content records",
    )
    produce_parser.add_argument(
        "--watch", action="store_true", help="Rebuild when the records file changes",
    )
    produce_parser.add_argument(
        "--live-update",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable the push channel (default: on when FOLIO_ENV=development)",
    )
    produce_parser.add_argument("--port", type=int, default=None, help="Push-channel port")
    produce_parser.add_argument("--cache-file", default=None, help="Snapshot file location")

    # folio paths
    paths_parser = subparsers.add_parser(
        "paths",
        help="List page paths of the current snapshot",
    )
    paths_parser.add_argument("root", nargs="?", default=".", help="Project root directory")

    # folio props
    props_parser = subparsers.add_parser(
        "props",
        help="Print merged props for one page",
    )
    props_parser.add_argument("path", help="Page path, e.g. /posts/hello-world")
    props_parser.add_argument("root", nargs="?", default=".", help="Project root directory")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from folio import __version__

    return __version__


def _produce_overrides(args: argparse.Namespace) -> dict[str, object]:
    """Only pass flags the user actually set, so folio.yaml still applies."""
    overrides: dict[str, object] = {}
    if args.live_update is not None:
        overrides["live_update"] = args.live_update
    if args.port is not None:
        overrides["live_update_ws_port"] = args.port
    if args.cache_file is not None:
        overrides["cache_file_path"] = args.cache_file
    return overrides


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from folio._errors import FolioError
    from folio.app import paths, produce, props

    try:
        if args.command == "produce":
            produce(
                root=args.root,
                records=args.records,
                watch=args.watch,
                **_produce_overrides(args),
            )
        elif args.command == "paths":
            for page_path in paths(root=args.root):
                print(page_path)
        elif args.command == "props":
            result = props(args.path, root=args.root)
            if result is None:
                print(f"no page at {args.path!r}", file=sys.stderr)
                sys.exit(1)
            print(json.dumps(result, indent=2, default=str))
    except FolioError as exc:
        print(f"folio: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
