"""CLI entrypoint for the spin-info command."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .app_source import select_source
from .config import load_config
from .errors import InfoError, format_error_chain
from .info import InfoCommand
from .logging import configure_logging


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Show debug logging on stderr.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug logging to this file.",
    )


def _add_info_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else None
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-f",
        "--from",
        dest="app_source",
        metavar="APPLICATION",
        default=default,
        help="Application to inspect: a manifest file, a directory or a registry reference.",
    )
    source.add_argument(
        "--from-file",
        metavar="PATH",
        default=default,
        help="Inspect a local application manifest or directory.",
    )
    source.add_argument(
        "--from-registry",
        metavar="REFERENCE",
        default=default,
        help="Inspect an application published to an OCI registry.",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=default,
        help="Cache directory for downloaded components and assets.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=default,
        help="Path to a .spin-info.yml file or the directory holding one.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spin-info",
        description="Show metadata, triggers, variables and component footprint of a Spin application.",
    )
    _add_logging_options(parser)
    # `info` is the default command, so its options are accepted without it too.
    _add_info_options(parser)
    subparsers = parser.add_subparsers(dest="command")

    info_parser = subparsers.add_parser(
        "info",
        help="Show information about an application (default).",
    )
    _add_logging_options(info_parser, suppress_default=True)
    _add_info_options(info_parser, suppress_default=True)
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for spin-info."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    except OSError as exc:
        parser.exit(1, f"Error: cannot open log file {args.log_file}: {exc.strerror or exc}\n")

    try:
        config = load_config(args.config).with_cache_dir(args.cache_dir)
        source = select_source(
            args.app_source,
            from_file=args.from_file,
            from_registry=args.from_registry,
        )
        asyncio.run(InfoCommand(source, config=config).run())
    except InfoError as exc:
        parser.exit(1, f"Error: {format_error_chain(exc)}\n")
    except OSError as exc:
        parser.exit(1, f"Error: {exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"Error: {exc}\nRun with --verbose for more details.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
