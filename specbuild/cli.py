"""CLI entrypoints for specbuild commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .logging import configure_logging
from .orchestrator import BuildError, Orchestrator


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
        help="Project root holding .specbuild.yml (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="specbuild",
        description="Compile a tree of TOML and Markdown specs into JSON artifacts.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors on the console.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a DEBUG-level log to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Scan the spec tree and rebuild every output artifact.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "--spec-dir",
        default=None,
        help="Spec directory relative to the project root (overrides config).",
    )
    build_parser.add_argument(
        "--output-dir",
        default=None,
        help="Output directory relative to the project root (overrides config).",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve the spec tree over HTTP for preview.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_path_argument(serve_parser)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for specbuild commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), quiet=args.quiet, log_file=args.log_file)

    if args.command == "build":
        orchestrator = Orchestrator()
        try:
            result = orchestrator.run_build(
                args.path,
                spec_dir=args.spec_dir,
                output_dir=args.output_dir,
            )
        except BuildError as exc:
            parser.exit(1, f"specbuild build failed: {exc}\n")
        for line in result.summary_lines():
            print(line)
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(args.path, host=args.host, port=args.port)
        except BuildError as exc:
            parser.exit(1, f"specbuild serve failed: {exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
