"""CLI entrypoints for plgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .codewriter import sql_identifier
from .config import ConfigError, load_config
from .errors import PlgenError
from .golang.formatter import FORMATTERS
from .logging import configure_logging
from .pipeline import Pipeline
from .typemap import sql_type


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
        help="Path to the Go package (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plgen",
        description="Build PostgreSQL extensions from exported Go functions.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Generate, compile and package the extension.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    _add_path_argument(build_parser)
    build_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory receiving the extension files (defaults to <path>/build).",
    )
    build_parser.add_argument(
        "--build-dir",
        type=Path,
        default=None,
        help="Directory for the generated Go module (defaults to a fresh temporary directory).",
    )
    build_parser.add_argument(
        "--no-compile",
        action="store_true",
        help="Generate sources and packaging files without running go build.",
    )
    build_parser.add_argument(
        "--formatter",
        choices=FORMATTERS,
        default=None,
        help="How generated Go source is formatted and verified.",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="List the functions the extension would expose.",
    )
    _add_verbose_option(inspect_parser, suppress_default=True)
    _add_path_argument(inspect_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for plgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(Path(args.path))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "build":
        if args.output is not None:
            config.output_dir = args.output.resolve()
        if args.no_compile:
            config.compile = False
        if args.formatter:
            config.formatter = args.formatter
        try:
            outcome = Pipeline(config).build(args.build_dir)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except PlgenError as exc:
            parser.exit(1, f"plgen build failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Generated module in {outcome.build_dir}")
        print(f"Extension files written to {_relativize(outcome.output_dir)}")
    elif args.command == "inspect":
        try:
            writer = Pipeline(config).inspect()
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except PlgenError as exc:
            parser.exit(1, f"plgen inspect failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Extension {writer.package_name}")
        doc = writer.doc.strip()
        if doc:
            print(doc)
        for function in writer.descriptors:
            arguments = ", ".join(
                f"{sql_identifier(param.name)} {sql_type(param.go_type)}" for param in function.parameters
            )
            returns = sql_type(function.value_type) if function.value_type else "void"
            print(f"  {function.name.lower()}({arguments}) -> {returns}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
