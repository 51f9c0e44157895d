"""CLI entrypoints for modelgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .errors import ModelGenError
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write log records to this file.",
    )


def _add_location_options(parser: argparse.ArgumentParser, *, with_output: bool = True) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project root holding .modelgen.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--source-dir",
        help="Directory of model modules to scan (overrides configuration).",
    )
    if with_output:
        parser.add_argument(
            "--output",
            help="Path of the generated registry module (overrides configuration).",
        )
        parser.add_argument(
            "--package",
            help="Import path of the model package, used when the output lives elsewhere.",
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modelgen",
        description="Generate a registry module listing every record type in a model package.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Scan the model package and rewrite the registry module.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_log_file_option(generate_parser, suppress_default=True)
    _add_location_options(generate_parser)
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the registry diff without writing the file.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Exit non-zero when the registry module is out of date.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    _add_log_file_option(check_parser, suppress_default=True)
    _add_location_options(check_parser)

    list_parser = subparsers.add_parser(
        "list",
        help="List type declarations and their structural shape.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_log_file_option(list_parser, suppress_default=True)
    _add_location_options(list_parser, with_output=False)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for modelgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    orchestrator = Orchestrator()

    try:
        if args.command == "generate":
            dry_run = bool(getattr(args, "dry_run", False))
            result = orchestrator.run_generate(
                args.path,
                source_dir=args.source_dir,
                output=args.output,
                package=args.package,
                dry_run=dry_run,
            )
            rel_path = _relativize(result.path)
            if dry_run:
                if result.changed:
                    print(f"Registry changes for {rel_path} (dry-run):")
                    print(result.diff, end="")
                else:
                    print(f"Registry already up to date at {rel_path} (dry-run)")
            elif result.changed:
                print(f"Registry with {len(result.entries)} model(s) written to {rel_path}")
            else:
                print(f"Registry already up to date at {rel_path}")
        elif args.command == "check":
            result = orchestrator.run_check(
                args.path,
                source_dir=args.source_dir,
                output=args.output,
                package=args.package,
            )
            rel_path = _relativize(result.path)
            if result.changed:
                parser.exit(1, f"{rel_path} is out of date; run `modelgen generate`.\n")
            print(f"{rel_path} is up to date")
        elif args.command == "list":
            entries = orchestrator.list_declarations(args.path, source_dir=args.source_dir)
            for entry in entries:
                marker = "*" if entry.selected else " "
                print(f"{marker} {entry.location:<24} {entry.shape.value:<10} {entry.name}")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except ModelGenError as exc:
        parser.exit(1, f"modelgen {args.command} failed: {exc}\nRun with --verbose for more details.\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
