"""surqlfn command-line interface."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from surqlfn.codegen.alias import Alias
from surqlfn.codegen.python import render_module
from surqlfn.dsl import serializer
from surqlfn.loader.files import load_sources, resolve_sources
from surqlfn.telemetry.logger import get_logger, set_level
from surqlfn.utils.config import Settings, load_settings

_LOGGER = get_logger("surqlfn.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="surqlfn", description="Extract SurrealQL function signatures"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional path to a settings YAML file (defaults to configs/default.yaml).",
    )
    parser.add_argument(
        "--log-level",
        help="Log level for the surqlfn logger (e.g. DEBUG, INFO).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_parse_parser(subparsers)
    _add_generate_parser(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        if args.log_level:
            set_level(args.log_level)
        settings = load_settings(args.config)
        if args.command == "parse":
            return _cmd_parse(args, settings)
        if args.command == "generate":
            return _cmd_generate(args, settings)
    except Exception as exc:
        _LOGGER.debug("command failed", exc_info=True)
        print(f"[surqlfn] error: {exc}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


# ---------------------------------------------------------------------------
# Sub-command wiring


def _add_source_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "templates",
        nargs="+",
        metavar="PATH",
        help="File or directory path; $NAME placeholders are read from the environment.",
    )
    parser.add_argument("--suffix", help="File suffix to collect from directories.")
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Parse files one after another instead of in parallel.",
    )


def _add_parse_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("parse", help="Print the function signatures found")
    _add_source_arguments(parser)
    parser.add_argument("--json", action="store_true", help="Emit canonical JSON")


def _add_generate_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("generate", help="Generate Python bindings")
    _add_source_arguments(parser)
    parser.add_argument("--alias", help="Wrapper naming rule: is, prefix_$ or $_suffix")
    parser.add_argument("--output", type=Path, help="Write the module here instead of stdout")


# ---------------------------------------------------------------------------
# Sub-command implementations


def _load(args: argparse.Namespace, settings: Settings):
    settings = settings.with_overrides(
        suffix=args.suffix, parallel=False if args.sequential else None
    )
    paths = resolve_sources(args.templates, suffix=settings.suffix)
    if not paths:
        raise FileNotFoundError(f"no {settings.suffix} files found")
    return load_sources(paths, parallel=settings.parallel, config=settings.concurrency)


def _cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    sources = _load(args, settings)
    statements = [statement for source in sources for statement in source.statements]
    if args.json:
        print(serializer.to_json(statements))
        return 0
    for statement in statements:
        print(statement.signature())
    return 0


def _cmd_generate(args: argparse.Namespace, settings: Settings) -> int:
    sources = _load(args, settings)
    alias = Alias.parse(args.alias or settings.alias)
    statements = [statement for source in sources for statement in source.statements]
    module = render_module(
        statements,
        [source.text for source in sources],
        alias,
        origin=", ".join(source.path.name for source in sources),
    )
    if args.output is None:
        sys.stdout.write(module)
        return 0
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(module, encoding="utf-8")
    _LOGGER.info("wrote %s", args.output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
