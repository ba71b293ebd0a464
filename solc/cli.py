"""
Command-line wrapper.

Usage::

    python -m solc --version
    python -m solc --standard-json input.json --base-path contracts
    cat input.json | python -m solc --standard-json --include-path node_modules

Compiler diagnostics are part of the JSON written to stdout and do not change
the exit status. Binding failures (library not found, invalid input) print a
message to stderr and exit with status 1.
"""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence

from ._logging import scoped_logger
from .compiler import compile_with_callback, license, version
from .exceptions import SolcError
from .readers import FileReader

__all__ = ["build_parser", "main"]

log = scoped_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solc-py",
        description="Solidity compiler through the libsolc Standard JSON interface.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--version", action="store_true", help="Print the compiler version.")
    mode.add_argument("--license", action="store_true", help="Print the compiler license.")
    mode.add_argument(
        "--standard-json",
        nargs="?",
        const="-",
        metavar="FILE",
        help="Compile a Standard JSON input from FILE (stdin if omitted or '-').",
    )
    parser.add_argument(
        "--base-path",
        default=None,
        help="Directory imports are resolved against (default: current directory).",
    )
    parser.add_argument(
        "--include-path",
        action="append",
        default=[],
        help="Additional directory to search for imports (repeatable).",
    )
    parser.add_argument(
        "--allow-paths",
        default=None,
        help="Comma-separated directories imports may also be read from.",
    )
    parser.add_argument("--pretty", action="store_true", help="Indent the JSON output.")
    return parser


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, encoding="utf-8") as f:
        return f.read()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.version:
            print(version())
            return 0
        if args.license:
            print(license())
            return 0

        input_json = _read_input(args.standard_json)
        allowed = args.allow_paths.split(",") if args.allow_paths else None
        reader = FileReader(
            base_path=args.base_path,
            include_paths=args.include_path,
            allowed_paths=allowed,
        )
        output = compile_with_callback(input_json, reader)
    except (SolcError, OSError, UnicodeDecodeError) as e:
        log.debug("Command failed", exc_info=True)
        print(f"solc-py: {e}", file=sys.stderr)
        return 1

    if args.pretty:
        output = json.dumps(json.loads(output), indent=2)
    print(output)
    return 0
