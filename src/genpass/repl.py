"""Console front end for genpass.

With a pattern argument the command prints generated strings; without one it
starts a line-oriented REPL that shows the lowered source and one generated
string per line typed.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, TextIO

from .ast import ast_to_json, ast_to_yaml, getASTfromPattern
from .compiler import compile_and_run, format_syntax_fault
from .errors import SyntaxFault
from .random_source import default_source

PROMPT = ">>> "

_TRUTHY = {"1", "true", "yes", "on"}


def debug_from_env() -> bool:
    """Return True when GENPASS_DEBUG asks for debug logging."""
    return os.getenv("GENPASS_DEBUG", "").strip().lower() in _TRUTHY


def run_repl(
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    strict: bool = False,
) -> int:
    """Read patterns line by line until EOF and print each compiled result."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    interactive = stdin.isatty()
    while True:
        stdout.write(PROMPT)
        stdout.flush()
        try:
            line = stdin.readline()
        except KeyboardInterrupt:
            stdout.write("\n")
            return 0
        if not line:
            if interactive:
                stdout.write("\n")
            return 0
        text, succeeded = compile_and_run(
            line.rstrip("\r\n"), prompt_width=len(PROMPT), strict=strict
        )
        print(text, file=stdout if succeeded else stderr)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genpass",
        description="Generate random strings from compact patterns.",
    )
    parser.add_argument(
        "pattern", nargs="?",
        help="Pattern to generate from. Starts an interactive session when omitted.",
    )
    parser.add_argument(
        "-n", "--count", type=int, default=1,
        help="Number of strings to generate (default: 1).",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--source", action="store_true",
        help="Print the lowered source instead of generated strings.",
    )
    output.add_argument(
        "--ast", choices=("json", "yaml"),
        help="Print the parsed syntax tree in the given format.",
    )
    parser.add_argument(
        "--strict", action="store_true",
        help="Reject characters that have no meaning in the pattern language.",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable debug logging (also enabled by GENPASS_DEBUG=1).",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug or debug_from_env() else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.pattern is None:
        return run_repl(strict=args.strict)

    if args.count < 1:
        print("genpass: --count must be at least 1", file=sys.stderr)
        return 2

    try:
        root = getASTfromPattern(args.pattern, strict=args.strict, origin="<argv>")
    except SyntaxFault as e:
        print(args.pattern, file=sys.stderr)
        print(format_syntax_fault(e), file=sys.stderr)
        return 1

    if args.ast == "json":
        print(ast_to_json(root))
    elif args.ast == "yaml":
        print(ast_to_yaml(root), end="")
    elif args.source:
        print(root.lower())
    else:
        rng = default_source()
        for _ in range(args.count):
            print(root.generate(rng))
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
