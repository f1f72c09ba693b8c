#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
cfg-normalize
- Loads a grammar from a text file (one lhs per line, alternatives with '|')
  or from a JSON description (start, nonterminals, terminals, productions).
- Removes epsilon productions, unit productions, unreachable and
  non-generating symbols, then converts the result to CNF.
- Prints every step unless --no-steps is given; --output-format json prints
  only the final grammar.

Usage:
    cfg-normalize grammar.txt
    cfg-normalize grammar.json --input-format json --output-format json

Exit status is 0 on success and 1 when the file cannot be read, does not
parse, or describes an invalid grammar.
"""

from __future__ import annotations
from pathlib import Path
from typing import List, Optional
import argparse
import json
import logging
import sys

from .grammar import Grammar, InvalidGrammar
from .simplify import simplify_to_cnf
from .text import GrammarSyntaxError, from_file, print_step


def load(path: Path, input_format: str) -> Grammar:
    if input_format == "json":
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise GrammarSyntaxError(f"{path}: {e}") from e
        return Grammar.from_dict(data)
    return from_file(path)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="cfg-normalize",
        description="Convert a context-free grammar to Chomsky Normal Form "
                    "(epsilon, unit, unreachable, non-generating, CNF)")
    ap.add_argument("file", help="Path of the grammar file")
    ap.add_argument("--input-format", choices=("text", "json"), default="text",
                    help="Grammar file format (default: text)")
    ap.add_argument("--output-format", choices=("text", "json"), default="text",
                    help="Format of the resulting grammar (default: text)")
    ap.add_argument("--no-steps", action="store_true", help="Do not print intermediate steps")
    ap.add_argument("--log-level", default="WARNING",
                    choices=("DEBUG", "INFO", "WARNING", "ERROR"),
                    help="Logging level (default: WARNING)")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    show_steps = not args.no_steps and args.output_format == "text"

    try:
        g = load(Path(args.file), args.input_format)
        if show_steps:
            print_step("Original grammar", g)
        *_, cnf = simplify_to_cnf(g, verbose=show_steps)
    except (InvalidGrammar, GrammarSyntaxError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.output_format == "json":
        json.dump(cnf.to_dict(), sys.stdout, indent=2, ensure_ascii=False)
        print()
    elif not show_steps:
        print(cnf)
    return 0


if __name__ == "__main__":
    sys.exit(main())
