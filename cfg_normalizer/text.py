"""
Grammar text format.

    S -> a S b | A
    A -> c | ε

- One or more alternatives per line, separated by '|'. '->' or '→' as arrow.
- Symbols are separated by whitespace, so names can be longer than one char.
- 'ε' or 'eps' as a whole alternative is the empty rhs.
- Every lhs, and every symbol starting with an uppercase letter, is a
  non-terminal. Anything else is a terminal.
- The first lhs is the start symbol. Lines starting with '#' are comments.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, List, Optional
import logging
import re

from .grammar import Grammar, format_grammar

log = logging.getLogger(__name__)

EPS_TOKENS = ("ε", "eps")

SYM_RE = r"(?:(?!->|→)[^\s|])+"
ALT_RE = rf"{SYM_RE}(?:[ \t]+{SYM_RE})*"
LINE_RE = re.compile(
    rf"^\s*({SYM_RE})\s*(?:->|→)\s*({ALT_RE})(?:\s*\|\s*{ALT_RE})*\s*$"
)


class GrammarSyntaxError(ValueError):
    pass


def _is_nonterminal_name(name: str) -> bool:
    return name[:1].isupper()


def parse_grammar(text: str) -> Grammar:
    """
    Parse a grammar from text. Each line is checked against LINE_RE first; a
    line that does not match raises GrammarSyntaxError with its number.
    """
    start: Optional[str] = None
    prods: Dict[str, List[List[str]]] = {}
    for i, line in enumerate(text.splitlines(), start=1):
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if not LINE_RE.match(line):
            raise GrammarSyntaxError(f"line {i}: invalid production {line!r}")
        lhs, rest = re.split(r"->|→", line, maxsplit=1)
        lhs = lhs.strip()
        if start is None:
            start = lhs
        rhss = prods.setdefault(lhs, [])
        for part in rest.split("|"):
            symbols = part.split()
            if len(symbols) == 1 and symbols[0] in EPS_TOKENS:
                symbols = []
            elif any(s in EPS_TOKENS for s in symbols):
                raise GrammarSyntaxError(f"line {i}: epsilon must be an alternative on its own")
            rhss.append(symbols)
    if start is None:
        raise GrammarSyntaxError("no productions found")

    nonterminals = set(prods)
    terminals = set()
    for rhss in prods.values():
        for rhs in rhss:
            for s in rhs:
                if s in prods or _is_nonterminal_name(s):
                    nonterminals.add(s)
                else:
                    terminals.add(s)
    log.debug("parsed %d lines of productions, start=%s", len(prods), start)
    return Grammar.build(start, nonterminals, terminals, prods)


def from_file(path: Path) -> Grammar:
    try:
        txt = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise GrammarSyntaxError(f"{path}: {e}") from e
    return parse_grammar(txt)

# ---------- Printing ----------

def print_step(title: str, g: Grammar) -> None:
    print("=" * 80)
    print(title)
    print("-" * 80)
    print(format_grammar(g))
    print()
