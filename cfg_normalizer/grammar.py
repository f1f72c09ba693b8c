"""
Grammar data model.

- Symbols are a tagged variant: Terminal(name) | Nonterminal(name).
- A right-hand side is a tuple of symbols; the empty tuple is epsilon.
- Grammar keeps, for every non-terminal, an insertion-ordered list of distinct
  right-hand sides.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Set, List, Tuple, Iterable, Iterator, Mapping, Union
import collections.abc
import logging

log = logging.getLogger(__name__)

EPS = "ε"


@dataclass(frozen=True)
class Terminal:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Nonterminal:
    name: str

    def __str__(self) -> str:
        return self.name


Symbol = Union[Terminal, Nonterminal]
Rhs = Tuple[Symbol, ...]


class InvalidGrammar(ValueError):
    """The grammar description violates the symbol/production invariants."""


def is_unit(rhs: Rhs) -> bool:
    return len(rhs) == 1 and isinstance(rhs[0], Nonterminal)


def _name_list(value, what: str) -> List[str]:
    """value as a list of names; a bare string is not split into characters."""
    if isinstance(value, str) or not isinstance(value, collections.abc.Iterable):
        raise InvalidGrammar(f"{what} must be a list of names, got {value!r}")
    names = list(value)
    for name in names:
        if not isinstance(name, str):
            raise InvalidGrammar(f"{what}: {name!r} is not a name")
    return names


def format_rhs(rhs: Rhs) -> str:
    if not rhs:
        return EPS
    return " ".join(str(s) for s in rhs)


@dataclass
class Grammar:
    start: Nonterminal
    nonterminals: Set[Nonterminal] = field(default_factory=set)
    terminals: Set[Terminal] = field(default_factory=set)
    prods: Dict[Nonterminal, List[Rhs]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.nonterminals = set(self.nonterminals)
        self.terminals = set(self.terminals)
        self.nonterminals.add(self.start)

    def add_prod(self, lhs: Nonterminal, rhs: Iterable[Symbol]) -> None:
        rhs = tuple(rhs)
        self.nonterminals.add(lhs)
        rhss = self.prods.setdefault(lhs, [])
        if rhs not in rhss:
            rhss.append(rhs)

    def rules(self) -> Iterator[Tuple[Nonterminal, Rhs]]:
        """(lhs, rhs) pairs: lhs sorted by name, then rule insertion order."""
        for A in sorted(self.prods, key=lambda s: s.name):
            for rhs in self.prods[A]:
                yield A, rhs

    def clone(self) -> "Grammar":
        g = Grammar(self.start, set(self.nonterminals), set(self.terminals))
        for A, rhss in self.prods.items():
            g.prods[A] = list(rhss)
        return g

    def symbol_names(self) -> Set[str]:
        return {s.name for s in self.nonterminals} | {s.name for s in self.terminals}

    def validate(self) -> None:
        """Raise InvalidGrammar unless every invariant of the model holds."""
        if not isinstance(self.start, Nonterminal) or self.start not in self.nonterminals:
            raise InvalidGrammar(f"start symbol {self.start} is not a non-terminal")
        clash = {s.name for s in self.nonterminals} & {s.name for s in self.terminals}
        if clash:
            raise InvalidGrammar(f"symbols declared both terminal and non-terminal: {sorted(clash)}")
        for A, rhss in self.prods.items():
            if A not in self.nonterminals:
                raise InvalidGrammar(f"production for unknown non-terminal {A}")
            for rhs in rhss:
                for s in rhs:
                    if s not in self.nonterminals and s not in self.terminals:
                        raise InvalidGrammar(f"{A} -> {format_rhs(rhs)}: unknown symbol {s}")

    # ---------- Construction from plain names ----------

    @classmethod
    def build(cls, start: str, nonterminals: Iterable[str], terminals: Iterable[str],
              productions: Mapping[str, Iterable[Iterable[str]]]) -> "Grammar":
        """
        Build a validated grammar from names. Each RHS symbol is resolved against
        the declared sets; a name found in neither raises InvalidGrammar.
        """
        if not isinstance(start, str):
            raise InvalidGrammar(f"start symbol must be a name, got {start!r}")
        nt_names = set(_name_list(nonterminals, "nonterminals"))
        t_names = set(_name_list(terminals, "terminals"))
        if not isinstance(productions, collections.abc.Mapping):
            raise InvalidGrammar("productions must map each non-terminal to its right-hand sides")
        clash = nt_names & t_names
        if clash:
            raise InvalidGrammar(f"symbols declared both terminal and non-terminal: {sorted(clash)}")
        if start not in nt_names:
            raise InvalidGrammar(f"start symbol {start!r} is not a declared non-terminal")

        def resolve(name: str) -> Symbol:
            if name in nt_names:
                return Nonterminal(name)
            if name in t_names:
                return Terminal(name)
            raise InvalidGrammar(f"unknown symbol {name!r}")

        g = cls(Nonterminal(start),
                {Nonterminal(n) for n in nt_names},
                {Terminal(t) for t in t_names})
        for lhs, rhss in productions.items():
            if lhs not in nt_names:
                raise InvalidGrammar(f"production for undeclared non-terminal {lhs!r}")
            A = Nonterminal(lhs)
            g.prods.setdefault(A, [])
            if isinstance(rhss, str) or not isinstance(rhss, collections.abc.Iterable):
                raise InvalidGrammar(f"right-hand sides of {lhs!r} must be a list")
            for rhs in rhss:
                names = _name_list(rhs, f"right-hand side of {lhs!r}")
                g.add_prod(A, (resolve(s) for s in names))
        log.debug("built grammar: %d non-terminals, %d terminals, start=%s",
                  len(g.nonterminals), len(g.terminals), start)
        return g

    @classmethod
    def from_dict(cls, data: Mapping) -> "Grammar":
        if not isinstance(data, collections.abc.Mapping):
            raise InvalidGrammar(f"grammar description must be a mapping, got {type(data).__name__}")
        try:
            return cls.build(data["start"], data["nonterminals"], data["terminals"],
                             data.get("productions", {}))
        except KeyError as e:
            raise InvalidGrammar(f"grammar description is missing {e.args[0]!r}") from e

    def to_dict(self) -> dict:
        return {
            "start": self.start.name,
            "nonterminals": sorted(s.name for s in self.nonterminals),
            "terminals": sorted(s.name for s in self.terminals),
            "productions": {
                A.name: [[s.name for s in rhs] for rhs in self.prods[A]]
                for A in sorted(self.prods, key=lambda s: s.name)
            },
        }

    def __str__(self) -> str:
        return format_grammar(self)


def format_grammar(g: Grammar) -> str:
    lines = []
    for A in sorted(g.prods, key=lambda s: s.name):
        if not g.prods[A]:
            continue
        rhss = sorted(format_rhs(rhs) for rhs in g.prods[A])
        lines.append(f"{A} -> " + " | ".join(rhss))
    return "\n".join(lines)
