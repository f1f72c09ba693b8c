"""
Normalization pipeline: turns any context-free grammar into Chomsky Normal Form.

Stages, in this order:
  1. remove_epsilon        - epsilon productions (S -> ε survives iff S =>* ε)
  2. remove_unit           - A -> B productions, via unit closure
  3. remove_unreachable    - symbols not reachable from the start symbol
  4. remove_nongenerating  - non-terminals that derive no terminal string
  5. to_cnf                - terminal isolation (T_a -> a) and binarization (X1, X2, ...)

Every stage returns a new Grammar. Rules are visited in Grammar.rules() order
(lhs sorted by name, then insertion order), so fresh names are reproducible.
"""

from __future__ import annotations
from collections import deque
from typing import Dict, Set, List, Tuple, Mapping, Optional, Union
import logging

from .fresh import FreshNames
from .grammar import Grammar, Nonterminal, Terminal, Symbol, Rhs, is_unit
from .text import print_step

log = logging.getLogger(__name__)


def _empty_like(g: Grammar) -> Grammar:
    return Grammar(g.start, set(g.nonterminals), set(g.terminals))


def _names(symbols) -> List[str]:
    return sorted(s.name for s in symbols)

# ---------- 1) Epsilon productions ----------

def nullable_symbols(g: Grammar) -> Set[Nonterminal]:
    """
    A is nullable if A =>* ε:
      - A -> ε, or
      - A -> X1 ... Xk with every Xi a nullable non-terminal.
    """
    nulls: Set[Nonterminal] = set()
    changed = True
    while changed:
        changed = False
        for A, rhss in g.prods.items():
            if A in nulls:
                continue
            if any(all(X in nulls for X in rhs) for rhs in rhss):
                nulls.add(A)
                changed = True
    return nulls


def nullable_variants(rhs: Rhs, nulls: Set[Nonterminal]) -> List[Rhs]:
    """Every way to keep or drop each nullable occurrence in rhs, without repeats."""
    variants: List[Rhs] = [()]
    for X in rhs:
        step = []
        for v in variants:
            step.append(v + (X,))
            if X in nulls:
                step.append(v)
        variants = step
    return list(dict.fromkeys(variants))


def remove_epsilon(g: Grammar, verbose: bool = False) -> Grammar:
    """
    Replace each A -> X1 ... Xk by all of its nullable variants. The empty
    variant is only kept for the start symbol, which can only produce one when
    the start symbol was nullable in g.
    """
    nulls = nullable_symbols(g)
    log.debug("nullable symbols: %s", _names(nulls))

    g2 = _empty_like(g)
    for A in g.prods:
        g2.prods[A] = []
    for A, rhs in g.rules():
        for variant in nullable_variants(rhs, nulls):
            if variant or A == g.start:
                g2.add_prod(A, variant)

    if verbose:
        print(f"Nullable symbols: {_names(nulls)}")
        print_step("Grammar without epsilon productions", g2)
    return g2

# ---------- 2) Unit productions ----------

def unit_closure(g: Grammar, A: Nonterminal) -> List[Nonterminal]:
    """Non-terminals B with A =>* B through unit rules, A first, in discovery order."""
    closure = [A]
    seen = {A}
    work = deque([A])
    while work:
        B = work.popleft()
        for rhs in g.prods.get(B, ()):
            if is_unit(rhs) and rhs[0] not in seen:
                seen.add(rhs[0])
                closure.append(rhs[0])
                work.append(rhs[0])
    return closure


def remove_unit(g: Grammar, verbose: bool = False) -> Grammar:
    """
    Drop A -> B. For every B in the unit closure of A, copy the non-unit rules
    of B into A. An empty rhs is only copied into the start symbol.
    """
    g2 = _empty_like(g)
    for A in sorted(g.prods, key=lambda s: s.name):
        g2.prods[A] = []
        closure = unit_closure(g, A)
        if len(closure) > 1:
            log.debug("unit closure of %s: %s", A, [str(B) for B in closure])
        for B in closure:
            for rhs in g.prods.get(B, ()):
                if is_unit(rhs):
                    continue
                if not rhs and A != g.start:
                    continue
                g2.add_prod(A, rhs)

    if verbose:
        print_step("Grammar without unit productions", g2)
    return g2

# ---------- 3) Unreachable symbols ----------

def reachable_symbols(g: Grammar) -> Set[Symbol]:
    """Symbols reachable from the start symbol. Terminals are collected, never expanded."""
    reach: Set[Symbol] = {g.start}
    q = deque([g.start])
    while q:
        A = q.popleft()
        for rhs in g.prods.get(A, ()):
            for s in rhs:
                if s not in reach:
                    reach.add(s)
                    if isinstance(s, Nonterminal):
                        q.append(s)
    return reach


def remove_unreachable(g: Grammar, verbose: bool = False) -> Grammar:
    reach = reachable_symbols(g)
    g2 = Grammar(g.start,
                 {A for A in g.nonterminals if A in reach},
                 {a for a in g.terminals if a in reach})
    for A, rhss in g.prods.items():
        if A in reach:
            g2.prods[A] = list(rhss)
    dropped = (g.nonterminals | g.terminals) - reach
    log.debug("unreachable symbols dropped: %s", _names(dropped))

    if verbose:
        print_step(f"After removing unreachable symbols (reachable={_names(reach)})", g2)
    return g2

# ---------- 4) Non-generating symbols ----------

def generating_nonterminals(g: Grammar) -> Set[Nonterminal]:
    """A is generating if A =>* w with w made only of terminals (ε included)."""
    gen: Set[Nonterminal] = set()
    changed = True
    while changed:
        changed = False
        for A, rhss in g.prods.items():
            if A in gen:
                continue
            for rhs in rhss:
                if all(isinstance(s, Terminal) or s in gen for s in rhs):
                    gen.add(A)
                    changed = True
                    break
    return gen


def remove_nongenerating(g: Grammar, verbose: bool = False) -> Grammar:
    """
    Keep generating non-terminals and only the rules built from terminals and
    generating non-terminals. Terminals are never removed here. The start
    symbol stays declared even if it generates nothing.
    """
    gen = generating_nonterminals(g)
    g2 = Grammar(g.start, {A for A in g.nonterminals if A in gen}, set(g.terminals))
    for A, rhss in g.prods.items():
        if A not in gen:
            continue
        g2.prods[A] = [rhs for rhs in rhss
                       if all(isinstance(s, Terminal) or s in gen for s in rhs)]
    log.debug("non-generating symbols dropped: %s", _names(g.nonterminals - gen - {g.start}))
    if g.start not in gen:
        log.warning("start symbol %s generates no terminal string; the language is empty", g.start)

    if verbose:
        print_step(f"After removing non-generating symbols (generating={_names(gen)})", g2)
    return g2

# ---------- 5) Chomsky Normal Form ----------

def isolate_terminals(g: Grammar, fresh: FreshNames) -> Grammar:
    """In every rhs of length >= 2 replace terminal a by T_a and add T_a -> a."""
    proxies: Dict[Terminal, Nonterminal] = {}

    def proxy(a: Terminal) -> Nonterminal:
        if a not in proxies:
            proxies[a] = Nonterminal(fresh.named("T", a.name))
        return proxies[a]

    g2 = _empty_like(g)
    for A, rhs in g.rules():
        if len(rhs) >= 2:
            rhs = tuple(proxy(s) if isinstance(s, Terminal) else s for s in rhs)
        g2.add_prod(A, rhs)
    for a, T in proxies.items():
        g2.add_prod(T, (a,))
    return g2


def binarize(g: Grammar, fresh: FreshNames) -> Grammar:
    """
    A -> s1 s2 ... sn (n > 2) becomes
    A -> s1 X1, X1 -> s2 X2, ..., X(n-2) -> s(n-1) sn.
    """
    g2 = _empty_like(g)
    for A, rhs in list(g.rules()):
        if len(rhs) <= 2:
            g2.add_prod(A, rhs)
            continue
        lhs = A
        for s in rhs[:-2]:
            X = Nonterminal(fresh.new("X"))
            g2.add_prod(lhs, (s, X))
            lhs = X
        g2.add_prod(lhs, rhs[-2:])
    return g2


def to_cnf(g: Grammar, fresh: Optional[FreshNames] = None, verbose: bool = False) -> Grammar:
    """
    Assumes g is already free of epsilon (except at the start), unit and useless
    rules. The allocator is shared with the rest of the run when given.
    """
    if fresh is None:
        fresh = FreshNames(g.symbol_names())
    g2 = binarize(isolate_terminals(g, fresh), fresh)
    log.debug("CNF: %d non-terminals after binarization", len(g2.nonterminals))

    if verbose:
        print_step("Grammar in CNF", g2)
    return g2


def is_cnf(g: Grammar) -> bool:
    for A, rhs in g.rules():
        if len(rhs) == 0:
            ok = A == g.start
        elif len(rhs) == 1:
            ok = isinstance(rhs[0], Terminal)
        elif len(rhs) == 2:
            ok = all(isinstance(s, Nonterminal) for s in rhs)
        else:
            ok = False
        if not ok:
            return False
    return True

# ---------- Full pipeline ----------

def simplify_to_cnf(g: Grammar, verbose: bool = False) -> Tuple[Grammar, Grammar, Grammar, Grammar, Grammar]:
    """Validate g, then run the five stages. Returns every intermediate grammar."""
    g.validate()
    fresh = FreshNames(g.symbol_names())

    log.info("removing epsilon productions")
    g1 = remove_epsilon(g, verbose=verbose)
    log.info("removing unit productions")
    g2 = remove_unit(g1, verbose=verbose)
    log.info("removing unreachable symbols")
    g3 = remove_unreachable(g2, verbose=verbose)
    log.info("removing non-generating symbols")
    g4 = remove_nongenerating(g3, verbose=verbose)
    log.info("converting to CNF")
    g5 = to_cnf(g4, fresh, verbose=verbose)
    return g1, g2, g3, g4, g5


def normalize(grammar: Union[Grammar, Mapping]) -> Grammar:
    """CNF grammar equivalent to ``grammar`` (a Grammar or a plain-name description)."""
    if not isinstance(grammar, Grammar):
        grammar = Grammar.from_dict(grammar)
    return simplify_to_cnf(grammar)[-1]
