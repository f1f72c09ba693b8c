from typing import Dict, Set, Tuple

import pytest

from cfg_normalizer import Grammar, Terminal


def language_upto(g: Grammar, n: int) -> Set[Tuple[str, ...]]:
    """All terminal strings of length <= n derivable from the start symbol."""
    L: Dict = {A: set() for A in g.nonterminals}
    changed = True
    while changed:
        changed = False
        for A, rhs in g.rules():
            words = {()}
            for s in rhs:
                if isinstance(s, Terminal):
                    parts = {(s.name,)}
                else:
                    parts = L.get(s, set())
                words = {w + p for w in words for p in parts if len(w) + len(p) <= n}
                if not words:
                    break
            if not words <= L[A]:
                L[A] |= words
                changed = True
    return L.get(g.start, set())


@pytest.fixture
def language():
    return language_upto
