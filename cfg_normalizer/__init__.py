"""Context-free grammar normalization to Chomsky Normal Form."""

from .fresh import FreshNames
from .grammar import (
    EPS, Grammar, InvalidGrammar, Nonterminal, Symbol, Terminal, format_grammar,
)
from .simplify import (
    binarize, generating_nonterminals, is_cnf, isolate_terminals, normalize,
    nullable_symbols, reachable_symbols, remove_epsilon, remove_nongenerating,
    remove_unit, remove_unreachable, simplify_to_cnf, to_cnf, unit_closure,
)
from .text import GrammarSyntaxError, from_file, parse_grammar

__version__ = "0.1.0"
