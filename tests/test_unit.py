from cfg_normalizer import Grammar, Nonterminal, remove_epsilon, remove_unit, unit_closure
from cfg_normalizer.grammar import is_unit

S, A, B, C = (Nonterminal(n) for n in "SABC")


def test_unit_chain_is_closure_copied():
    g = Grammar.build("A", ["A", "B", "C"], ["a"], {
        "A": [["B"]],
        "B": [["C"]],
        "C": [["a"]],
    })
    assert str(remove_unit(g)) == "A -> a\nB -> a\nC -> a"


def test_closure_contains_self_and_follows_chain():
    g = Grammar.build("A", ["A", "B", "C"], ["a"], {
        "A": [["B"], ["a"]],
        "B": [["C"]],
        "C": [["a"]],
    })
    assert unit_closure(g, A) == [A, B, C]
    assert unit_closure(g, C) == [C]


def test_unit_cycle_terminates():
    g = Grammar.build("S", ["S", "A"], ["a", "b"], {
        "S": [["A"], ["a"]],
        "A": [["S"], ["b"]],
    })
    assert unit_closure(g, S) == [S, A]
    assert str(remove_unit(g)) == "A -> a | b\nS -> a | b"


def test_non_unit_rules_of_length_one_are_kept():
    g = Grammar.build("S", ["S", "A"], ["a"], {
        "S": [["A", "A"], ["a"]],
        "A": [["a"]],
    })
    assert str(remove_unit(g)) == str(g)


def test_start_epsilon_is_not_copied_into_other_symbols():
    g = Grammar.build("S", ["S", "A"], ["a"], {
        "S": [["a", "A"], []],
        "A": [["S"]],
    })
    g2 = remove_unit(remove_epsilon(g))
    assert () in g2.prods[S]
    assert () not in g2.prods[A]


def test_no_unit_rules_remain_and_language_is_preserved(language):
    g = Grammar.build("S", ["S", "A", "B", "C"], ["a", "b", "c"], {
        "S": [["A"], ["B", "c"]],
        "A": [["B"], ["a", "A"]],
        "B": [["C"], ["b"]],
        "C": [["A"], ["c", "c"]],
    })
    g2 = remove_unit(g)
    assert not any(is_unit(rhs) for _, rhs in g2.rules())
    assert language(g2, 6) == language(g, 6)
