import pytest

from cfg_normalizer import (
    Grammar, InvalidGrammar, Nonterminal, Terminal, is_cnf, normalize, simplify_to_cnf,
)

VARIANT_24 = {
    "start": "S",
    "nonterminals": ["S", "A", "B", "C"],
    "terminals": ["a", "d"],
    "productions": {
        "S": [["d", "B"], ["A"]],
        "A": [["d"], ["d", "S"], ["a", "B", "d", "A", "B"]],
        "B": [["a"], ["d", "A"], ["A"], []],
        "C": [["A", "a"]],
    },
}

NULLABLE_START = {
    "start": "S",
    "nonterminals": ["S", "A", "B"],
    "terminals": ["a", "b"],
    "productions": {
        "S": [["A", "B"], ["a", "S", "b"]],
        "A": [["a"], []],
        "B": [["b"], []],
    },
}


@pytest.mark.parametrize("description", [VARIANT_24, NULLABLE_START])
def test_normalize_gives_cnf_with_same_language(description, language):
    g = Grammar.from_dict(description)
    cnf = normalize(g)
    assert is_cnf(cnf)
    assert language(cnf, 6) == language(g, 6)
    cnf.validate()


def test_epsilon_kept_only_when_derivable(language):
    assert () in language(normalize(NULLABLE_START), 0)
    assert () not in language(normalize(VARIANT_24), 0)
    assert () not in normalize(VARIANT_24).prods[Nonterminal("S")]


def test_unused_symbols_are_gone():
    cnf = normalize(VARIANT_24)
    assert Nonterminal("C") not in cnf.nonterminals


def test_output_is_deterministic():
    assert str(normalize(VARIANT_24)) == str(normalize(VARIANT_24))
    assert normalize(VARIANT_24).to_dict() == normalize(Grammar.from_dict(VARIANT_24)).to_dict()


def test_simplify_to_cnf_returns_every_stage():
    stages = simplify_to_cnf(Grammar.from_dict(NULLABLE_START))
    assert len(stages) == 5
    no_eps, no_unit, reachable, generating, cnf = stages
    assert all(rhs or A == no_eps.start for A, rhs in no_eps.rules())
    assert not any(len(rhs) == 1 and isinstance(rhs[0], Nonterminal)
                   for _, rhs in no_unit.rules())
    assert is_cnf(cnf)


def test_verbose_prints_each_step(capsys):
    simplify_to_cnf(Grammar.from_dict(NULLABLE_START), verbose=True)
    out = capsys.readouterr().out
    for title in ("Grammar without epsilon productions", "Grammar without unit productions",
                  "After removing unreachable symbols", "After removing non-generating symbols",
                  "Grammar in CNF"):
        assert title in out


def test_invalid_grammar_is_rejected_before_any_stage():
    bad = dict(VARIANT_24, productions={"S": [["a", "Z"]]})
    with pytest.raises(InvalidGrammar):
        normalize(bad)

    S = Nonterminal("S")
    g = Grammar(S)
    g.prods[S] = [(Terminal("a"), Terminal("a"))]
    with pytest.raises(InvalidGrammar):
        simplify_to_cnf(g)
    assert g.prods == {S: [(Terminal("a"), Terminal("a"))]}


def test_empty_language_normalizes_to_no_rules():
    cnf = normalize({
        "start": "S",
        "nonterminals": ["S"],
        "terminals": ["a"],
        "productions": {"S": [["a", "S"]]},
    })
    assert cnf.prods == {}
    assert is_cnf(cnf)


def test_fresh_names_are_unique_across_the_run():
    cnf = normalize({
        "start": "S",
        "nonterminals": ["S", "X1", "T_a"],
        "terminals": ["a", "b"],
        "productions": {
            "S": [["a", "X1", "T_a", "b", "a"], ["T_a", "X1"]],
            "X1": [["a", "b", "b"]],
            "T_a": [["b", "a"]],
        },
    })
    names = [A.name for A in cnf.nonterminals]
    assert len(names) == len(set(names))
    assert not {s.name for s in cnf.nonterminals} & {s.name for s in cnf.terminals}
    assert is_cnf(cnf)


def test_normalize_rejects_malformed_description():
    with pytest.raises(InvalidGrammar):
        normalize({"start": "S", "nonterminals": None, "terminals": ["a"]})
