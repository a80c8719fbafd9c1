from __future__ import annotations

import numpy as np
from rdflib import Namespace, Variable

from sparqlgen.generators.combinator import PatternCombinator
from sparqlgen.patterns import (
    Exists,
    FilterPattern,
    GroupPattern,
    MinusPattern,
    NotExists,
    OptionalPattern,
    TriplePattern,
    UnionPattern,
)

EX = Namespace("http://example.org/onto#")


def _fragments(count: int) -> list[GroupPattern]:
    return [GroupPattern([TriplePattern(Variable(f"x{i}"), EX.p, Variable(f"y{i}"))]) for i in range(count)]


def _combinator(make_probabilities, seed: int = 0, **shapes: float) -> PatternCombinator:
    return PatternCombinator(np.random.default_rng(seed), make_probabilities(**shapes))


def test_no_fragment_gives_empty_group(make_probabilities):
    assert _combinator(make_probabilities).combine([], allow_union=True).is_empty()


def test_single_fragment_is_returned_unchanged(make_probabilities):
    fragment = _fragments(1)[0]
    assert _combinator(make_probabilities).combine([fragment], allow_union=True) is fragment


def test_conjunction_keeps_every_triple_in_order(make_probabilities):
    fragments = _fragments(5)
    expected = [fragment.elements[0] for fragment in fragments]
    for seed in range(5):
        combined = _combinator(make_probabilities, seed).combine(_fragments(5), allow_union=True)
        assert combined.triples() == expected


def test_union(make_probabilities):
    combinator = _combinator(make_probabilities, conjunction=0.0, union=1.0)
    left, right = _fragments(2)

    combined = combinator.combine([left, right], allow_union=True)

    assert combined.elements == [UnionPattern([left, right])]


def test_union_degrades_to_conjunction_when_not_allowed(make_probabilities):
    combinator = _combinator(make_probabilities, conjunction=0.0, union=1.0)
    left, right = _fragments(2)

    combined = combinator.combine([left, right], allow_union=False)

    assert combined is left
    assert left.elements[-1] is right
    assert not any(isinstance(element, UnionPattern) for element in combined.elements)


def test_optional(make_probabilities):
    combinator = _combinator(make_probabilities, conjunction=0.0, optional=1.0)
    left, right = _fragments(2)

    combined = combinator.combine([left, right], allow_union=True)

    assert combined.elements[-1] == OptionalPattern(right)


def test_negation_uses_one_of_three_forms(make_probabilities):
    seen = set()
    for seed in range(30):
        combinator = _combinator(make_probabilities, seed, conjunction=0.0, negation=1.0)
        left, right = _fragments(2)
        last = combinator.combine([left, right], allow_union=True).elements[-1]
        if isinstance(last, MinusPattern):
            assert last.pattern is right
            seen.add("minus")
        else:
            assert isinstance(last, FilterPattern)
            assert last.expression.pattern is right
            seen.add(type(last.expression).__name__)
    assert seen == {"minus", Exists.__name__, NotExists.__name__}
