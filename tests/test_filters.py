from __future__ import annotations

import numpy as np
import pytest
from rdflib import XSD, Literal, URIRef, Variable

from sparqlgen.errors import InvalidArgumentError
from sparqlgen.expressions import (
    DataComplementOf,
    DataIntersectionOf,
    Datatype,
    DatatypeRestriction,
    Facet,
    FacetRestriction,
    UnsupportedDataRange,
)
from sparqlgen.generators.context import QueryPrefixes
from sparqlgen.generators.filters import FilterGenerator
from sparqlgen.patterns import Comparison, ComparisonOp, LogicalAnd, LogicalNot, LogicalOr

VALUE = Variable("DataValue0")


def _generator(seed: int = 0) -> FilterGenerator:
    return FilterGenerator(np.random.default_rng(seed), QueryPrefixes())


def _comparisons(expression) -> list[Comparison]:
    if isinstance(expression, Comparison):
        return [expression]
    if isinstance(expression, LogicalNot):
        return _comparisons(expression.operand)
    if isinstance(expression, (LogicalAnd, LogicalOr)):
        return _comparisons(expression.left) + _comparisons(expression.right)
    return []


@pytest.mark.parametrize(
    ("datatype", "literal_type"),
    [
        (XSD.integer, XSD.integer),
        (XSD.int, XSD.integer),
        (XSD.nonNegativeInteger, XSD.integer),
        (XSD.boolean, XSD.boolean),
        (XSD.decimal, XSD.decimal),
        (XSD.double, XSD.double),
        (XSD.float, XSD.float),
    ],
)
def test_named_datatype_yields_one_comparison(datatype, literal_type):
    generator = _generator()
    expression = generator.generate(VALUE, Datatype(datatype))

    assert isinstance(expression, Comparison)
    assert expression.variable == VALUE
    assert expression.value.datatype == literal_type
    assert generator.prefixes.used == {"xsd": str(XSD)}


def test_non_negative_and_positive_samples_stay_in_range():
    generator = _generator(11)
    for _ in range(30):
        assert int(generator.generate(VALUE, Datatype(XSD.nonNegativeInteger)).value) >= 0
        assert int(generator.generate(VALUE, Datatype(XSD.positiveInteger)).value) >= 1


def test_unsupported_datatypes_yield_nothing():
    generator = _generator()
    assert generator.generate(VALUE, Datatype(XSD.string)) is None
    assert generator.generate(VALUE, Datatype(URIRef("http://example.org/onto#Money"))) is None
    assert generator.generate(VALUE, UnsupportedDataRange("DataOneOf")) is None
    assert generator.prefixes.used == {}


def test_unknown_data_range_type_is_rejected():
    with pytest.raises(TypeError):
        _generator().generate(VALUE, XSD.integer)


def test_bound_facet_becomes_comparison():
    restriction = DatatypeRestriction(XSD.integer, (FacetRestriction(Facet.MIN_INCLUSIVE, Literal(5)),))
    expression = _generator().generate(VALUE, restriction)

    assert _comparisons(expression) == [Comparison(VALUE, ComparisonOp.GTE, Literal("5", datatype=XSD.integer))]


def test_facets_combine_into_logical_tree():
    restriction = DatatypeRestriction(
        XSD.integer,
        (
            FacetRestriction(Facet.MIN_EXCLUSIVE, Literal(1)),
            FacetRestriction(Facet.MAX_EXCLUSIVE, Literal(10)),
        ),
    )
    operators = set()
    for seed in range(20):
        for comparison in _comparisons(_generator(seed).generate(VALUE, restriction)):
            operators.add(comparison.op)
    assert operators == {ComparisonOp.GT, ComparisonOp.LT}


def test_unsupported_facet_yields_nothing():
    restriction = DatatypeRestriction(XSD.integer, (FacetRestriction(Facet.LENGTH, Literal(3)),))
    assert _generator().generate(VALUE, restriction) is None


def test_complement_passes_through_without_negation():
    expression = _generator().generate(VALUE, DataComplementOf(Datatype(XSD.boolean)))
    assert isinstance(expression, Comparison)
    assert expression.value.datatype == XSD.boolean


def test_intersection_folds_operand_filters():
    data_range = DataIntersectionOf((Datatype(XSD.integer), Datatype(XSD.double)))
    for seed in range(10):
        comparisons = _comparisons(_generator(seed).generate(VALUE, data_range))
        assert 1 <= len(comparisons) <= 2


def test_missing_arguments_raise():
    with pytest.raises(InvalidArgumentError):
        _generator().generate(None, Datatype(XSD.integer))
