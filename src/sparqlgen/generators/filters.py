#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Filter expression generator.

Turns a data range into at most one boolean expression over a data-value
variable:

- a named datatype yields one comparison against a sampled literal,
- a datatype restriction yields one comparison per selected bound facet,
  folded left to right with AND/OR and random negation,
- an intersection or union of data ranges folds the expressions of a
  selected subset of its operands the same way,
- a complement passes through to its operand (it is not negated).

Unsupported datatypes, facets and data range shapes contribute nothing
and are logged.
"""

from __future__ import annotations

from decimal import Decimal
import logging

import numpy as np
from rdflib import XSD, Literal, URIRef, Variable

from sparqlgen.expressions import (
    DataComplementOf,
    DataIntersectionOf,
    DataRange,
    Datatype,
    DatatypeRestriction,
    DataUnionOf,
    Facet,
    FacetRestriction,
    UnsupportedDataRange,
)
from sparqlgen.errors import InvalidArgumentError
from sparqlgen.generators.context import QueryPrefixes
from sparqlgen.patterns import (
    Comparison,
    ComparisonOp,
    Expression,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
)
from sparqlgen.utils.sampling import (
    INT32_MAX,
    INT32_MIN,
    random_boolean,
    random_index,
    random_integer,
    random_nonempty_subset,
    random_real,
)

logger = logging.getLogger(__name__)

# Datatypes whose value space the generator can sample.
SUPPORTED_DATATYPES: frozenset[URIRef] = frozenset(
    {
        XSD.boolean,
        XSD.decimal,
        XSD.double,
        XSD.float,
        XSD.int,
        XSD.integer,
        XSD.nonNegativeInteger,
        XSD.positiveInteger,
    }
)

_BUILT_IN_NAMESPACES = (
    str(XSD),
    "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "http://www.w3.org/2000/01/rdf-schema#",
    "http://www.w3.org/2002/07/owl#",
)

# Operators picked uniformly for a sampled literal, in draw order.
_SAMPLED_OPERATORS = (
    ComparisonOp.EQ,
    ComparisonOp.GT,
    ComparisonOp.GTE,
    ComparisonOp.LT,
    ComparisonOp.LTE,
    ComparisonOp.NEQ,
)

_FACET_OPERATORS = {
    Facet.MIN_INCLUSIVE: ComparisonOp.GTE,
    Facet.MIN_EXCLUSIVE: ComparisonOp.GT,
    Facet.MAX_INCLUSIVE: ComparisonOp.LTE,
    Facet.MAX_EXCLUSIVE: ComparisonOp.LT,
}


def is_built_in_datatype(datatype: URIRef) -> bool:
    return any(str(datatype).startswith(namespace) for namespace in _BUILT_IN_NAMESPACES)


class FilterGenerator:
    """Build filter expressions from data ranges using the run's RNG."""

    def __init__(self, rng: np.random.Generator, prefixes: QueryPrefixes) -> None:
        self._rng = rng
        self.prefixes = prefixes

    def generate(self, variable: Variable, data_range: DataRange) -> Expression | None:
        """Return a filter expression for `variable` restricted by `data_range`, or None.

        Raises:
            InvalidArgumentError: If `variable` or `data_range` is missing.
            TypeError: If `data_range` is not a data range variant.
        """
        if variable is None or data_range is None:
            message = "variable and data_range are required."
            raise InvalidArgumentError(message)

        if isinstance(data_range, DataComplementOf):
            # The complement is not negated; the operand's filter is used as is.
            return self.generate(variable, data_range.operand)
        if isinstance(data_range, Datatype):
            return self._from_datatype(variable, data_range.iri)
        if isinstance(data_range, DatatypeRestriction):
            selected = random_nonempty_subset(self._rng, data_range.facets)
            return self._fold(
                self._from_facet(variable, data_range.datatype, restriction)
                for restriction in selected
            )
        if isinstance(data_range, (DataIntersectionOf, DataUnionOf)):
            selected = random_nonempty_subset(self._rng, data_range.operands)
            return self._fold(self.generate(variable, operand) for operand in selected)
        if isinstance(data_range, UnsupportedDataRange):
            logger.warning("Data range %s is ignored during query generation", data_range.description)
            return None

        message = f"Not a data range: {data_range!r}"
        raise TypeError(message)

    # ------------------------------------------------------------------------------------------------ #
    # Internal helpers                                                                                 #
    # ------------------------------------------------------------------------------------------------ #

    def _fold(self, expressions) -> Expression | None:
        """Fold expressions left to right with a random AND/OR, negating each step with p=0.5.

        Expressions are consumed lazily so that RNG draws interleave with
        their generation in call order.
        """
        current: Expression | None = None
        for expression in expressions:
            if expression is None:
                continue
            if current is not None:
                if random_boolean(self._rng):
                    expression = LogicalAnd(current, expression)
                else:
                    expression = LogicalOr(current, expression)
            if random_boolean(self._rng):
                expression = LogicalNot(expression)
            current = expression
        return current

    def _from_datatype(self, variable: Variable, datatype: URIRef) -> Expression | None:
        if not is_built_in_datatype(datatype):
            logger.warning("Non built-in datatype %s is not supported", datatype)
            return None
        value = self._sample_literal(datatype)
        if value is None:
            logger.warning("Unsupported datatype: %s", datatype)
            return None
        self.prefixes.register_xsd()
        op = _SAMPLED_OPERATORS[random_index(self._rng, len(_SAMPLED_OPERATORS))]
        return Comparison(variable, op, value)

    def _from_facet(
        self,
        variable: Variable,
        datatype: URIRef,
        restriction: FacetRestriction,
    ) -> Expression | None:
        if not is_built_in_datatype(datatype):
            logger.warning("Non built-in datatype %s is not supported", datatype)
            return None
        if datatype not in SUPPORTED_DATATYPES:
            logger.warning("Unsupported datatype: %s", datatype)
            return None
        op = _FACET_OPERATORS.get(restriction.facet)
        if op is None:
            logger.warning("Unsupported facet: %s", restriction.facet.value)
            return None
        self.prefixes.register_xsd()
        return Comparison(variable, op, _facet_literal(datatype, restriction.value))

    def _sample_literal(self, datatype: URIRef) -> Literal | None:
        rng = self._rng
        if datatype == XSD.boolean:
            return Literal("true" if random_boolean(rng) else "false", datatype=XSD.boolean)
        if datatype == XSD.decimal:
            value = Decimal(f"{random_real(rng):.2f}").normalize()
            return Literal(format(value, "f"), datatype=XSD.decimal)
        if datatype == XSD.double:
            return Literal(repr(random_real(rng)), datatype=XSD.double)
        if datatype == XSD.float:
            return Literal(repr(float(np.float32(random_real(rng)))), datatype=XSD.float)
        if datatype in (XSD.int, XSD.integer):
            return Literal(str(random_integer(rng, INT32_MIN, INT32_MAX)), datatype=XSD.integer)
        if datatype == XSD.nonNegativeInteger:
            return Literal(str(random_integer(rng, 0, INT32_MAX)), datatype=XSD.integer)
        if datatype == XSD.positiveInteger:
            return Literal(str(random_integer(rng, 1, INT32_MAX)), datatype=XSD.integer)
        return None


def _facet_literal(datatype: URIRef, value: Literal) -> Literal:
    """Re-type a facet value to the restricted datatype's comparison type."""
    lexical = str(value)
    if datatype in (XSD.int, XSD.integer, XSD.nonNegativeInteger, XSD.positiveInteger):
        return Literal(lexical, datatype=XSD.integer)
    return Literal(lexical, datatype=datatype)
