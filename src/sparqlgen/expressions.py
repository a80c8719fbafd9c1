#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Class expressions, object property expressions and data ranges.

Each category is a closed set of frozen dataclasses. Generators dispatch
on the concrete type and every category carries an explicit
`Unsupported*` variant for shapes that the generator does not model, so
that extraction can keep the shape (for diagnostics) without the
generator falling through to a silent default.

All variants are hashable and compare structurally, which lets class
nodes keep them in sets. `sort_key()` gives a stable, process-independent
ordering used whenever one of them is sampled.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from rdflib import OWL, RDFS, Literal, URIRef

# ================================================================================================ #
# Object Property Expressions                                                                      #
# ================================================================================================ #


@dataclass(frozen=True)
class InverseObjectProperty:
    """`ObjectInverseOf(property)`; `property` may itself be an inverse."""

    property: ObjectPropertyExpression


ObjectPropertyExpression = Union[URIRef, InverseObjectProperty]


def named_object_property(expression: ObjectPropertyExpression) -> URIRef:
    """Simplify an object property expression to the named property it is built on.

    Nested inverses cancel out and a single inverse is replaced by its
    operand; the direction of the emitted triple is chosen independently
    by the generator.
    """
    while isinstance(expression, InverseObjectProperty):
        expression = expression.property
    return expression


# ================================================================================================ #
# Data Ranges                                                                                      #
# ================================================================================================ #


class Facet(Enum):
    """OWL 2 facets. Only the four bound facets produce filter comparisons."""

    MIN_INCLUSIVE = "minInclusive"
    MIN_EXCLUSIVE = "minExclusive"
    MAX_INCLUSIVE = "maxInclusive"
    MAX_EXCLUSIVE = "maxExclusive"
    LENGTH = "length"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    TOTAL_DIGITS = "totalDigits"
    FRACTION_DIGITS = "fractionDigits"
    LANG_RANGE = "langRange"


@dataclass(frozen=True)
class FacetRestriction:
    facet: Facet
    value: Literal


@dataclass(frozen=True)
class Datatype:
    """A named datatype such as `xsd:integer`."""

    iri: URIRef


@dataclass(frozen=True)
class DatatypeRestriction:
    """`DatatypeRestriction(datatype facet value ...)`."""

    datatype: URIRef
    facets: tuple[FacetRestriction, ...]


@dataclass(frozen=True)
class DataComplementOf:
    operand: DataRange


@dataclass(frozen=True)
class DataIntersectionOf:
    operands: tuple[DataRange, ...]


@dataclass(frozen=True)
class DataUnionOf:
    operands: tuple[DataRange, ...]


@dataclass(frozen=True)
class UnsupportedDataRange:
    """A data range shape outside the model (e.g. `DataOneOf`)."""

    description: str


DataRange = Union[
    Datatype,
    DatatypeRestriction,
    DataComplementOf,
    DataIntersectionOf,
    DataUnionOf,
    UnsupportedDataRange,
]

RDFS_LITERAL = Datatype(RDFS.Literal)


# ================================================================================================ #
# Class Expressions                                                                                #
# ================================================================================================ #


class RestrictionKind(Enum):
    """Quantifier of an object or data restriction. All kinds are generated alike."""

    SOME = "some"
    ALL = "all"
    MIN = "min"
    MAX = "max"
    EXACT = "exact"


@dataclass(frozen=True)
class NamedClass:
    iri: URIRef

    @property
    def is_thing(self) -> bool:
        return self.iri == OWL.Thing

    @property
    def is_nothing(self) -> bool:
        return self.iri == OWL.Nothing


@dataclass(frozen=True)
class ObjectIntersectionOf:
    operands: tuple[ClassExpression, ...]


@dataclass(frozen=True)
class ObjectUnionOf:
    operands: tuple[ClassExpression, ...]


@dataclass(frozen=True)
class ObjectComplementOf:
    operand: ClassExpression


@dataclass(frozen=True)
class ObjectHasValue:
    """`ObjectHasValue(property individual)`; `individual` is None for an anonymous individual."""

    property: ObjectPropertyExpression
    individual: URIRef | None


@dataclass(frozen=True)
class ObjectHasSelf:
    property: ObjectPropertyExpression


@dataclass(frozen=True)
class ObjectRestriction:
    """Existential, universal or cardinality restriction on an object property."""

    kind: RestrictionKind
    property: ObjectPropertyExpression
    filler: ClassExpression
    cardinality: int | None = None


@dataclass(frozen=True)
class DataHasValue:
    property: URIRef
    value: Literal


@dataclass(frozen=True)
class DataRestriction:
    """Existential, universal or cardinality restriction on a data property."""

    kind: RestrictionKind
    property: URIRef
    filler: DataRange
    cardinality: int | None = None


@dataclass(frozen=True)
class UnsupportedClassExpression:
    """A class expression shape outside the model (e.g. `ObjectOneOf`)."""

    description: str


ClassExpression = Union[
    NamedClass,
    ObjectIntersectionOf,
    ObjectUnionOf,
    ObjectComplementOf,
    ObjectHasValue,
    ObjectHasSelf,
    ObjectRestriction,
    DataHasValue,
    DataRestriction,
    UnsupportedClassExpression,
]

AnonymousClassExpression = Union[
    ObjectIntersectionOf,
    ObjectUnionOf,
    ObjectComplementOf,
    ObjectHasValue,
    ObjectHasSelf,
    ObjectRestriction,
    DataHasValue,
    DataRestriction,
    UnsupportedClassExpression,
]

THING = NamedClass(OWL.Thing)
NOTHING = NamedClass(OWL.Nothing)


def is_anonymous(expression: ClassExpression) -> bool:
    return not isinstance(expression, NamedClass)


def is_top_or_bottom(expression: ClassExpression) -> bool:
    return isinstance(expression, NamedClass) and (expression.is_thing or expression.is_nothing)


def sort_key(value: object) -> str:
    """Stable ordering key for expressions, IRIs and literals."""
    return repr(value)
