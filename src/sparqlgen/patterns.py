#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Abstract pattern tree produced by the generators.

Terms are rdflib `Variable`, `URIRef` and `Literal` objects. A
`GroupPattern` is an ordered list of elements (triples, filters and
nested patterns) and maps to one `{ ... }` block of SPARQL syntax.
Textual rendering lives in `sparqlgen.serialization`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from rdflib import Literal, URIRef, Variable

Subject = Union[Variable, URIRef]
Object = Union[Variable, URIRef, Literal]


@dataclass(frozen=True)
class TriplePattern:
    subject: Subject
    predicate: URIRef
    object: Object


# ================================================================================================ #
# Filter Expressions                                                                               #
# ================================================================================================ #


class ComparisonOp(Enum):
    EQ = "="
    NEQ = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


@dataclass(frozen=True)
class Comparison:
    variable: Variable
    op: ComparisonOp
    value: Literal


@dataclass(frozen=True)
class LogicalAnd:
    left: Expression
    right: Expression


@dataclass(frozen=True)
class LogicalOr:
    left: Expression
    right: Expression


@dataclass(frozen=True)
class LogicalNot:
    operand: Expression


@dataclass(frozen=True)
class Exists:
    pattern: GroupPattern


@dataclass(frozen=True)
class NotExists:
    pattern: GroupPattern


Expression = Union[Comparison, LogicalAnd, LogicalOr, LogicalNot, Exists, NotExists]


# ================================================================================================ #
# Graph Patterns                                                                                   #
# ================================================================================================ #


@dataclass
class FilterPattern:
    expression: Expression


@dataclass
class UnionPattern:
    alternatives: list[GroupPattern]


@dataclass
class OptionalPattern:
    pattern: GroupPattern


@dataclass
class MinusPattern:
    pattern: GroupPattern


@dataclass
class GroupPattern:
    """An ordered group of pattern elements, `{ ... }` in SPARQL."""

    elements: list[Element] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.elements

    def add_triple(self, triple: TriplePattern) -> None:
        self.elements.append(triple)

    def add_filter(self, expression: Expression) -> None:
        self.elements.append(FilterPattern(expression))

    def add(self, element: Element) -> None:
        self.elements.append(element)

    def triples(self) -> list[TriplePattern]:
        """Return every triple pattern of the tree, depth first."""
        found: list[TriplePattern] = []
        for element in self.elements:
            for nested in _children(element):
                if isinstance(nested, TriplePattern):
                    found.append(nested)
                else:
                    found.extend(nested.triples())
        return found


Element = Union[TriplePattern, FilterPattern, GroupPattern, UnionPattern, OptionalPattern, MinusPattern]


def _children(element: Element) -> list[TriplePattern | GroupPattern]:
    if isinstance(element, (TriplePattern, GroupPattern)):
        return [element]
    if isinstance(element, UnionPattern):
        return list(element.alternatives)
    if isinstance(element, (OptionalPattern, MinusPattern)):
        return [element.pattern]
    if isinstance(element.expression, (Exists, NotExists)):
        return [element.expression.pattern]
    return []


@dataclass
class SelectQuery:
    """`SELECT [DISTINCT] ?var WHERE { pattern }` with the prefixes it uses."""

    variable: Variable
    pattern: GroupPattern
    prefixes: dict[str, str] = field(default_factory=dict)
    distinct: bool = True
