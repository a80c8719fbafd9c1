#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""In-memory knowledge graph model used by the query generators.

The model is an arena: `KnowledgeGraph` owns one node per named class,
object property and data property, keyed by IRI, and nodes refer to each
other by IRI only. Closure sets are filled by the ontology extraction and
the closure engine; the generation pass only mutates the per-class
traversal state (visited flag, bound variables, variable counter), which
`KnowledgeGraph.reset_traversal_state()` clears between queries.

Sets are unordered; every set that is sampled during generation is
exposed through a cached, sorted tuple so that a fixed seed yields the
same choices in every process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging

from rdflib import URIRef, Variable

from sparqlgen.expressions import (
    AnonymousClassExpression,
    ClassExpression,
    DataRange,
    NamedClass,
    is_anonymous,
    is_top_or_bottom,
    sort_key,
)

logger = logging.getLogger(__name__)


class PropertyCharacteristic(Enum):
    FUNCTIONAL = "functional"
    INVERSE_FUNCTIONAL = "inverse_functional"
    SYMMETRIC = "symmetric"
    ASYMMETRIC = "asymmetric"
    REFLEXIVE = "reflexive"
    IRREFLEXIVE = "irreflexive"
    TRANSITIVE = "transitive"


# ================================================================================================ #
# Class Nodes                                                                                      #
# ================================================================================================ #


@dataclass(eq=False)
class ClassNode:
    """A named class together with its closures and per-run traversal state.

    Invariants:
        - `superclasses` ⊇ `direct_superclasses`, `subclasses` ⊇ `direct_subclasses`
          and `anonymous_superclasses` ⊇ `direct_anonymous_superclasses`.
        - The relevant-named-classes and anonymous-restrictions sets are
          computed on first access and never recomputed afterwards.
    """

    iri: URIRef

    direct_superclasses: set[URIRef] = field(default_factory=set)
    superclasses: set[URIRef] = field(default_factory=set)
    direct_subclasses: set[URIRef] = field(default_factory=set)
    subclasses: set[URIRef] = field(default_factory=set)

    direct_anonymous_superclasses: set[AnonymousClassExpression] = field(default_factory=set)
    anonymous_superclasses: set[AnonymousClassExpression] = field(default_factory=set)

    equivalent_classes: set[ClassExpression] = field(default_factory=set)
    disjoint_classes: set[ClassExpression] = field(default_factory=set)

    object_property_ranges: dict[URIRef, ClassExpression] = field(default_factory=dict)
    data_property_ranges: dict[URIRef, DataRange] = field(default_factory=dict)

    individuals: list[URIRef] = field(default_factory=list)

    # Traversal state of one generation pass.
    visited: bool = False
    variables: list[Variable] = field(default_factory=list)
    _next_variable_index: int = 0

    _relevant_named_classes: tuple[URIRef, ...] | None = field(default=None, repr=False)
    _anonymous_restrictions: tuple[AnonymousClassExpression, ...] | None = field(
        default=None,
        repr=False,
    )

    def __repr__(self) -> str:
        return f"ClassNode({self.iri!s})"

    @property
    def short_name(self) -> str:
        return short_form(self.iri)

    def next_variable_index(self) -> int:
        """Return the class-local variable counter, then increment it."""
        index = self._next_variable_index
        self._next_variable_index += 1
        return index

    def add_individual(self, individual: URIRef) -> None:
        if individual not in self.individuals:
            self.individuals.append(individual)

    def subclasses_and_itself(self) -> tuple[URIRef, ...]:
        return tuple(sorted(self.subclasses | {self.iri}, key=str))

    def relevant_named_classes(self, graph: KnowledgeGraph) -> tuple[URIRef, ...]:
        """Named classes interchangeable with this one during generation.

        The set is this class, its closure sub- and superclasses, and the
        named members of its equivalent and disjoint expressions. Names
        unknown to `graph` (such as owl:Thing) are left out.
        """
        if self._relevant_named_classes is not None:
            return self._relevant_named_classes

        relevant: set[URIRef] = {self.iri}
        relevant.update(self.subclasses)
        relevant.update(self.superclasses)
        for expression in (*self.equivalent_classes, *self.disjoint_classes):
            if isinstance(expression, NamedClass) and not is_top_or_bottom(expression):
                relevant.add(expression.iri)

        self._relevant_named_classes = tuple(
            sorted((iri for iri in relevant if iri in graph.classes), key=str)
        )
        return self._relevant_named_classes

    def anonymous_restrictions(self) -> tuple[AnonymousClassExpression, ...]:
        """Inherited anonymous superclasses plus anonymous equivalent and disjoint expressions."""
        if self._anonymous_restrictions is not None:
            return self._anonymous_restrictions

        restrictions: set[AnonymousClassExpression] = set(self.anonymous_superclasses)
        for expression in (*self.equivalent_classes, *self.disjoint_classes):
            if is_anonymous(expression):
                restrictions.add(expression)  # type: ignore[arg-type]

        self._anonymous_restrictions = tuple(sorted(restrictions, key=sort_key))
        return self._anonymous_restrictions

    def reset_traversal_state(self) -> None:
        self.visited = False
        self.variables.clear()
        self._next_variable_index = 0


# ================================================================================================ #
# Property Nodes                                                                                   #
# ================================================================================================ #


@dataclass(eq=False)
class PropertyNode:
    """Shared part of object and data property nodes."""

    iri: URIRef

    direct_superproperties: set[URIRef] = field(default_factory=set)
    superproperties: set[URIRef] = field(default_factory=set)
    direct_subproperties: set[URIRef] = field(default_factory=set)
    subproperties: set[URIRef] = field(default_factory=set)
    equivalent_properties: set[URIRef] = field(default_factory=set)
    direct_disjoint_properties: set[URIRef] = field(default_factory=set)
    disjoint_properties: set[URIRef] = field(default_factory=set)

    characteristics: set[PropertyCharacteristic] = field(default_factory=set)

    _relevant_properties: tuple[URIRef, ...] | None = field(default=None, repr=False)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.iri!s})"

    def neighbours(self) -> set[URIRef]:
        """Properties one edge away in the relevant-properties graph."""
        return (
            self.subproperties
            | self.superproperties
            | self.equivalent_properties
            | self.disjoint_properties
        )

    @property
    def relevant_properties(self) -> tuple[URIRef, ...]:
        """Cached relevant-properties closure; empty until the closure engine has run."""
        return self._relevant_properties or (self.iri,)

    def set_relevant_properties(self, properties: set[URIRef]) -> None:
        if self._relevant_properties is None:
            self._relevant_properties = tuple(sorted(properties | {self.iri}, key=str))


@dataclass(eq=False, repr=False)
class ObjectPropertyNode(PropertyNode):
    inverse_properties: set[URIRef] = field(default_factory=set)

    def neighbours(self) -> set[URIRef]:
        return super().neighbours() | self.inverse_properties


@dataclass(eq=False, repr=False)
class DataPropertyNode(PropertyNode):
    """A data property; its ranges live on the domain classes."""


# ================================================================================================ #
# Knowledge Graph                                                                                  #
# ================================================================================================ #


@dataclass(eq=False)
class KnowledgeGraph:
    """Arena of class and property nodes keyed by IRI."""

    classes: dict[URIRef, ClassNode] = field(default_factory=dict)
    object_properties: dict[URIRef, ObjectPropertyNode] = field(default_factory=dict)
    data_properties: dict[URIRef, DataPropertyNode] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            "KnowledgeGraph("
            f"classes={len(self.classes)}, "
            f"object_properties={len(self.object_properties)}, "
            f"data_properties={len(self.data_properties)}"
            ")"
        )

    def add_class(self, iri: URIRef) -> ClassNode:
        node = self.classes.get(iri)
        if node is None:
            node = ClassNode(iri)
            self.classes[iri] = node
        return node

    def add_object_property(self, iri: URIRef) -> ObjectPropertyNode:
        node = self.object_properties.get(iri)
        if node is None:
            node = ObjectPropertyNode(iri)
            self.object_properties[iri] = node
        return node

    def add_data_property(self, iri: URIRef) -> DataPropertyNode:
        node = self.data_properties.get(iri)
        if node is None:
            node = DataPropertyNode(iri)
            self.data_properties[iri] = node
        return node

    def get_class(self, iri: URIRef) -> ClassNode:
        try:
            return self.classes[iri]
        except KeyError:
            message = f"Unknown class: {iri}"
            raise KeyError(message) from None

    def get_object_property(self, iri: URIRef) -> ObjectPropertyNode:
        try:
            return self.object_properties[iri]
        except KeyError:
            message = f"Unknown object property: {iri}"
            raise KeyError(message) from None

    def get_data_property(self, iri: URIRef) -> DataPropertyNode:
        try:
            return self.data_properties[iri]
        except KeyError:
            message = f"Unknown data property: {iri}"
            raise KeyError(message) from None

    def reset_traversal_state(self) -> None:
        """Clear visited flags, bound variables and class-local counters of every class."""
        for node in self.classes.values():
            node.reset_traversal_state()


def short_form(iri: str) -> str:
    """Return the local part of an IRI (after the last '#' or '/')."""
    text = str(iri)
    for separator in ("#", "/"):
        if separator in text:
            tail = text.rsplit(separator, 1)[1]
            if tail:
                return tail
    return text
