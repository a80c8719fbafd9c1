#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Closure engine.

Derives the sets the generators rely on from the direct relations
recorded during extraction:

- anonymous restrictions inherited down the subclass hierarchy,
- disjoint properties inherited from superproperties and extended to the
  subproperties of every direct disjoint property,
- disjoint and inverse sets shared across each equivalence class of
  properties,
- the relevant-properties closure of every property.

Each pass keeps its own transient visited set, so no traversal state is
left on the nodes and passes cannot interfere with each other or with
the generation pass.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging

from rdflib import URIRef

from sparqlgen.expressions import AnonymousClassExpression
from sparqlgen.model import (
    ClassNode,
    KnowledgeGraph,
    ObjectPropertyNode,
    PropertyNode,
)

logger = logging.getLogger(__name__)


def compute_closures(graph: KnowledgeGraph) -> None:
    """Run every closure pass on `graph`, in dependency order."""
    logger.info("Begin computing closures of %r", graph)

    visited_classes: set[URIRef] = set()
    for node in graph.classes.values():
        propagate_anonymous_restrictions(graph, node, visited_classes)

    for properties in (graph.data_properties, graph.object_properties):
        visited_properties: set[URIRef] = set()
        for prop in properties.values():
            propagate_disjoint_properties(properties, prop, visited_properties)
        for prop in properties.values():
            merge_equivalent_properties(properties, prop)
        compute_relevant_properties(properties)

    logger.info("Computed closures successfully")


# ================================================================================================ #
# Classes                                                                                          #
# ================================================================================================ #


def propagate_anonymous_restrictions(
    graph: KnowledgeGraph,
    node: ClassNode,
    visited: set[URIRef],
) -> set[AnonymousClassExpression]:
    """Collect the anonymous superclasses of `node` and all its ancestors.

    Direct superclasses are processed first; a class already in `visited`
    returns its stored set, so diamond inheritance is expanded once.
    """
    if node.iri in visited:
        return node.anonymous_superclasses
    # Mark on entry so that a cyclic hierarchy terminates.
    visited.add(node.iri)

    inherited: set[AnonymousClassExpression] = set()
    for super_iri in node.direct_superclasses:
        super_node = graph.classes.get(super_iri)
        if super_node is None:
            continue
        inherited |= propagate_anonymous_restrictions(graph, super_node, visited)

    node.anonymous_superclasses |= inherited
    node.anonymous_superclasses |= node.direct_anonymous_superclasses
    return node.anonymous_superclasses


# ================================================================================================ #
# Properties                                                                                       #
# ================================================================================================ #


def propagate_disjoint_properties(
    properties: Mapping[URIRef, PropertyNode],
    prop: PropertyNode,
    visited: set[URIRef],
) -> None:
    """Extend the disjoint set of `prop` with what it derives from its neighbours.

    A property is disjoint with everything its direct superproperties are
    disjoint with, and with every direct disjoint property together with
    that property's subproperties.
    """
    if prop.iri in visited:
        return
    visited.add(prop.iri)

    for super_iri in prop.direct_superproperties:
        super_prop = properties.get(super_iri)
        if super_prop is None:
            continue
        propagate_disjoint_properties(properties, super_prop, visited)
        prop.disjoint_properties |= super_prop.disjoint_properties

    for disjoint_iri in prop.direct_disjoint_properties:
        prop.disjoint_properties.add(disjoint_iri)
        disjoint_prop = properties.get(disjoint_iri)
        if disjoint_prop is not None:
            prop.disjoint_properties |= disjoint_prop.subproperties


def merge_equivalent_properties(
    properties: Mapping[URIRef, PropertyNode],
    prop: PropertyNode,
) -> None:
    """Share disjoint (and, for object properties, inverse) sets across an equivalence class."""
    equivalents = [properties[iri] for iri in prop.equivalent_properties if iri in properties]
    if not equivalents:
        return

    if prop.disjoint_properties:
        merged: set[URIRef] = set(prop.disjoint_properties)
        for equivalent in equivalents:
            merged |= equivalent.disjoint_properties
        for member in (prop, *equivalents):
            member.disjoint_properties = set(merged)

    if isinstance(prop, ObjectPropertyNode) and prop.inverse_properties:
        merged_inverses: set[URIRef] = set(prop.inverse_properties)
        for equivalent in equivalents:
            if isinstance(equivalent, ObjectPropertyNode):
                merged_inverses |= equivalent.inverse_properties
        for member in (prop, *equivalents):
            if isinstance(member, ObjectPropertyNode):
                member.inverse_properties = set(merged_inverses)


def compute_relevant_properties(properties: Mapping[URIRef, PropertyNode]) -> None:
    """Cache the reflexive-transitive closure over sub/super/equivalent/disjoint/inverse edges.

    Each property gets a fresh visited set, so the result does not depend
    on the order in which properties are processed.
    """
    for prop in properties.values():
        visited: set[URIRef] = set()
        _collect_relevant(properties, prop.iri, visited)
        prop.set_relevant_properties(visited)


def _collect_relevant(
    properties: Mapping[URIRef, PropertyNode],
    iri: URIRef,
    visited: set[URIRef],
) -> None:
    stack = [iri]
    while stack:
        current = stack.pop()
        if current in visited or current not in properties:
            continue
        visited.add(current)
        stack.extend(properties[current].neighbours() - visited)
