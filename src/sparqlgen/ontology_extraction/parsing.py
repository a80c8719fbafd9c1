#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Parsing of OWL class expressions and data ranges from an rdflib graph.

OWL 2 maps class expressions and data ranges to RDF as blank-node
structures (`owl:Restriction`, `owl:intersectionOf` lists, ...). The
parser below reads those structures back into the frozen variants of
`sparqlgen.expressions`. Shapes outside the model become
`UnsupportedClassExpression` / `UnsupportedDataRange` values carrying a
short description, so that extraction never fails on them.
"""

from __future__ import annotations

from collections.abc import Collection as CollectionABC
import logging

from rdflib import OWL, RDF, RDFS, XSD, BNode, Graph as RDFGraph, Literal, URIRef
from rdflib.collection import Collection
from rdflib.term import Node

from sparqlgen.expressions import (
    RDFS_LITERAL,
    THING,
    ClassExpression,
    DataComplementOf,
    DataHasValue,
    DataIntersectionOf,
    DataRange,
    DataRestriction,
    Datatype,
    DatatypeRestriction,
    DataUnionOf,
    Facet,
    FacetRestriction,
    InverseObjectProperty,
    NamedClass,
    ObjectComplementOf,
    ObjectHasSelf,
    ObjectHasValue,
    ObjectIntersectionOf,
    ObjectPropertyExpression,
    ObjectRestriction,
    ObjectUnionOf,
    RestrictionKind,
    UnsupportedClassExpression,
    UnsupportedDataRange,
    sort_key,
)

logger = logging.getLogger(__name__)

_FACETS_BY_PREDICATE: dict[URIRef, Facet] = {
    URIRef(f"{XSD}{facet.value}"): facet for facet in Facet if facet is not Facet.LANG_RANGE
}
_FACETS_BY_PREDICATE[URIRef(f"{RDF}langRange")] = Facet.LANG_RANGE

_DATATYPE_NAMESPACES = (str(XSD), str(RDF), str(RDFS))

_QUANTIFIERS: tuple[tuple[URIRef, RestrictionKind], ...] = (
    (OWL.someValuesFrom, RestrictionKind.SOME),
    (OWL.allValuesFrom, RestrictionKind.ALL),
)
# (cardinality predicate, kind, qualified)
_CARDINALITIES: tuple[tuple[URIRef, RestrictionKind, bool], ...] = (
    (OWL.minQualifiedCardinality, RestrictionKind.MIN, True),
    (OWL.maxQualifiedCardinality, RestrictionKind.MAX, True),
    (OWL.qualifiedCardinality, RestrictionKind.EXACT, True),
    (OWL.minCardinality, RestrictionKind.MIN, False),
    (OWL.maxCardinality, RestrictionKind.MAX, False),
    (OWL.cardinality, RestrictionKind.EXACT, False),
)


class ExpressionParser:
    """Read class expressions and data ranges out of `graph`.

    Args:
        graph: The parsed ontology.
        object_properties: IRIs declared as object properties.
        data_properties: IRIs declared as data properties. A restriction on
            an undeclared property is classified by the shape of its filler.
    """

    def __init__(
        self,
        graph: RDFGraph,
        *,
        object_properties: CollectionABC[URIRef] = (),
        data_properties: CollectionABC[URIRef] = (),
    ) -> None:
        self._graph = graph
        self._object_properties = frozenset(object_properties)
        self._data_properties = frozenset(data_properties)

    # ------------------------------------------------------------------------------------------------ #
    # Class expressions                                                                                #
    # ------------------------------------------------------------------------------------------------ #

    def class_expression(self, node: Node) -> ClassExpression:
        if isinstance(node, URIRef):
            return NamedClass(node)
        if not isinstance(node, BNode):
            return UnsupportedClassExpression(f"class expression {node!r}")

        graph = self._graph
        operands = graph.value(node, OWL.intersectionOf)
        if operands is not None:
            return ObjectIntersectionOf(self._class_operands(operands))
        operands = graph.value(node, OWL.unionOf)
        if operands is not None:
            return ObjectUnionOf(self._class_operands(operands))
        operand = graph.value(node, OWL.complementOf)
        if operand is not None:
            return ObjectComplementOf(self.class_expression(operand))
        if graph.value(node, OWL.oneOf) is not None:
            return UnsupportedClassExpression("ObjectOneOf")
        if (node, RDF.type, OWL.Restriction) in graph or graph.value(node, OWL.onProperty) is not None:
            return self._restriction(node)

        return UnsupportedClassExpression(f"class expression {node.n3()}")

    def named_classes_in(self, node: Node) -> set[URIRef]:
        """Return the named classes occurring in the class expression at `node`."""
        found: set[URIRef] = set()
        self._collect_named_classes(self.class_expression(node), found)
        return found

    def _class_operands(self, head: Node) -> tuple[ClassExpression, ...]:
        return tuple(sorted({self.class_expression(item) for item in self._list(head)}, key=sort_key))

    def _restriction(self, node: BNode) -> ClassExpression:
        graph = self._graph
        property_node = graph.value(node, OWL.onProperty)
        if property_node is None:
            if graph.value(node, OWL.onProperties) is not None:
                return UnsupportedClassExpression("n-ary data restriction")
            return UnsupportedClassExpression(f"restriction {node.n3()} without owl:onProperty")

        value = graph.value(node, OWL.hasValue)
        if value is not None:
            if isinstance(value, Literal) or self._is_data_property(property_node):
                if not isinstance(value, Literal) or not isinstance(property_node, URIRef):
                    return UnsupportedClassExpression(f"data has-value {node.n3()}")
                return DataHasValue(property_node, value)
            individual = value if isinstance(value, URIRef) else None
            return ObjectHasValue(self.object_property_expression(property_node), individual)

        has_self = graph.value(node, OWL.hasSelf)
        if has_self is not None:
            return ObjectHasSelf(self.object_property_expression(property_node))

        for predicate, kind in _QUANTIFIERS:
            filler = graph.value(node, predicate)
            if filler is not None:
                return self._quantified(property_node, kind, filler, None)

        for predicate, kind, qualified in _CARDINALITIES:
            bound = graph.value(node, predicate)
            if bound is None:
                continue
            cardinality = _to_int(bound)
            if qualified:
                filler = graph.value(node, OWL.onClass)
                if filler is None:
                    filler = graph.value(node, OWL.onDataRange)
            else:
                filler = None
            return self._quantified(property_node, kind, filler, cardinality)

        return UnsupportedClassExpression(f"restriction {node.n3()}")

    def _quantified(
        self,
        property_node: Node,
        kind: RestrictionKind,
        filler: Node | None,
        cardinality: int | None,
    ) -> ClassExpression:
        if self._is_data_property(property_node) or (
            filler is not None
            and property_node not in self._object_properties
            and self.is_data_range(filler)
        ):
            if not isinstance(property_node, URIRef):
                return UnsupportedClassExpression(f"data restriction on {property_node.n3()}")
            data_range = RDFS_LITERAL if filler is None else self.data_range(filler)
            return DataRestriction(kind, property_node, data_range, cardinality)

        class_filler = THING if filler is None else self.class_expression(filler)
        return ObjectRestriction(kind, self.object_property_expression(property_node), class_filler, cardinality)

    def object_property_expression(self, node: Node) -> ObjectPropertyExpression:
        inverse = self._graph.value(node, OWL.inverseOf) if isinstance(node, BNode) else None
        if inverse is not None:
            return InverseObjectProperty(self.object_property_expression(inverse))
        return node  # type: ignore[return-value]

    def _is_data_property(self, node: Node) -> bool:
        return node in self._data_properties

    def _collect_named_classes(self, expression: ClassExpression, found: set[URIRef]) -> None:
        if isinstance(expression, NamedClass):
            found.add(expression.iri)
        elif isinstance(expression, (ObjectIntersectionOf, ObjectUnionOf)):
            for operand in expression.operands:
                self._collect_named_classes(operand, found)
        elif isinstance(expression, ObjectComplementOf):
            self._collect_named_classes(expression.operand, found)
        elif isinstance(expression, ObjectRestriction):
            self._collect_named_classes(expression.filler, found)

    # ------------------------------------------------------------------------------------------------ #
    # Data ranges                                                                                      #
    # ------------------------------------------------------------------------------------------------ #

    def is_data_range(self, node: Node) -> bool:
        """Tell whether `node` denotes a data range rather than a class expression."""
        graph = self._graph
        if isinstance(node, URIRef):
            return (
                str(node).startswith(_DATATYPE_NAMESPACES) and node != RDFS.Resource
            ) or (node, RDF.type, RDFS.Datatype) in graph
        if not isinstance(node, BNode):
            return False
        if (node, RDF.type, RDFS.Datatype) in graph:
            return True
        if graph.value(node, OWL.onDatatype) is not None or graph.value(node, OWL.datatypeComplementOf) is not None:
            return True
        members = graph.value(node, OWL.oneOf)
        if members is not None:
            return any(isinstance(item, Literal) for item in self._list(members))
        return False

    def data_range(self, node: Node) -> DataRange:
        if isinstance(node, URIRef):
            return Datatype(node)
        if not isinstance(node, BNode):
            return UnsupportedDataRange(f"data range {node!r}")

        graph = self._graph
        datatype = graph.value(node, OWL.onDatatype)
        if datatype is not None:
            if not isinstance(datatype, URIRef):
                return UnsupportedDataRange(f"restriction of anonymous datatype {datatype.n3()}")
            restrictions = graph.value(node, OWL.withRestrictions)
            facets = self._facets(restrictions) if restrictions is not None else ()
            return DatatypeRestriction(datatype, facets)

        operand = graph.value(node, OWL.datatypeComplementOf)
        if operand is not None:
            return DataComplementOf(self.data_range(operand))
        operands = graph.value(node, OWL.intersectionOf)
        if operands is not None:
            return DataIntersectionOf(self._data_operands(operands))
        operands = graph.value(node, OWL.unionOf)
        if operands is not None:
            return DataUnionOf(self._data_operands(operands))
        if graph.value(node, OWL.oneOf) is not None:
            return UnsupportedDataRange("DataOneOf")

        equivalent = graph.value(node, OWL.equivalentClass)
        if equivalent is not None:
            return self.data_range(equivalent)

        return UnsupportedDataRange(f"data range {node.n3()}")

    def _data_operands(self, head: Node) -> tuple[DataRange, ...]:
        return tuple(sorted({self.data_range(item) for item in self._list(head)}, key=sort_key))

    def _facets(self, head: Node) -> tuple[FacetRestriction, ...]:
        facets: list[FacetRestriction] = []
        for item in self._list(head):
            for predicate, value in self._graph.predicate_objects(item):
                facet = _FACETS_BY_PREDICATE.get(predicate)  # type: ignore[arg-type]
                if facet is None or not isinstance(value, Literal):
                    logger.warning("Unsupported facet restriction: %s %s", predicate, value)
                    continue
                facets.append(FacetRestriction(facet, value))
        return tuple(facets)

    # ------------------------------------------------------------------------------------------------ #
    # RDF lists                                                                                        #
    # ------------------------------------------------------------------------------------------------ #

    def _list(self, head: Node) -> list[Node]:
        return list(Collection(self._graph, head))


def _to_int(value: Node) -> int | None:
    if isinstance(value, Literal):
        try:
            return int(value.toPython())
        except (TypeError, ValueError):
            logger.warning("Invalid cardinality: %s", value.n3())
    return None
