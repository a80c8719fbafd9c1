#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Ontology Extraction Module.

============================
Builds the in-memory `KnowledgeGraph` from an OWL ontology parsed with
rdflib, together with every ontology it transitively imports.

Steps:

1. Collect named classes, object properties, data properties and named
   individuals from their declarations (and, for classes, from their use
   in `rdfs:subClassOf`).
2. Record class axioms: direct named and anonymous superclasses,
   equivalent and disjoint expressions (`owl:equivalentClass`,
   `owl:disjointWith`, `owl:AllDisjointClasses`, `owl:disjointUnionOf`).
3. Record property axioms: direct sub/superproperties, equivalents,
   direct disjoints, inverses and characteristics.
4. Compute the told sub/superclass and sub/superproperty closures, and
   attach every individual to its types and their superclasses.
5. Fill each domain class's property-to-range maps from `rdfs:domain`
   and `rdfs:range`. A property lacking either is ignored with a warning.
6. Run the closure engine and reset all traversal state.

Everything is iterated in IRI order, so extraction is deterministic.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import logging
from pathlib import Path

from rdflib import OWL, RDF, RDFS, Graph as RDFGraph, URIRef
from rdflib.collection import Collection
from rdflib.term import Node

from sparqlgen.closure import compute_closures
from sparqlgen.errors import OntologyLoadError
from sparqlgen.expressions import (
    ClassExpression,
    DataIntersectionOf,
    DataRange,
    NamedClass,
    ObjectIntersectionOf,
    ObjectUnionOf,
    is_top_or_bottom,
    sort_key,
)
from sparqlgen.model import KnowledgeGraph, PropertyCharacteristic, PropertyNode
from sparqlgen.ontology_extraction.parsing import ExpressionParser
from sparqlgen.utils.reasoning import classify_ontology, guess_rdf_format

logger = logging.getLogger(__name__)

_BUILT_IN_NAMESPACES = (str(OWL), str(RDF), str(RDFS), "http://www.w3.org/2001/XMLSchema#")

_OBJECT_PROPERTY_TYPES: dict[URIRef, PropertyCharacteristic | None] = {
    OWL.ObjectProperty: None,
    OWL.InverseFunctionalProperty: PropertyCharacteristic.INVERSE_FUNCTIONAL,
    OWL.SymmetricProperty: PropertyCharacteristic.SYMMETRIC,
    OWL.AsymmetricProperty: PropertyCharacteristic.ASYMMETRIC,
    OWL.ReflexiveProperty: PropertyCharacteristic.REFLEXIVE,
    OWL.IrreflexiveProperty: PropertyCharacteristic.IRREFLEXIVE,
    OWL.TransitiveProperty: PropertyCharacteristic.TRANSITIVE,
}


# ================================================================================================ #
# Public API                                                                                       #
# ================================================================================================ #


def ontology_extraction_pipeline(
    ontology_path: str | Path,
    *,
    reasoning: bool = False,
    imports_mapping: Mapping[str, str | Path] | None = None,
) -> tuple[KnowledgeGraph, dict[str, str]]:
    """Load an ontology file and its imports closure, then extract the knowledge graph.

    Args:
        ontology_path: Path to the ontology, in any format rdflib reads.
        reasoning: Classify the ontology with HermiT first and extract the
            inferred ontology instead of the asserted one.
        imports_mapping: Ontology IRIs mapped to local documents. An
            `owl:imports` target found here is read from the local file
            instead of its IRI.

    Returns:
        The knowledge graph, ready for query generation, and the prefix
        names declared by the ontology mapped to their namespaces.

    Raises:
        OntologyLoadError: If an imported ontology cannot be loaded.
    """
    ontology_file = Path(ontology_path).expanduser().resolve()
    logger.info("Loading ontology from: %s", ontology_file)

    asserted = RDFGraph()
    asserted.parse(str(ontology_file), format=guess_rdf_format(ontology_file))
    prefixes = declared_prefixes(asserted)
    if load_imports_closure(asserted, imports_mapping):
        # The main document keeps its prefix names; imports only add new namespaces.
        for prefix, namespace in declared_prefixes(asserted).items():
            if prefix not in prefixes and namespace not in prefixes.values():
                prefixes[prefix] = namespace

    source = classify_ontology(asserted) if reasoning else asserted
    graph = extract_knowledge_graph(source)
    return graph, prefixes


def load_imports_closure(
    rdf_graph: RDFGraph,
    imports_mapping: Mapping[str, str | Path] | None = None,
) -> list[URIRef]:
    """Parse every ontology transitively imported by `rdf_graph` into it.

    Imports are followed in IRI order. An IRI listed in `imports_mapping`
    is read from the mapped local file, any other IRI is dereferenced by
    rdflib. An ontology already loaded, or declared in `rdf_graph` itself,
    is not read again.

    Returns:
        The IRIs of the imported ontologies, in loading order.

    Raises:
        OntologyLoadError: If an imported ontology cannot be loaded.
    """
    mapping = {str(iri): Path(path) for iri, path in (imports_mapping or {}).items()}
    loaded: set[str] = {str(iri) for iri in rdf_graph.subjects(RDF.type, OWL.Ontology) if isinstance(iri, URIRef)}
    imported: list[URIRef] = []

    pending = sorted({iri for iri in rdf_graph.objects(None, OWL.imports) if isinstance(iri, URIRef)}, key=str)
    while pending:
        iri = pending.pop(0)
        if str(iri) in loaded:
            continue
        loaded.add(str(iri))

        local = mapping.get(str(iri))
        try:
            if local is not None:
                logger.info("Loading imported ontology %s from: %s", iri, local)
                rdf_graph.parse(str(local), format=guess_rdf_format(local))
            else:
                logger.info("Loading imported ontology from: %s", iri)
                rdf_graph.parse(str(iri))
        except Exception as exc:
            message = (
                f"Could not load the imported ontology {iri}: {exc}. "
                "Map its IRI to a local file with 'imports_mapping'."
            )
            raise OntologyLoadError(message) from exc
        imported.append(iri)
        loaded.update(str(item) for item in rdf_graph.subjects(RDF.type, OWL.Ontology) if isinstance(item, URIRef))

        found = {item for item in rdf_graph.objects(None, OWL.imports) if isinstance(item, URIRef)}
        pending = sorted({item for item in found | set(pending) if str(item) not in loaded}, key=str)

    if imported:
        logger.info("Loaded %d imported ontologies", len(imported))
    return imported


def declared_prefixes(rdf_graph: RDFGraph) -> dict[str, str]:
    """Return the prefix names bound in `rdf_graph`, mapped to their namespaces."""
    return {str(prefix): str(namespace) for prefix, namespace in sorted(rdf_graph.namespaces())}


def extract_knowledge_graph(rdf_graph: RDFGraph) -> KnowledgeGraph:
    """Build the knowledge graph of the ontology held in `rdf_graph`."""
    logger.info("Begin extracting OWL entities")
    extractor = _Extractor(rdf_graph)
    graph = extractor.run()
    logger.info("Extracted %r", graph)

    compute_closures(graph)
    graph.reset_traversal_state()
    return graph


# ================================================================================================ #
# Internal helpers                                                                                 #
# ================================================================================================ #


def _is_built_in(iri: Node) -> bool:
    return str(iri).startswith(_BUILT_IN_NAMESPACES)


def _closure(start: URIRef, neighbours: Callable[[URIRef], Iterable[URIRef]]) -> set[URIRef]:
    """Return every node reachable from `start` through `neighbours`, excluding `start`."""
    seen: set[URIRef] = {start}
    stack = [start]
    while stack:
        current = stack.pop()
        for neighbour in neighbours(current):
            if neighbour not in seen:
                seen.add(neighbour)
                stack.append(neighbour)
    seen.discard(start)
    return seen


class _Extractor:
    """One extraction run over an rdflib graph."""

    def __init__(self, rdf_graph: RDFGraph) -> None:
        self._rdf = rdf_graph
        self._graph = KnowledgeGraph()
        self._parser: ExpressionParser | None = None

    def run(self) -> KnowledgeGraph:
        self._declare_entities()
        self._parser = ExpressionParser(
            self._rdf,
            object_properties=self._graph.object_properties.keys(),
            data_properties=self._graph.data_properties.keys(),
        )
        self._process_class_axioms()
        self._process_property_axioms()
        self._compute_hierarchies()
        self._process_individuals()
        self._process_domains_and_ranges()
        return self._graph

    @property
    def parser(self) -> ExpressionParser:
        if self._parser is None:
            message = "The expression parser is created once entities are declared."
            raise RuntimeError(message)
        return self._parser

    def _sorted_uris(self, nodes: Iterable[Node]) -> list[URIRef]:
        return sorted({node for node in nodes if isinstance(node, URIRef)}, key=str)

    def _list(self, head: Node) -> list[Node]:
        return list(Collection(self._rdf, head))

    # ------------------------------------------------------------------------------------------------ #
    # Entities                                                                                         #
    # ------------------------------------------------------------------------------------------------ #

    def _declare_entities(self) -> None:
        rdf = self._rdf
        graph = self._graph

        classes = set(rdf.subjects(RDF.type, OWL.Class)) | set(rdf.subjects(RDF.type, RDFS.Class))
        for child, parent in rdf.subject_objects(RDFS.subClassOf):
            classes.update((child, parent))
        for iri in self._sorted_uris(classes):
            if not _is_built_in(iri):
                graph.add_class(iri)

        for property_type in _OBJECT_PROPERTY_TYPES:
            for iri in self._sorted_uris(rdf.subjects(RDF.type, property_type)):
                if not _is_built_in(iri):
                    graph.add_object_property(iri)
        for iri in self._sorted_uris(rdf.subjects(RDF.type, OWL.DatatypeProperty)):
            if not _is_built_in(iri):
                graph.add_data_property(iri)

        ambiguous = graph.object_properties.keys() & graph.data_properties.keys()
        for iri in sorted(ambiguous, key=str):
            logger.warning("Property %s is declared both as object and data property", iri)

        logger.info(
            "Found %d classes, %d object properties and %d data properties",
            len(graph.classes),
            len(graph.object_properties),
            len(graph.data_properties),
        )

    # ------------------------------------------------------------------------------------------------ #
    # Class axioms                                                                                     #
    # ------------------------------------------------------------------------------------------------ #

    def _process_class_axioms(self) -> None:
        logger.info("Begin extracting OWL class axioms")
        rdf = self._rdf
        graph = self._graph
        parser = self.parser

        for iri, node in sorted(graph.classes.items(), key=lambda item: str(item[0])):
            for parent in rdf.objects(iri, RDFS.subClassOf):
                expression = parser.class_expression(parent)
                if isinstance(expression, NamedClass):
                    self._add_named_superclass(iri, expression.iri)
                else:
                    node.direct_anonymous_superclasses.add(expression)

            for other in (*rdf.objects(iri, OWL.equivalentClass), *rdf.subjects(OWL.equivalentClass, iri)):
                self._add_equivalent(iri, parser.class_expression(other))

            for other in (*rdf.objects(iri, OWL.disjointWith), *rdf.subjects(OWL.disjointWith, iri)):
                self._add_disjoint(iri, parser.class_expression(other))

            for members in rdf.objects(iri, OWL.disjointUnionOf):
                operands = [parser.class_expression(member) for member in self._list(members)]
                self._add_equivalent(iri, ObjectUnionOf(tuple(sorted(set(operands), key=sort_key))))
                self._add_pairwise_disjoint(operands)

        for axiom in rdf.subjects(RDF.type, OWL.AllDisjointClasses):
            members = rdf.value(axiom, OWL.members)
            if members is not None:
                self._add_pairwise_disjoint([parser.class_expression(member) for member in self._list(members)])

    def _add_named_superclass(self, child: URIRef, parent: URIRef) -> None:
        if is_top_or_bottom(NamedClass(parent)) or parent == child:
            return
        parent_node = self._graph.classes.get(parent)
        if parent_node is None:
            logger.warning("Superclass %s of %s is not a known class", parent, child)
            return
        self._graph.classes[child].direct_superclasses.add(parent)
        parent_node.direct_subclasses.add(child)

    def _add_equivalent(self, iri: URIRef, expression: ClassExpression) -> None:
        if expression == NamedClass(iri):
            return
        node = self._graph.classes[iri]
        node.equivalent_classes.add(expression)
        if isinstance(expression, NamedClass) and expression.iri in self._graph.classes:
            self._graph.classes[expression.iri].equivalent_classes.add(NamedClass(iri))

    def _add_disjoint(self, iri: URIRef, expression: ClassExpression) -> None:
        if expression == NamedClass(iri):
            return
        self._graph.classes[iri].disjoint_classes.add(expression)
        if isinstance(expression, NamedClass) and expression.iri in self._graph.classes:
            self._graph.classes[expression.iri].disjoint_classes.add(NamedClass(iri))

    def _add_pairwise_disjoint(self, expressions: list[ClassExpression]) -> None:
        for expression in expressions:
            if not isinstance(expression, NamedClass) or expression.iri not in self._graph.classes:
                continue
            for other in expressions:
                self._add_disjoint(expression.iri, other)

    # ------------------------------------------------------------------------------------------------ #
    # Property axioms                                                                                  #
    # ------------------------------------------------------------------------------------------------ #

    def _process_property_axioms(self) -> None:
        logger.info("Begin extracting property axioms")
        rdf = self._rdf

        for properties in (self._graph.object_properties, self._graph.data_properties):
            for iri, node in sorted(properties.items(), key=lambda item: str(item[0])):
                for parent in rdf.objects(iri, RDFS.subPropertyOf):
                    parent_node = properties.get(parent)
                    if parent_node is None or parent == iri:
                        if not _is_built_in(parent):
                            logger.info("Ignored superproperty %s of %s", parent, iri)
                        continue
                    node.direct_superproperties.add(parent)
                    parent_node.direct_subproperties.add(iri)

                for other in (*rdf.objects(iri, OWL.equivalentProperty), *rdf.subjects(OWL.equivalentProperty, iri)):
                    other_node = properties.get(other)
                    if other_node is not None and other != iri:
                        node.equivalent_properties.add(other)
                        other_node.equivalent_properties.add(iri)

                for other in rdf.objects(iri, OWL.propertyDisjointWith):
                    self._add_disjoint_properties(properties, [iri, other])

                if (iri, RDF.type, OWL.FunctionalProperty) in rdf:
                    node.characteristics.add(PropertyCharacteristic.FUNCTIONAL)

        for iri, node in self._graph.object_properties.items():
            for property_type, characteristic in _OBJECT_PROPERTY_TYPES.items():
                if characteristic is not None and (iri, RDF.type, property_type) in rdf:
                    node.characteristics.add(characteristic)
            for other in (*rdf.objects(iri, OWL.inverseOf), *rdf.subjects(OWL.inverseOf, iri)):
                other_node = self._graph.object_properties.get(other)
                if other_node is None:
                    logger.info("Ignored inverse %s of %s", other, iri)
                    continue
                node.inverse_properties.add(other)
                other_node.inverse_properties.add(iri)

        for axiom in rdf.subjects(RDF.type, OWL.AllDisjointProperties):
            members = rdf.value(axiom, OWL.members)
            if members is None:
                continue
            iris = self._list(members)
            self._add_disjoint_properties(self._graph.object_properties, iris)
            self._add_disjoint_properties(self._graph.data_properties, iris)

    def _add_disjoint_properties(self, properties: Mapping[URIRef, PropertyNode], iris: list[Node]) -> None:
        known = [iri for iri in iris if isinstance(iri, URIRef) and iri in properties]
        for iri in known:
            for other in known:
                if other != iri:
                    properties[iri].direct_disjoint_properties.add(other)

    # ------------------------------------------------------------------------------------------------ #
    # Hierarchies and individuals                                                                      #
    # ------------------------------------------------------------------------------------------------ #

    def _compute_hierarchies(self) -> None:
        classes = self._graph.classes

        def named_equivalents(iri: URIRef) -> set[URIRef]:
            return {
                expression.iri
                for expression in classes[iri].equivalent_classes
                if isinstance(expression, NamedClass) and expression.iri in classes
            }

        for iri, node in classes.items():
            equivalents = _closure(iri, named_equivalents)
            node.superclasses = _closure(
                iri, lambda current: classes[current].direct_superclasses | named_equivalents(current)
            ) - equivalents
            node.subclasses = _closure(
                iri, lambda current: classes[current].direct_subclasses | named_equivalents(current)
            ) - equivalents

        for properties in (self._graph.object_properties, self._graph.data_properties):
            for iri, node in properties.items():
                node.superproperties = _closure(iri, lambda current: properties[current].direct_superproperties)
                node.subproperties = _closure(iri, lambda current: properties[current].direct_subproperties)

    def _process_individuals(self) -> None:
        logger.info("Begin extracting individuals")
        rdf = self._rdf
        classes = self._graph.classes

        individuals = set(rdf.subjects(RDF.type, OWL.NamedIndividual))
        for class_iri in classes:
            individuals.update(rdf.subjects(RDF.type, class_iri))

        for individual in self._sorted_uris(individuals):
            for type_iri in self._sorted_uris(rdf.objects(individual, RDF.type)):
                node = classes.get(type_iri)
                if node is None:
                    continue
                for class_iri in (type_iri, *sorted(node.superclasses, key=str)):
                    classes[class_iri].add_individual(individual)

    # ------------------------------------------------------------------------------------------------ #
    # Domains and ranges                                                                               #
    # ------------------------------------------------------------------------------------------------ #

    def _process_domains_and_ranges(self) -> None:
        rdf = self._rdf
        parser = self.parser

        for iri in sorted(self._graph.object_properties, key=str):
            domains = self._domain_classes(iri)
            ranges = sorted({parser.class_expression(item) for item in rdf.objects(iri, RDFS.range)}, key=sort_key)
            if not domains or not ranges:
                logger.warning("Object property %s has no domains or ranges and will be ignored", iri)
                continue
            range_expression: ClassExpression = ranges[0] if len(ranges) == 1 else ObjectIntersectionOf(tuple(ranges))
            for domain in domains:
                self._graph.classes[domain].object_property_ranges[iri] = range_expression

        for iri in sorted(self._graph.data_properties, key=str):
            domains = self._domain_classes(iri)
            ranges = sorted({parser.data_range(item) for item in rdf.objects(iri, RDFS.range)}, key=sort_key)
            if not domains or not ranges:
                logger.warning("Data property %s has no domains or ranges and will be ignored", iri)
                continue
            data_range: DataRange = ranges[0] if len(ranges) == 1 else DataIntersectionOf(tuple(ranges))
            for domain in domains:
                self._graph.classes[domain].data_property_ranges[iri] = data_range

    def _domain_classes(self, iri: URIRef) -> list[URIRef]:
        """Return the known named classes occurring in the `rdfs:domain` axioms of `iri`."""
        found: set[URIRef] = set()
        for domain in self._rdf.objects(iri, RDFS.domain):
            for class_iri in self.parser.named_classes_in(domain):
                if class_iri in self._graph.classes:
                    found.add(class_iri)
                else:
                    logger.warning("Property %s has an invalid domain: %s", iri, class_iri)
        return sorted(found, key=str)
