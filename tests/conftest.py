"""Shared fixtures: a small university ontology and hand-built knowledge graphs."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
from rdflib import Graph as RDFGraph, Namespace

from sparqlgen.closure import compute_closures
from sparqlgen.expressions import NamedClass, ObjectHasSelf
from sparqlgen.generators.context import GenerationContext, QueryPrefixes
from sparqlgen.generators.probabilities import GenerationProbabilities
from sparqlgen.generators.variables import VariableAllocator
from sparqlgen.model import KnowledgeGraph
from sparqlgen.ontology_extraction.extraction import extract_knowledge_graph

UNI = Namespace("http://example.org/university#")
EX = Namespace("http://example.org/onto#")

UNIVERSITY_TTL = """
@prefix uni: <http://example.org/university#> .
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .

<http://example.org/university> a owl:Ontology .

uni:Person a owl:Class ;
    owl:disjointWith uni:Organization .
uni:Student a owl:Class ;
    rdfs:subClassOf uni:Person ,
        [ a owl:Restriction ; owl:onProperty uni:takes ; owl:someValuesFrom uni:Course ] .
uni:Professor a owl:Class ;
    rdfs:subClassOf uni:Person .
uni:Course a owl:Class .
uni:Organization a owl:Class .
uni:University a owl:Class ;
    rdfs:subClassOf uni:Organization .

uni:takes a owl:ObjectProperty ;
    rdfs:domain uni:Student ;
    rdfs:range uni:Course .
uni:teaches a owl:ObjectProperty ;
    rdfs:domain uni:Professor ;
    rdfs:range uni:Course .
uni:isTaughtBy a owl:ObjectProperty ;
    owl:inverseOf uni:teaches ;
    rdfs:domain uni:Course ;
    rdfs:range uni:Professor .
uni:worksFor a owl:ObjectProperty ;
    rdfs:domain uni:Professor ;
    rdfs:range uni:University .
uni:orphan a owl:ObjectProperty .

uni:age a owl:DatatypeProperty ;
    rdfs:domain uni:Person ;
    rdfs:range xsd:integer .
uni:credits a owl:DatatypeProperty , owl:FunctionalProperty ;
    rdfs:domain uni:Course ;
    rdfs:range [
        a rdfs:Datatype ;
        owl:onDatatype xsd:integer ;
        owl:withRestrictions ( [ xsd:minInclusive 1 ] [ xsd:maxInclusive 30 ] )
    ] .

uni:alice a owl:NamedIndividual , uni:Professor .
uni:semantics a uni:Course .
"""


@pytest.fixture
def university_rdf() -> RDFGraph:
    graph = RDFGraph()
    graph.parse(data=UNIVERSITY_TTL, format="turtle")
    return graph


@pytest.fixture
def university_graph(university_rdf: RDFGraph) -> KnowledgeGraph:
    return extract_knowledge_graph(university_rdf)


@pytest.fixture
def university_file(tmp_path) -> str:
    path = tmp_path / "university.ttl"
    path.write_text(UNIVERSITY_TTL, encoding="utf-8")
    return str(path)


@pytest.fixture
def make_probabilities() -> Callable[..., GenerationProbabilities]:
    """Factory for probabilities that disable every optional step unless overridden.

    Fragments are always joined by conjunction, unless the shape
    probabilities are overridden as well.
    """

    def factory(**overrides: float) -> GenerationProbabilities:
        values = {
            "class_constraint_selection": 0.0,
            "class_assertion": 0.0,
            "object_property_assertion": 0.0,
            "data_property_assertion": 0.0,
            "inverse_object_property_selection": 0.0,
            "new_variable": 0.0,
            "link_to_individual": 0.0,
            "filter": 0.0,
            "conjunction": 1.0,
            "optional": 0.0,
            "union": 0.0,
            "negation": 0.0,
        }
        values.update(overrides)
        return GenerationProbabilities(**values)

    return factory


@pytest.fixture
def cyclic_graph() -> KnowledgeGraph:
    """A and B pointing at each other through `ex:p` and `ex:q`."""
    graph = KnowledgeGraph()
    a = graph.add_class(EX.A)
    b = graph.add_class(EX.B)
    graph.add_object_property(EX.p)
    graph.add_object_property(EX.q)
    a.object_property_ranges[EX.p] = NamedClass(EX.B)
    b.object_property_ranges[EX.q] = NamedClass(EX.A)
    compute_closures(graph)
    return graph


@pytest.fixture
def self_restricted_graph() -> KnowledgeGraph:
    """Single class A with the anonymous superclass `ex:p some Self`."""
    graph = KnowledgeGraph()
    a = graph.add_class(EX.A)
    graph.add_object_property(EX.p)
    a.direct_anonymous_superclasses.add(ObjectHasSelf(EX.p))
    compute_closures(graph)
    return graph


@pytest.fixture
def make_context() -> Callable[..., GenerationContext]:
    def factory(graph: KnowledgeGraph, seed: int = 0) -> GenerationContext:
        return GenerationContext(
            graph=graph,
            rng=np.random.default_rng(seed),
            variables=VariableAllocator(),
            prefixes=QueryPrefixes(),
        )

    return factory
