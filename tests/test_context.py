from __future__ import annotations

from rdflib import RDF, XSD, URIRef, Variable

from sparqlgen.generators.context import GenerationContext, QueryPrefixes, namespace_of, reset
from sparqlgen.generators.variables import VariableAllocator, sanitize_variable_name
from sparqlgen.model import ClassNode, KnowledgeGraph

EX = "http://example.org/onto#"


def test_class_variables_use_the_class_counter():
    allocator = VariableAllocator()
    node = ClassNode(URIRef("http://example.org/onto#My-Class"))

    assert allocator.fresh_class_variable(node) == Variable("My_Class_0")
    assert allocator.fresh_class_variable(node) == Variable("My_Class_1")


def test_anonymous_and_data_value_counters_reset():
    allocator = VariableAllocator()
    assert allocator.fresh_anonymous_variable() == Variable("Var0")
    assert allocator.fresh_anonymous_variable() == Variable("Var1")
    assert allocator.fresh_data_value_variable() == Variable("DataValue0")

    allocator.reset_counters()

    assert allocator.fresh_anonymous_variable() == Variable("Var0")
    assert allocator.fresh_data_value_variable() == Variable("DataValue0")


def test_sanitize_variable_name():
    assert sanitize_variable_name("a.b-c d") == "a_b_c_d"


def test_namespace_of():
    assert namespace_of(f"{EX}Person") == EX
    assert namespace_of("http://example.org/vocab/Person") == "http://example.org/vocab/"


def test_known_prefix_is_reused():
    prefixes = QueryPrefixes({"ex": EX})
    assert prefixes.register(f"{EX}Person") == "ex"
    assert prefixes.register(f"{EX}Course") == "ex"
    assert prefixes.used == {"ex": EX}


def test_unknown_namespace_gets_a_derived_prefix():
    prefixes = QueryPrefixes()
    assert prefixes.register("http://other.org/vocab/Thing") == "vocab"
    # Same last segment, different namespace.
    assert prefixes.register("http://another.org/vocab#Thing") == "vocab1"
    assert prefixes.used == {
        "vocab": "http://other.org/vocab/",
        "vocab1": "http://another.org/vocab#",
    }


def test_known_prefix_name_already_taken_falls_back_to_derived_name():
    prefixes = QueryPrefixes({"ex": EX})
    prefixes.used["ex"] = "http://elsewhere.org/"
    assert prefixes.register(f"{EX}Person") == "onto"


def test_register_builtin_prefixes():
    prefixes = QueryPrefixes()
    prefixes.register_rdf()
    prefixes.register_xsd()
    assert prefixes.used == {"rdf": str(RDF), "xsd": str(XSD)}
    prefixes.clear()
    assert prefixes.used == {}


def test_reset_is_idempotent(make_context):
    graph = KnowledgeGraph()
    node = graph.add_class(URIRef(f"{EX}A"))
    context: GenerationContext = make_context(graph)
    node.visited = True
    node.variables.append(context.variables.fresh_class_variable(node))
    context.variables.fresh_anonymous_variable()
    context.prefixes.register_rdf()

    context.reset()
    context.reset()
    reset(graph)

    assert not node.visited
    assert node.variables == []
    assert context.variables.fresh_class_variable(node) == Variable("A_0")
    assert context.variables.fresh_anonymous_variable() == Variable("Var0")
    assert context.prefixes.used == {}
