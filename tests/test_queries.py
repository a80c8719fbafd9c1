from __future__ import annotations

import pytest
from rdflib import OWL, RDF, Namespace
from rdflib.plugins.sparql import prepareQuery

from sparqlgen.errors import ConfigurationError, InvalidArgumentError
from sparqlgen.generators.queries import QueryGenerator, QueryGeneratorConfig, write_queries
from sparqlgen.serialization import serialize_query

UNI = Namespace("http://example.org/university#")
EX = Namespace("http://example.org/onto#")

UNIVERSITY_PREFIXES = {"uni": str(UNI), "owl": str(OWL), "rdf": str(RDF)}


def _generator(graph, **overrides) -> QueryGenerator:
    settings = {"root_class_iri": str(UNI.Person), "query_number": 6, "rng_seed": 7}
    settings.update(overrides)
    return QueryGenerator(graph, config=QueryGeneratorConfig(**settings), prefixes=UNIVERSITY_PREFIXES)


def test_fixed_seed_is_reproducible(university_graph):
    first = [serialize_query(query) for query in _generator(university_graph).generate_queries()]
    second = [serialize_query(query) for query in _generator(university_graph).generate_queries()]
    assert first == second


def test_queries_are_about_the_root_class_or_its_subclasses(university_graph):
    generator = _generator(university_graph)
    assert generator.candidate_classes == (UNI.Person, UNI.Professor, UNI.Student)

    for query in generator.generate_queries():
        class_triples = [
            triple
            for triple in query.pattern.triples()
            if triple.subject == query.variable and triple.predicate == RDF.type
        ]
        assert class_triples
        assert class_triples[0].object in generator.candidate_classes
        assert query.distinct


def test_generated_queries_parse(university_graph):
    for query in _generator(university_graph, query_number=20).generate_queries():
        text = serialize_query(query)
        prepareQuery(text)
        for prefix, namespace in query.prefixes.items():
            assert f"PREFIX {prefix}: <{namespace}>" in text


def test_state_is_reset_after_each_query(university_graph):
    generator = _generator(university_graph)
    generator.generate_query()
    for node in university_graph.classes.values():
        assert not node.visited
        assert node.variables == []


def test_owl_thing_root_selects_every_class(university_graph):
    generator = _generator(university_graph, root_class_iri=str(OWL.Thing))
    assert generator.candidate_classes == tuple(sorted(university_graph.classes, key=str))


def test_unknown_root_class_raises(university_graph):
    with pytest.raises(InvalidArgumentError):
        _generator(university_graph, root_class_iri=str(UNI.Spaceship))


def test_distinct_mode_stops_after_consecutive_duplicates(self_restricted_graph):
    config = QueryGeneratorConfig(
        root_class_iri=str(EX.A),
        query_number=3,
        rng_seed=0,
        distinct=True,
        max_distinct_attempts=5,
    )
    # Only the restriction step is random here, so at most two distinct queries exist.
    queries = QueryGenerator(self_restricted_graph, config=config).generate_queries()

    texts = [serialize_query(query) for query in queries]
    assert 1 <= len(texts) <= 2
    assert len(set(texts)) == len(texts)


def test_distinct_mode_returns_unique_queries(university_graph):
    queries = _generator(university_graph, distinct=True, query_number=5).generate_queries()
    texts = [serialize_query(query) for query in queries]
    assert len(set(texts)) == len(texts)


@pytest.mark.parametrize(
    "overrides",
    [
        {"root_class_iri": ""},
        {"query_number": 0},
        {"query_number": True},
        {"max_distinct_attempts": 0},
    ],
)
def test_invalid_configuration(overrides):
    settings = {"root_class_iri": str(UNI.Person)}
    settings.update(overrides)
    with pytest.raises(ConfigurationError):
        QueryGeneratorConfig(**settings)


def test_write_queries(tmp_path, university_graph):
    queries = _generator(university_graph, query_number=3).generate_queries()

    paths = write_queries(queries, tmp_path / "out")

    assert [path.name for path in paths] == ["query0.rq", "query1.rq", "query2.rq"]
    assert paths[1].read_text(encoding="utf-8") == serialize_query(queries[1])
