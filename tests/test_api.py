from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from rdflib.plugins.sparql import prepareQuery

from sparqlgen import generate_queries
from sparqlgen.errors import InvalidArgumentError
from sparqlgen.paths import resolve_project_folder, slugify_project_name


def _write_config(tmp_path: Path, **general) -> Path:
    values = {
        "project_name": "University Run",
        "ontology_path": "university.ttl",
        "root_class_iri": "http://example.org/university#Person",
        "query_number": 4,
        "rng_seed": 3,
    }
    values.update(general)
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({"general": values}), encoding="utf-8")
    return path


def test_generate_queries_end_to_end(tmp_path, university_file):
    config_path = _write_config(tmp_path)

    queries, output_dir = generate_queries(config_path, output_root=tmp_path / "out")

    assert len(queries) == 4
    assert output_dir == (tmp_path / "out" / "university_run").resolve()
    files = sorted(path.name for path in output_dir.iterdir())
    assert files == ["query0.rq", "query1.rq", "query2.rq", "query3.rq"]
    for name in files:
        prepareQuery((output_dir / name).read_text(encoding="utf-8"))


def test_generate_queries_is_reproducible(tmp_path, university_file):
    config_path = _write_config(tmp_path, project_name="first")
    generate_queries(config_path, output_root=tmp_path / "out")
    config_path = _write_config(tmp_path, project_name="second")
    generate_queries(config_path, output_root=tmp_path / "out")

    for index in range(4):
        first = (tmp_path / "out" / "first" / f"query{index}.rq").read_text(encoding="utf-8")
        second = (tmp_path / "out" / "second" / f"query{index}.rq").read_text(encoding="utf-8")
        assert first == second


def test_generate_queries_with_unknown_root(tmp_path, university_file):
    config_path = _write_config(tmp_path, root_class_iri="http://example.org/university#Spaceship")
    with pytest.raises(InvalidArgumentError):
        generate_queries(config_path, output_root=tmp_path / "out")


def test_slugify_project_name():
    assert slugify_project_name("Héllo  World!") == "hello_world"
    assert slugify_project_name("__a--b__") == "a_b"


def test_resolve_project_folder(tmp_path):
    auto = resolve_project_folder("auto", output_root=tmp_path)
    named = resolve_project_folder("My Project", output_root=tmp_path)

    assert auto.is_dir()
    assert named == (tmp_path / "my_project").resolve()
    with pytest.raises(ValueError):
        resolve_project_folder("!!!", output_root=tmp_path)


def test_imports_mapping_is_read_relative_to_the_config(tmp_path):
    (tmp_path / "ontologies").mkdir()
    (tmp_path / "main.ttl").write_text(
        """
        @prefix owl: <http://www.w3.org/2002/07/owl#> .
        @prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
        <http://example.org/main> a owl:Ontology ; owl:imports <http://example.org/base> .
        <http://example.org/main#Student> a owl:Class ;
            rdfs:subClassOf <http://example.org/base#Person> .
        """,
        encoding="utf-8",
    )
    (tmp_path / "ontologies" / "base.ttl").write_text(
        """
        @prefix owl: <http://www.w3.org/2002/07/owl#> .
        <http://example.org/base#Person> a owl:Class .
        """,
        encoding="utf-8",
    )
    config_path = _write_config(
        tmp_path,
        ontology_path="main.ttl",
        root_class_iri="http://example.org/base#Person",
        query_number=2,
        imports_mapping={"http://example.org/base": "ontologies/base.ttl"},
    )

    queries, _ = generate_queries(config_path, output_root=tmp_path / "out")

    assert len(queries) == 2
