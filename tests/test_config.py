from __future__ import annotations

import json

import pytest
import yaml

from sparqlgen import create_config
from sparqlgen.errors import ConfigurationError
from sparqlgen.utils.config import build_probabilities, load_config, validate_user_config


def _config(**general) -> dict:
    values = {
        "project_name": "demo",
        "ontology_path": "ontology.ttl",
        "root_class_iri": "http://example.org/university#Person",
        "query_number": 3,
    }
    values.update(general)
    return {"general": values}


@pytest.mark.parametrize("config_format", ["json", "yml", "yaml"])
def test_packaged_templates_are_valid(tmp_path, config_format):
    path = create_config(config_format=config_format, output_dir=tmp_path)

    assert path.parent == tmp_path.resolve()
    config = load_config(path)
    validate_user_config(config)
    assert build_probabilities(config).conjunction == 0.7


def test_unsupported_template_format(tmp_path):
    with pytest.raises(ConfigurationError):
        create_config(config_format="toml", output_dir=tmp_path)


def test_load_yaml_and_json(tmp_path):
    config = _config()
    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps(config), encoding="utf-8")
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text(yaml.safe_dump(config), encoding="utf-8")

    assert load_config(json_path) == config
    assert load_config(yaml_path) == config


def test_load_rejects_unknown_extension(tmp_path):
    path = tmp_path / "config.txt"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_load_rejects_non_mapping(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(path)


def test_minimal_config_is_valid():
    validate_user_config(_config())


@pytest.mark.parametrize(
    ("config", "message"),
    [
        ({}, "general"),
        ({"general": {"project_name": "x"}}, "ontology_path"),
        (_config(query_number="3"), "query_number"),
        (_config(query_number=True), "query_number"),
        (_config(query_number=0), "positive"),
        (_config(rng_seed=1.5), "rng_seed"),
        (_config(distinct="yes"), "distinct"),
        (_config(imports_mapping=["base.ttl"]), "imports_mapping"),
        (_config(imports_mapping={"http://example.org/base": 3}), "imports_mapping"),
    ],
)
def test_invalid_general_section(config, message):
    with pytest.raises(ConfigurationError, match=message):
        validate_user_config(config)


def test_null_seed_is_valid():
    validate_user_config(_config(rng_seed=None))


def test_unknown_probability_is_rejected():
    config = _config()
    config["probabilities"] = {"teleport": 0.5}
    with pytest.raises(ConfigurationError, match="teleport"):
        validate_user_config(config)


def test_invalid_probability_values_are_rejected():
    config = _config()
    config["probabilities"] = {"conjunction": 0.5}
    with pytest.raises(ConfigurationError, match="sum to 1"):
        validate_user_config(config)


def test_partial_probabilities_keep_defaults():
    config = _config()
    config["probabilities"] = {"filter": 1.0}
    probabilities = build_probabilities(config)
    assert probabilities.filter == 1.0
    assert probabilities.class_assertion == 1.0


def test_imports_mapping_is_valid():
    validate_user_config(_config(imports_mapping={"http://example.org/base": "base.ttl"}))
