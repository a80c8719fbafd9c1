"""Configuration file loading and validation for SPARQLGen.

A configuration file is a JSON or YAML mapping with two sections:

    general:
      project_name: auto            # or any name, slugified for the output folder
      ontology_path: ontology.ttl   # relative paths resolve against the config file
      root_class_iri: http://www.w3.org/2002/07/owl#Thing
      query_number: 10
      rng_seed: null
      distinct: false
      max_distinct_attempts: 100
      reasoning: false
      imports_mapping:              # optional; imported ontology IRI -> local file
        http://example.org/base: base.ttl
    probabilities:                  # optional; omitted keys keep their defaults
      class_constraint_selection: 0.9
      ...

Validation happens here, before anything is generated; the frozen
dataclasses built from the validated mapping re-check their own
invariants.
"""

from __future__ import annotations

from dataclasses import fields
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from sparqlgen.errors import ConfigurationError
from sparqlgen.generators.probabilities import GenerationProbabilities

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".json", ".yml", ".yaml")

# key -> (accepted types, required)
_GENERAL_KEYS: dict[str, tuple[tuple[type, ...], bool]] = {
    "project_name": ((str,), True),
    "ontology_path": ((str,), True),
    "root_class_iri": ((str,), True),
    "query_number": ((int,), True),
    "rng_seed": ((int, type(None)), False),
    "distinct": ((bool,), False),
    "max_distinct_attempts": ((int,), False),
    "reasoning": ((bool,), False),
    "imports_mapping": ((dict, type(None)), False),
}

_PROBABILITY_KEYS = frozenset(item.name for item in fields(GenerationProbabilities))


def load_config(path: str | Path) -> dict[str, Any]:
    """Read a JSON or YAML configuration file into a dictionary.

    Raises:
        ConfigurationError: If the extension is not supported or the file
            does not hold a mapping.
        FileNotFoundError: If the file does not exist.
    """
    config_file = Path(path)
    extension = config_file.suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        message = f"Unsupported config file extension {extension!r}. Expected .json, .yaml, or .yml."
        raise ConfigurationError(message)

    with config_file.open("r", encoding="utf8") as file:
        if extension == ".json":
            config = json.load(file)
        else:
            config = yaml.safe_load(file)

    if not isinstance(config, dict):
        message = f"Config file {config_file} must contain a mapping at top level."
        raise ConfigurationError(message)

    logger.debug("Loaded configuration from: %s", config_file)
    return config


def validate_user_config(config: dict[str, Any]) -> None:
    """Check sections, keys and value types of a loaded configuration.

    Raises:
        ConfigurationError: On the first problem found.
    """
    general = config.get("general")
    if not isinstance(general, dict):
        message = "Config is missing the 'general' section."
        raise ConfigurationError(message)

    for key, (types, required) in _GENERAL_KEYS.items():
        if key not in general:
            if required:
                message = f"Config section 'general' is missing the key {key!r}."
                raise ConfigurationError(message)
            continue
        value = general[key]
        # bool is an int subclass and must not pass as a count.
        if (isinstance(value, bool) and bool not in types) or not isinstance(value, types):
            expected = " or ".join(t.__name__ for t in types)
            message = f"general.{key} must be of type {expected}, got {value!r}."
            raise ConfigurationError(message)

    unknown = set(general) - set(_GENERAL_KEYS)
    if unknown:
        logger.warning("Ignoring unknown keys in section 'general': %s", ", ".join(sorted(unknown)))

    if general["query_number"] <= 0:
        message = "general.query_number must be a positive integer."
        raise ConfigurationError(message)

    for iri, path in (general.get("imports_mapping") or {}).items():
        if not isinstance(iri, str) or not isinstance(path, str):
            message = f"general.imports_mapping must map ontology IRIs to file paths, got {iri!r}: {path!r}."
            raise ConfigurationError(message)

    probabilities = config.get("probabilities", {})
    if probabilities is None:
        probabilities = {}
    if not isinstance(probabilities, dict):
        message = "Config section 'probabilities' must be a mapping."
        raise ConfigurationError(message)

    unknown = set(probabilities) - _PROBABILITY_KEYS
    if unknown:
        message = f"Unknown probabilities: {', '.join(sorted(unknown))}."
        raise ConfigurationError(message)

    # Range and sum checks live in the dataclass.
    build_probabilities(config)


def build_probabilities(config: dict[str, Any]) -> GenerationProbabilities:
    """Build the probabilities of a validated configuration, defaults filling the gaps."""
    return GenerationProbabilities(**(config.get("probabilities") or {}))
