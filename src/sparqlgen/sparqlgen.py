#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""SPARQLGen: stochastic SPARQL query generation from OWL ontologies.

This module provides the main API functions for creating configuration
templates and generating query batches from a user configuration file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sparqlgen.generators.queries import QueryGenerator, QueryGeneratorConfig, write_queries
from sparqlgen.ontology_extraction.extraction import ontology_extraction_pipeline
from sparqlgen.patterns import SelectQuery
from sparqlgen.paths import resolve_project_folder
from sparqlgen.utils.config import build_probabilities, load_config, validate_user_config
from sparqlgen.utils.templates import create_config as _create_config

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------------------------------------ #
# Create Config                                                                                    #
# ------------------------------------------------------------------------------------------------ #


def create_config(
    *,
    config_format: str = "json",
    output_dir: str | Path | None = None,
) -> Path:
    """Create a SPARQLGen configuration file from the packaged template.

    Args:
        config_format: Configuration format, one of "json", "yml", "yaml".
        output_dir: Optional destination directory. If None, the current
            working directory is used.

    Returns:
        Path to the created configuration file.
    """
    output_dir_path = Path(output_dir).expanduser().resolve() if output_dir is not None else None
    return _create_config(config_format=config_format, output_dir=output_dir_path)


# ------------------------------------------------------------------------------------------------ #
# Generate Queries                                                                                 #
# ------------------------------------------------------------------------------------------------ #


def generate_queries(
    config_path: str | Path,
    *,
    output_root: str | Path | None = None,
) -> tuple[list[SelectQuery], Path]:
    """Generate a batch of SPARQL queries based on the user's configuration file.

    This is the high-level entry point used by both the CLI and Python
    callers: it loads the ontology, extracts its knowledge graph, generates
    the queries and writes them as `query<i>.rq` files.

    Args:
        config_path: Path to the user's configuration file (JSON or YAML).
        output_root: Optional base directory for SPARQLGen outputs. When
            None, "./output_sparqlgen" under the current working directory
            is used.

    Returns:
        A tuple containing:
            - The generated queries, in generation order.
            - The project folder the queries were written to.
    """
    config_file = Path(config_path).expanduser().resolve()
    config = load_config(config_file)
    validate_user_config(config)
    logger.info("[Query Generation] started")

    general_cfg = config["general"]

    ontology_path = _resolve_against(config_file, general_cfg["ontology_path"])

    imports_mapping = {
        iri: _resolve_against(config_file, path) for iri, path in (general_cfg.get("imports_mapping") or {}).items()
    }

    knowledge_graph, prefixes = ontology_extraction_pipeline(
        ontology_path,
        reasoning=general_cfg.get("reasoning", False),
        imports_mapping=imports_mapping,
    )

    generator_config = QueryGeneratorConfig(
        root_class_iri=general_cfg["root_class_iri"],
        query_number=general_cfg["query_number"],
        rng_seed=general_cfg.get("rng_seed"),
        distinct=general_cfg.get("distinct", False),
        max_distinct_attempts=general_cfg.get("max_distinct_attempts", 100),
        probabilities=build_probabilities(config),
    )
    generator = QueryGenerator(knowledge_graph, config=generator_config, prefixes=prefixes)
    logger.debug("Using %r", generator)
    queries = generator.generate_queries()

    base_root = Path(output_root).expanduser().resolve() if output_root is not None else None
    output_dir = resolve_project_folder(general_cfg["project_name"], output_root=base_root)
    write_queries(queries, output_dir)

    logger.info("[Query Generation] finished")
    return queries, output_dir


def _resolve_against(config_file: Path, path: str) -> Path:
    """Relative paths in a configuration are read from the config file's folder."""
    resolved = Path(path).expanduser()
    if not resolved.is_absolute():
        resolved = config_file.parent / resolved
    return resolved
