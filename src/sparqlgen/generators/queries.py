#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Query Generator Module.

=========================
This module drives the generation of a batch of SPARQL SELECT queries
over an already extracted knowledge graph.

Main abstractions:

- QueryGeneratorConfig:
    Immutable configuration: root class, number of queries, seed,
    distinct mode and generation probabilities.

- QueryGenerator:
    Orchestrator that, for every query:
      - picks a class among the root class and its subclasses
      - allocates the class variable projected by the query
      - builds the WHERE pattern with `GraphPatternGenerator`
      - wraps it in a `SelectQuery` carrying the prefixes it uses
      - resets the traversal state of the knowledge graph

Randomness and Determinism
--------------------------
All randomness goes through one NumPy `Generator` owned by
`QueryGenerator`. With a fixed `rng_seed` and the same knowledge graph,
a run always yields the same queries in the same order.

Distinct Mode
-------------
When `distinct` is set, a query whose serialized text equals an earlier
one is dropped and generation continues. At most
`max_distinct_attempts` consecutive duplicates are tolerated before the
run stops with fewer queries than requested.

Intended Use
------------
    config = QueryGeneratorConfig(root_class_iri="http://example.org/Thing")
    generator = QueryGenerator(graph, config=config, prefixes=prefixes)
    queries = generator.generate_queries()
    write_queries(queries, output_directory)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
from pathlib import Path

import numpy as np
from rdflib import OWL, URIRef
from tqdm.auto import tqdm

from sparqlgen.errors import ConfigurationError, InvalidArgumentError
from sparqlgen.generators.context import GenerationContext, QueryPrefixes
from sparqlgen.generators.graph_patterns import GraphPatternGenerator
from sparqlgen.generators.probabilities import GenerationProbabilities
from sparqlgen.generators.variables import VariableAllocator
from sparqlgen.model import KnowledgeGraph
from sparqlgen.patterns import SelectQuery
from sparqlgen.serialization import serialize_query, write_query
from sparqlgen.utils.sampling import random_element

logger = logging.getLogger(__name__)

_TOP_AND_BOTTOM = frozenset({OWL.Thing, OWL.Nothing})


# ================================================================================================ #
# Configuration                                                                                    #
# ================================================================================================ #


@dataclass(frozen=True)
class QueryGeneratorConfig:
    """Immutable configuration for the query generator.

    Attributes:
        root_class_iri: IRI of the class whose subclasses (and itself) the
            queries are about. owl:Thing selects every class of the graph.
        query_number: Number of queries to generate.
        rng_seed: Optional RNG seed for deterministic behavior.
        distinct: Whether duplicate queries are discarded.
        max_distinct_attempts: Consecutive duplicates tolerated in distinct
            mode before giving up.
        probabilities: Probabilities steering every random choice.
    """

    root_class_iri: str
    query_number: int = 1
    rng_seed: int | None = None
    distinct: bool = False
    max_distinct_attempts: int = 100
    probabilities: GenerationProbabilities = field(default_factory=GenerationProbabilities)

    def __post_init__(self) -> None:
        if not self.root_class_iri:
            message = "root_class_iri must be a non-empty string."
            raise ConfigurationError(message)

        if isinstance(self.query_number, bool) or self.query_number <= 0:
            message = "query_number must be a positive integer."
            raise ConfigurationError(message)

        if self.max_distinct_attempts <= 0:
            message = "max_distinct_attempts must be a positive integer."
            raise ConfigurationError(message)


# ================================================================================================ #
# Query Generator                                                                                  #
# ================================================================================================ #


class QueryGenerator:
    """Generate SPARQL SELECT queries from a knowledge graph.

    Notes:
        - Determinism is controlled by the `rng_seed` field of
          `QueryGeneratorConfig`. If `rng_seed` is None, each run is
          stochastic.
        - The generator mutates the traversal state of `graph` while a
          query is built and resets it afterwards; two generators must not
          share one graph concurrently.
        - This class is not intended for inheritance.
    """

    def __init__(
        self,
        graph: KnowledgeGraph,
        *,
        config: QueryGeneratorConfig,
        prefixes: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the generator and locate the root class.

        Args:
            graph: Knowledge graph with closures already computed.
            config: Immutable configuration parameters for this generator.
            prefixes: Prefix names declared by the ontology, mapped to
                their namespaces; used to name query prefixes.

        Raises:
            InvalidArgumentError: If the root class is not in `graph`.
        """
        self._config = config
        self._graph = graph
        self._rng: np.random.Generator = np.random.default_rng(config.rng_seed)
        self._context = GenerationContext(
            graph=graph,
            rng=self._rng,
            variables=VariableAllocator(),
            prefixes=QueryPrefixes(prefixes),
        )
        self._patterns = GraphPatternGenerator(self._context, config.probabilities)
        self._candidate_classes = self._resolve_candidate_classes()

    def __repr__(self) -> str:
        return (
            "QueryGenerator("
            f"root_class_iri={self._config.root_class_iri!r}, "
            f"query_number={self._config.query_number}, "
            f"distinct={self._config.distinct}, "
            f"rng_seed={self._config.rng_seed}"
            ")"
        )

    @property
    def candidate_classes(self) -> tuple[URIRef, ...]:
        return self._candidate_classes

    def generate_query(self) -> SelectQuery:
        """Generate one query, then reset the per-query state."""
        context = self._context
        try:
            class_iri = random_element(self._rng, self._candidate_classes)
            node = self._graph.get_class(class_iri)
            variable = context.variables.fresh_class_variable(node)
            pattern = self._patterns.from_named_class(variable, class_iri, is_root=True)
            return SelectQuery(
                variable=variable,
                pattern=pattern,
                prefixes=dict(sorted(context.prefixes.used.items())),
                distinct=True,
            )
        finally:
            context.reset()

    def generate_queries(self) -> list[SelectQuery]:
        """Run the full batch and return the queries in generation order."""
        logger.info("Begin generating SPARQL queries")
        if self._config.distinct:
            return self._generate_distinct_queries()

        return [
            self.generate_query()
            for _ in tqdm(
                range(self._config.query_number),
                desc="Generating queries",
                unit="queries",
                colour="green",
            )
        ]

    # ------------------------------------------------------------------------------------------------ #
    # Internal helpers                                                                                 #
    # ------------------------------------------------------------------------------------------------ #

    def _resolve_candidate_classes(self) -> tuple[URIRef, ...]:
        root_iri = URIRef(self._config.root_class_iri)
        root = self._graph.classes.get(root_iri)

        if root is None and root_iri == OWL.Thing:
            candidates = tuple(sorted(self._graph.classes, key=str))
        elif root is None:
            message = f"Root class {root_iri} is not a class of the knowledge graph."
            raise InvalidArgumentError(message)
        else:
            logger.info("Found root class with IRI: %s", root_iri)
            candidates = root.subclasses_and_itself()

        candidates = tuple(iri for iri in candidates if iri not in _TOP_AND_BOTTOM)
        if not candidates:
            message = f"Root class {root_iri} has no named class to generate queries from."
            raise InvalidArgumentError(message)
        return candidates

    def _generate_distinct_queries(self) -> list[SelectQuery]:
        queries: list[SelectQuery] = []
        seen: set[str] = set()
        attempts = 0
        duplicates = 0

        with tqdm(
            total=self._config.query_number,
            desc="Generating distinct queries",
            unit="queries",
            colour="green",
        ) as progress:
            while len(queries) < self._config.query_number:
                query = self.generate_query()
                attempts += 1
                text = serialize_query(query)
                if text in seen:
                    duplicates += 1
                    if duplicates >= self._config.max_distinct_attempts:
                        logger.warning(
                            "Stopped after %d consecutive duplicate queries: "
                            "%d of %d distinct queries generated",
                            duplicates,
                            len(queries),
                            self._config.query_number,
                        )
                        break
                    continue
                duplicates = 0
                seen.add(text)
                queries.append(query)
                progress.update(1)

        logger.info("%d SPARQL queries generated with %d attempts", len(queries), attempts)
        return queries


def write_queries(queries: Iterable[SelectQuery], output_directory: str | Path) -> list[Path]:
    """Write each query as `query<i>.rq` under `output_directory`, numbered from 0."""
    directory = Path(output_directory).resolve()
    directory.mkdir(parents=True, exist_ok=True)

    paths = [write_query(query, directory / f"query{index}.rq") for index, query in enumerate(queries)]
    logger.info("Serialized %d queries to: %s", len(paths), directory)
    return paths
