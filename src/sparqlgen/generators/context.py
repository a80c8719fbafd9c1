#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Per-run generation context threaded through every generator call."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging

import numpy as np
from rdflib import RDF, XSD

from sparqlgen.generators.variables import VariableAllocator
from sparqlgen.model import KnowledgeGraph

logger = logging.getLogger(__name__)


def namespace_of(iri: str) -> str:
    """Return the namespace part of an IRI, up to and including the last '#' or '/'."""
    text = str(iri)
    cut = max(text.rfind("#"), text.rfind("/"))
    return text[: cut + 1] if cut >= 0 else text


class QueryPrefixes:
    """The prefix declarations one query actually needs.

    Namespaces are resolved against the prefix names the ontology
    declares; an unknown namespace gets a prefix derived from its last
    path segment.
    """

    def __init__(self, known_prefixes: Mapping[str, str] | None = None) -> None:
        self._known_prefixes: dict[str, str] = dict(known_prefixes or {})
        self.used: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"QueryPrefixes(used={self.used!r})"

    def register(self, iri: str) -> str:
        """Record the namespace of `iri` and return the prefix name it is bound to."""
        namespace = namespace_of(iri)
        for prefix, bound in self.used.items():
            if bound == namespace:
                return prefix

        for prefix, bound in self._known_prefixes.items():
            if bound == namespace:
                name = prefix.replace(":", "")
                if name not in self.used:
                    self.used[name] = namespace
                    return name

        name = namespace.rstrip("/#").rsplit("/", 1)[-1].replace("#", "")
        name = "".join(ch if ch.isalnum() or ch in "_-" else "_" for ch in name)
        if not name or not name[0].isalpha():
            name = f"ns{name}"
        # A derived name must not shadow a prefix bound to another namespace.
        base, suffix = name, 1
        while name in self.used:
            name = f"{base}{suffix}"
            suffix += 1
        self.used[name] = namespace
        logger.debug("Derived prefix %r for namespace %s", name, namespace)
        return name

    def clear(self) -> None:
        self.used = {}

    def register_xsd(self) -> None:
        self.used.setdefault("xsd", str(XSD))

    def register_rdf(self) -> None:
        self.used.setdefault("rdf", str(RDF))


@dataclass
class GenerationContext:
    """Mutable state shared by the generators while building one query.

    Attributes:
        graph: The knowledge graph being walked.
        rng: The single pseudorandom stream of the run.
        variables: Allocator for anonymous and data-value variables.
        prefixes: Namespaces referenced by the query under construction.
    """

    graph: KnowledgeGraph
    rng: np.random.Generator
    variables: VariableAllocator = field(default_factory=VariableAllocator)
    prefixes: QueryPrefixes = field(default_factory=QueryPrefixes)

    def reset(self) -> None:
        """Clear all per-query state: graph traversal state, counters and used prefixes."""
        reset(self.graph, self.variables)
        self.prefixes.clear()


def reset(graph: KnowledgeGraph, variables: VariableAllocator | None = None) -> None:
    """Reset traversal state between two queries.

    Clears every visited flag and bound-variable list, zeroes every
    class-local counter and, when given, the allocator's counters.
    Calling it twice is the same as calling it once.
    """
    graph.reset_traversal_state()
    if variables is not None:
        variables.reset_counters()
