"""Reasoning utilities for SPARQLGen.

This module provides a thin, typed wrapper around Owlready2's HermiT
integration. It is responsible for:

- Normalizing an ontology (file or rdflib graph) to RDF/XML so that
  Owlready2 can load it.
- Guessing the rdflib parser of an ontology file.
- Classifying the ontology with HermiT in an isolated Owlready2 world.
- Handing the asserted plus inferred axioms back as an rdflib graph.

Design
------
- Function-oriented: no classes are introduced here on purpose.
- Internal-only: used by the ontology extraction pipeline when reasoning
  is enabled in the configuration.
- Deterministic given the ontology file; no randomness is involved.

Performance
-----------
The dominant cost is the HermiT process itself, which depends on
ontology size and expressivity.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
import tempfile
from typing import Any, cast

import owlready2
from rdflib import OWL, Graph as RDFGraph
from rdflib.util import guess_format

logger = logging.getLogger(__name__)

# ================================================================================================ #
# Owlready2 / HermiT Type Aliases                                                                  #
# ================================================================================================ #

OntologyHandle = Any

SyncReasonerCallable = Callable[..., None]
sync_reasoner_hermit: SyncReasonerCallable = cast(
    SyncReasonerCallable,
    owlready2.sync_reasoner_hermit,
)

OwlReadyInconsistentOntologyError = owlready2.OwlReadyInconsistentOntologyError

_SNIFFED_SUFFIXES = (".owl", ".rdf", ".xml")


# ================================================================================================ #
# Public Reasoner Helper                                                                           #
# ================================================================================================ #


def classify_ontology(
    ontology: str | Path | RDFGraph,
    *,
    infer_property_values: bool = False,
    debug: bool = False,
) -> RDFGraph:
    """Classify an ontology with HermiT and return the resulting graph.

    The ontology is re-serialized as RDF/XML in a temporary directory,
    without its `owl:imports` statements, loaded into a fresh Owlready2
    world, classified, and the whole world (asserted and inferred axioms)
    is read back with rdflib. Pass an already merged graph to classify an
    imports closure.

    Args:
        ontology: Path to the ontology, in any format rdflib reads, or an
            rdflib graph holding it.
        infer_property_values: Whether to infer property values during reasoning.
        debug: Enable Owlready2 internal debugging.

    Returns:
        An rdflib graph holding the classified ontology.

    Raises:
        OwlReadyInconsistentOntologyError: If the ontology is inconsistent.
    """
    if isinstance(ontology, RDFGraph):
        source = ontology
    else:
        ontology_path = Path(ontology).resolve()
        source = RDFGraph()
        source.parse(str(ontology_path), format=guess_rdf_format(ontology_path))

    with tempfile.TemporaryDirectory(prefix="sparqlgen_reasoner_") as workdir:
        workdir_path = Path(workdir)
        reasoner_input = _build_temp_rdfxml(source, workdir_path)

        world = owlready2.World()
        try:
            ontology_handle: OntologyHandle = world.get_ontology(reasoner_input.as_uri()).load()
            logger.debug("Loaded ontology for reasoning from: %s", reasoner_input)

            try:
                sync_reasoner_hermit(
                    ontology_handle,
                    infer_property_values=infer_property_values,
                    debug=debug,
                )
                logger.info("(HermiT) Consistent ontology")
            except OwlReadyInconsistentOntologyError:
                logger.exception("(HermiT) Inconsistent ontology")
                raise

            classified_path = workdir_path / "classified.rdf"
            world.save(file=str(classified_path), format="rdfxml")
        finally:
            world.close()

        graph = RDFGraph()
        graph.parse(str(classified_path), format="xml")
        logger.debug("Read classified ontology back from: %s", classified_path)

    return graph


def guess_rdf_format(path: str | Path) -> str:
    """Return the rdflib parser name for the ontology file at `path`.

    `.owl`, `.rdf` and `.xml` files are sniffed: content opening with a tag
    is RDF/XML, anything else is read as Turtle. Other extensions follow
    rdflib's own mapping, falling back to Turtle.
    """
    file_path = Path(path)
    if file_path.suffix.lower() in _SNIFFED_SUFFIXES:
        with file_path.open("r", encoding="utf8", errors="ignore") as file:
            head = file.read(1024).lstrip()
        return "xml" if head.startswith("<") else "turtle"
    return guess_format(str(file_path)) or "turtle"


# ================================================================================================ #
# Internal helpers                                                                                 #
# ================================================================================================ #


def _build_temp_rdfxml(source: RDFGraph, workdir: Path) -> Path:
    """Serialize `source` as RDF/XML under `workdir` for Owlready2, dropping `owl:imports`."""
    graph = RDFGraph()
    for prefix, namespace in source.namespaces():
        graph.bind(prefix, namespace, override=False)
    for triple in source:
        if triple[1] != OWL.imports:
            graph.add(triple)

    tmp_path = (workdir / "ontology.rdf").resolve()
    graph.serialize(str(tmp_path), format="xml")
    logger.debug("Serialized temporary ontology for reasoning to: %s", tmp_path)
    return tmp_path
