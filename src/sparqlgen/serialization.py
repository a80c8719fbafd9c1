#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""SPARQL 1.1 text rendering of generated queries.

Terms are rendered through an rdflib `NamespaceManager` bound to the
prefixes the query declares, so an IRI is written as a prefixed name
when rdflib can split it under one of them and as `<iri>` otherwise.
No other prefix is ever bound, so every prefixed name in the output has
a matching PREFIX declaration.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path

from rdflib import Graph as RDFGraph, Namespace
from rdflib.namespace import NamespaceManager
from rdflib.term import Identifier

from sparqlgen.patterns import (
    Comparison,
    Element,
    Exists,
    Expression,
    FilterPattern,
    GroupPattern,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    MinusPattern,
    NotExists,
    OptionalPattern,
    SelectQuery,
    TriplePattern,
    UnionPattern,
)

logger = logging.getLogger(__name__)

INDENT = "  "


def build_namespace_manager(prefixes: Mapping[str, str]) -> NamespaceManager:
    """Return a namespace manager bound to exactly `prefixes`."""
    graph = RDFGraph(bind_namespaces="none")
    manager = graph.namespace_manager
    for prefix, namespace in sorted(prefixes.items()):
        manager.bind(prefix, Namespace(namespace), override=True, replace=True)
    return manager


def serialize_query(query: SelectQuery) -> str:
    """Render `query` as SPARQL 1.1 query text."""
    manager = build_namespace_manager(query.prefixes)
    lines: list[str] = [
        f"PREFIX {prefix}: <{namespace}>" for prefix, namespace in sorted(query.prefixes.items())
    ]
    if lines:
        lines.append("")

    keyword = "SELECT DISTINCT" if query.distinct else "SELECT"
    lines.append(f"{keyword} {query.variable.n3()}")
    lines.append("WHERE")
    _write_group(query.pattern, lines, 0, manager)
    return "\n".join(lines) + "\n"


def write_query(query: SelectQuery, path: str | Path) -> Path:
    """Serialize `query` to `path` (UTF-8) and return the resolved path."""
    target = Path(path).resolve()
    target.write_text(serialize_query(query), encoding="utf-8")
    logger.debug("Wrote query to: %s", target)
    return target


# ================================================================================================ #
# Internal helpers                                                                                 #
# ================================================================================================ #


def _term(term: Identifier, manager: NamespaceManager) -> str:
    return term.n3(manager)


def _write_group(group: GroupPattern, lines: list[str], depth: int, manager: NamespaceManager) -> None:
    pad = INDENT * depth
    lines.append(f"{pad}{{")
    for element in group.elements:
        _write_element(element, lines, depth + 1, manager)
    lines.append(f"{pad}}}")


def _write_block(keyword: str, group: GroupPattern, lines: list[str], depth: int, manager: NamespaceManager) -> None:
    """Write `keyword { ... }` with the opening brace on the keyword line."""
    nested: list[str] = []
    _write_group(group, nested, depth, manager)
    pad = INDENT * depth
    lines.append(f"{pad}{keyword} {nested[0].lstrip()}")
    lines.extend(nested[1:])


def _write_element(element: Element, lines: list[str], depth: int, manager: NamespaceManager) -> None:
    pad = INDENT * depth

    if isinstance(element, TriplePattern):
        lines.append(
            f"{pad}{_term(element.subject, manager)} "
            f"{_term(element.predicate, manager)} "
            f"{_term(element.object, manager)} ."
        )
    elif isinstance(element, GroupPattern):
        _write_group(element, lines, depth, manager)
    elif isinstance(element, OptionalPattern):
        _write_block("OPTIONAL", element.pattern, lines, depth, manager)
    elif isinstance(element, MinusPattern):
        _write_block("MINUS", element.pattern, lines, depth, manager)
    elif isinstance(element, UnionPattern):
        for index, alternative in enumerate(element.alternatives):
            if index:
                lines.append(f"{pad}UNION")
            _write_group(alternative, lines, depth, manager)
    elif isinstance(element, FilterPattern):
        expression = element.expression
        if isinstance(expression, NotExists):
            _write_block("FILTER NOT EXISTS", expression.pattern, lines, depth, manager)
        elif isinstance(expression, Exists):
            _write_block("FILTER EXISTS", expression.pattern, lines, depth, manager)
        else:
            lines.append(f"{pad}FILTER ( {_expression(expression, manager)} )")
    else:
        message = f"Cannot serialize pattern element {element!r}."
        raise TypeError(message)


def _expression(expression: Expression, manager: NamespaceManager) -> str:
    if isinstance(expression, Comparison):
        return (
            f"{_term(expression.variable, manager)} "
            f"{expression.op.value} "
            f"{_term(expression.value, manager)}"
        )
    if isinstance(expression, LogicalAnd):
        return f"( {_expression(expression.left, manager)} && {_expression(expression.right, manager)} )"
    if isinstance(expression, LogicalOr):
        return f"( {_expression(expression.left, manager)} || {_expression(expression.right, manager)} )"
    if isinstance(expression, LogicalNot):
        return f"!( {_expression(expression.operand, manager)} )"
    if isinstance(expression, (Exists, NotExists)):
        keyword = "EXISTS" if isinstance(expression, Exists) else "NOT EXISTS"
        nested: list[str] = []
        _write_group(expression.pattern, nested, 0, manager)
        return f"{keyword} " + " ".join(line.strip() for line in nested)

    message = f"Cannot serialize filter expression {expression!r}."
    raise TypeError(message)
