#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Probabilities steering the query generators."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields

from sparqlgen.errors import ConfigurationError

# Tolerance on the sum of the four graph-pattern-shape probabilities.
SHAPE_SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class GenerationProbabilities:
    """Immutable set of generation probabilities, each in [0, 1].

    Attributes:
        class_constraint_selection: Select one anonymous restriction of the
            current class and expand it.
        class_assertion: Emit a type triple for a non-root class.
        object_property_assertion: Emit an object property triple.
        data_property_assertion: Emit a data property triple.
        inverse_object_property_selection: Emit an object property triple
            in the inverse direction (object to subject).
        new_variable: Allocate a fresh variable for an already visited
            class instead of reusing one of its bound variables.
        link_to_individual: Link to a named individual instead of a variable.
        filter: Attach a FILTER to a data-value variable.
        conjunction: Join two fragments by nesting (AND).
        optional: Join two fragments with OPTIONAL.
        union: Join two fragments with UNION.
        negation: Join two fragments with FILTER NOT EXISTS, FILTER EXISTS
            or MINUS.

    The four graph-pattern-shape probabilities (conjunction, optional,
    union, negation) must sum to 1.
    """

    class_constraint_selection: float = 0.9
    class_assertion: float = 1.0
    object_property_assertion: float = 0.5
    data_property_assertion: float = 0.5
    inverse_object_property_selection: float = 0.8
    new_variable: float = 0.5
    link_to_individual: float = 0.2
    filter: float = 0.5

    conjunction: float = 0.7
    optional: float = 0.1
    union: float = 0.1
    negation: float = 0.1

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                message = f"{item.name} must be a number, got {value!r}."
                raise ConfigurationError(message)
            if not 0.0 <= value <= 1.0:
                message = f"{item.name} must be between 0.0 and 1.0, got {value}."
                raise ConfigurationError(message)

        shape_sum = self.conjunction + self.optional + self.union + self.negation
        if abs(shape_sum - 1.0) > SHAPE_SUM_TOLERANCE:
            message = (
                "The probabilities of the four graph pattern shapes "
                "(conjunction, optional, union, negation) must sum to 1, "
                f"got {shape_sum}."
            )
            raise ConfigurationError(message)

    def as_dict(self) -> dict[str, float]:
        return asdict(self)
