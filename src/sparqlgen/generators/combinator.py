#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Randomized binary-tree reducer joining graph pattern fragments."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
import logging

import numpy as np

from sparqlgen.generators.probabilities import GenerationProbabilities
from sparqlgen.patterns import (
    Exists,
    GroupPattern,
    MinusPattern,
    NotExists,
    OptionalPattern,
    UnionPattern,
)
from sparqlgen.utils.sampling import random_index

logger = logging.getLogger(__name__)


class Negation(Enum):
    NOT_EXISTS = "not_exists"
    EXISTS = "exists"
    MINUS = "minus"


_NEGATIONS = (Negation.NOT_EXISTS, Negation.EXISTS, Negation.MINUS)


class PatternCombinator:
    """Join fragments with AND, UNION, OPTIONAL or a negation, at random.

    The shape probabilities come from a validated `GenerationProbabilities`
    so their sum is already known to be 1.
    """

    def __init__(self, rng: np.random.Generator, probabilities: GenerationProbabilities) -> None:
        self._rng = rng
        self._probabilities = probabilities

    def combine(self, fragments: Sequence[GroupPattern], allow_union: bool) -> GroupPattern:
        """Reduce `fragments` to one pattern.

        No fragment gives an empty group and a single fragment is returned
        unchanged. Otherwise the list is cut at a random point in
        [1, len - 1], both halves are combined recursively, and the two
        results are joined by one randomly chosen combinator. When
        `allow_union` is False the union branch degrades to a conjunction.
        """
        if not fragments:
            return GroupPattern()
        if len(fragments) == 1:
            return fragments[0]

        cut = random_index(self._rng, len(fragments) - 1) + 1
        left = self.combine(fragments[:cut], allow_union)
        right = self.combine(fragments[cut:], allow_union)

        probabilities = self._probabilities
        draw = float(self._rng.random())
        if draw < probabilities.conjunction:
            left.add(right)
            return left
        if draw < probabilities.conjunction + probabilities.union:
            if not allow_union:
                left.add(right)
                return left
            return GroupPattern([UnionPattern([left, right])])
        if draw < probabilities.conjunction + probabilities.union + probabilities.optional:
            left.add(OptionalPattern(right))
            return left

        negation = _NEGATIONS[random_index(self._rng, len(_NEGATIONS))]
        if negation is Negation.NOT_EXISTS:
            left.add_filter(NotExists(right))
        elif negation is Negation.EXISTS:
            left.add_filter(Exists(right))
        else:
            left.add(MinusPattern(right))
        return left
