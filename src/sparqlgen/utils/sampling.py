#  Software Name: SPARQLGen
#  SPDX-FileCopyrightText: Copyright (c) Orange SA
#  SPDX-License-Identifier: MIT
#
#  This software is distributed under the MIT license, the text of which is available at https://opensource.org/license/MIT/ or see the "LICENSE" file for more details.
#
#  Authors: See CONTRIBUTORS.txt
#  Software description: A stochastic SPARQL query generator driven by OWL ontologies.
#

"""Pseudorandom sampling helpers shared by the query generators.

All helpers take the caller's NumPy `Generator` explicitly so that every
probabilistic choice of a generation run goes through one seeded stream,
in call order. None of them touches NumPy's global random state.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import numpy as np

T = TypeVar("T")

# Bounds used when sampling literal values for primitive datatypes.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
REAL_MIN = -100.0
REAL_MAX = 100.0


def bernoulli(rng: np.random.Generator, probability: float) -> bool:
    """Return True with the given probability.

    A probability of 0.0 never fires and 1.0 always fires, since the draw
    lies in [0, 1).
    """
    return float(rng.random()) < probability


def random_boolean(rng: np.random.Generator) -> bool:
    """Return a fair coin flip."""
    return bool(rng.integers(2))


def random_index(rng: np.random.Generator, size: int) -> int:
    """Return a uniform index in [0, size)."""
    if size <= 0:
        message = "size must be a positive integer."
        raise ValueError(message)
    return int(rng.integers(size))


def random_element(rng: np.random.Generator, items: Sequence[T]) -> T | None:
    """Return a uniformly chosen element of `items`, or None when it is empty.

    Callers pass ordered sequences; sets must be ordered first so that a
    fixed seed always selects the same element.
    """
    if not items:
        return None
    return items[random_index(rng, len(items))]


def random_nonempty_subset(rng: np.random.Generator, items: Sequence[T]) -> list[T]:
    """Return a uniformly chosen non-empty subset of `items`, order preserved.

    Every element is kept with probability 1/2 and the draw is repeated
    while the mask is empty, which is uniform over the 2^n - 1 non-empty
    subsets. An empty input yields an empty list.
    """
    if not items:
        return []
    while True:
        mask = rng.integers(0, 2, size=len(items))
        if mask.any():
            return [item for item, keep in zip(items, mask) if keep]


def random_integer(rng: np.random.Generator, low: int, high: int) -> int:
    """Return a uniform integer in [low, high)."""
    if high == low:
        return low
    if high < low:
        message = f"Invalid integer range [{low}, {high})."
        raise ValueError(message)
    return int(rng.integers(low, high))


def random_real(rng: np.random.Generator, low: float = REAL_MIN, high: float = REAL_MAX) -> float:
    """Return a uniform float in [low, high)."""
    if high == low:
        return low
    if high < low:
        message = f"Invalid real range [{low}, {high})."
        raise ValueError(message)
    return float(rng.uniform(low, high))
