from __future__ import annotations

import numpy as np
import pytest

from sparqlgen.utils.sampling import (
    bernoulli,
    random_element,
    random_integer,
    random_nonempty_subset,
    random_real,
)


def test_bernoulli_boundaries():
    rng = np.random.default_rng(1)
    assert not any(bernoulli(rng, 0.0) for _ in range(200))
    assert all(bernoulli(rng, 1.0) for _ in range(200))


def test_random_element_of_empty_sequence_is_none():
    assert random_element(np.random.default_rng(0), ()) is None


def test_random_element_is_reproducible():
    items = ("a", "b", "c", "d")
    first = [random_element(np.random.default_rng(5), items) for _ in range(3)]
    second = [random_element(np.random.default_rng(5), items) for _ in range(3)]
    assert first == second


def test_nonempty_subset_keeps_order_and_is_never_empty():
    rng = np.random.default_rng(3)
    items = [1, 2, 3, 4, 5]
    for _ in range(100):
        subset = random_nonempty_subset(rng, items)
        assert subset
        assert subset == sorted(subset)
        assert set(subset) <= set(items)


def test_nonempty_subset_of_empty_input():
    assert random_nonempty_subset(np.random.default_rng(0), []) == []


def test_random_integer_bounds():
    rng = np.random.default_rng(0)
    assert random_integer(rng, 4, 4) == 4
    assert all(1 <= random_integer(rng, 1, 3) < 3 for _ in range(50))
    with pytest.raises(ValueError):
        random_integer(rng, 3, 1)


def test_random_real_bounds():
    rng = np.random.default_rng(0)
    assert all(-1.0 <= random_real(rng, -1.0, 1.0) < 1.0 for _ in range(50))
    assert random_real(rng, 2.5, 2.5) == 2.5
