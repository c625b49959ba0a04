# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
"""Shared test fixtures for resamplax."""

from collections.abc import Sequence

import jax
import jax.random as jr
import pytest

import resamplax
from resamplax.algebra import FractionSemifield, LogSemifield, RealSemifield
from resamplax.rng import PRNGSource


class ScriptedSource:
    """RandomSource replaying fixed draws and recording what it was asked.

    ``categorical`` returns the scripted index, or when none is left the
    first outcome with a finite log weight.
    """

    def __init__(self, indices=(), categories=()):
        self.indices = list(indices)
        self.categories = list(categories)
        self.index_calls: list[int] = []
        self.categorical_calls: list[list[float]] = []

    def uniform_index(self, n: int) -> int:
        self.index_calls.append(n)
        i = self.indices.pop(0) if self.indices else n - 1
        assert 0 <= i < n
        return i

    def categorical(self, log_weights: Sequence[float]) -> int:
        self.categorical_calls.append(list(log_weights))
        if self.categories:
            return self.categories.pop(0)
        return next(
            i for i, lw in enumerate(log_weights) if lw != float('-inf')
        )


@pytest.fixture
def package():
    """Return the top-level package module for introspection."""
    return resamplax


@pytest.fixture
def key():
    """Fixed JAX PRNG key for reproducibility."""
    return jr.PRNGKey(42)


@pytest.fixture
def rng(key):
    """PRNG-backed random source seeded from :func:`key`."""
    return PRNGSource(key)


@pytest.fixture
def fractions():
    return FractionSemifield()


@pytest.fixture
def reals():
    return RealSemifield()


@pytest.fixture
def logs():
    return LogSemifield()


@pytest.fixture
def scripted():
    """Factory for :class:`ScriptedSource` instances."""
    return ScriptedSource


# Configure JAX to use 64-bit floats for higher precision in tests.
jax.config.update('jax_enable_x64', True)
