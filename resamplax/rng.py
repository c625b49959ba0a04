# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
"""Sources of randomness for the resamplers.

Resamplers never touch a global generator.  They take a
:class:`RandomSource` and ask it for one draw at a time, in a fixed order,
so that a seeded source reproduces the same resampling run.
"""

from collections.abc import Sequence
from typing import Protocol

import jax.numpy as jnp
import jax.random as jr

from resamplax.types import PRNGKeyT


class RandomSource(Protocol):
    """Draws consumed by the resamplers."""

    def uniform_index(self, n: int) -> int:
        """Draw an index uniformly from ``range(n)``."""
        ...

    def categorical(self, log_weights: Sequence[float]) -> int:
        """Draw index ``i`` with probability proportional to
        ``exp(log_weights[i])``."""
        ...


class PRNGSource:
    """:class:`RandomSource` backed by a JAX PRNG key.

    Each draw splits the held key once and consumes the new subkey.

    Args:
        key: JAX PRNG key to start from.
    """

    def __init__(self, key: PRNGKeyT):
        self._key = key

    @classmethod
    def from_seed(cls, seed: int) -> 'PRNGSource':
        return cls(jr.PRNGKey(seed))

    @property
    def key(self) -> PRNGKeyT:
        """Key the next draw will split."""
        return self._key

    def _next_key(self) -> PRNGKeyT:
        self._key, subkey = jr.split(self._key)
        return subkey

    def uniform_index(self, n: int) -> int:
        if n <= 0:
            raise ValueError(f'cannot draw an index from range({n})')
        return int(jr.randint(self._next_key(), (), 0, n))

    def categorical(self, log_weights: Sequence[float]) -> int:
        logits = jnp.asarray(log_weights)
        return int(jr.categorical(self._next_key(), logits))
