# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
"""Type aliases for resamplax.

Matches the conventions used by Dynamax (``dynamax.types``).
"""

from typing import TypeVar

from jaxtyping import PRNGKeyArray

PRNGKeyT = PRNGKeyArray
"""JAX PRNG key (handles both old and new JAX key formats)."""

W = TypeVar('W')
"""Weight type, any value a :class:`~resamplax.algebra.Semifield` handles."""

D = TypeVar('D')
"""Density carried alongside a particle's weight."""

A = TypeVar('A')
"""Particle payload."""
