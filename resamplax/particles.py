# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
"""Weighted particles.

A particle is either :class:`Heavy`, carrying a weight, a density and a
value, or :class:`Weightless`, carrying only a value.  Weightless
particles count as zero weight everywhere and are left alone by
:func:`split` and :func:`with_weight`.
"""

from typing import Generic, NamedTuple, Union

from resamplax.algebra import Semifield
from resamplax.types import A, D, W


class Heavy(NamedTuple, Generic[W, D, A]):
    """Particle with a weight.

    Attributes:
        weight: Importance weight.
        density: Density value associated with the particle.
        value: Payload.
    """

    weight: W
    density: D
    value: A


class Weightless(NamedTuple, Generic[A]):
    """Particle without a meaningful weight.

    Attributes:
        value: Payload.
    """

    value: A


WeightedParticle = Union[Heavy[W, D, A], Weightless[A]]


def weight_of(particle: WeightedParticle, field: Semifield[W]) -> W:
    """Return the particle's weight, ``field.zero`` if it is weightless."""
    if isinstance(particle, Heavy):
        return particle.weight
    return field.zero


def with_weight(particle: WeightedParticle, weight: W) -> WeightedParticle:
    """Replace the weight of a heavy particle."""
    if isinstance(particle, Heavy):
        return particle._replace(weight=weight)
    return particle


def split(
    particle: WeightedParticle, amount: W, field: Semifield[W]
) -> tuple[WeightedParticle, WeightedParticle]:
    """Split a particle into a part of weight *amount* and the rest.

    The two halves keep the original density and value, and their
    weights add back up to the original weight.

    Args:
        particle: Particle to split.
        amount: Weight of the first half, at most the particle's weight.
        field: Arithmetic of the weight type.

    Returns:
        ``(part, rest)``.  A weightless particle is returned twice.

    Raises:
        ValueError: If *amount* exceeds the particle's weight.
    """
    if not isinstance(particle, Heavy):
        return particle, particle
    if field.lt(particle.weight, amount):
        raise ValueError(
            f'cannot split {field.show(amount)} from a particle of weight '
            f'{field.show(particle.weight)}'
        )
    return (
        particle._replace(weight=amount),
        particle._replace(weight=field.monus(particle.weight, amount)),
    )
