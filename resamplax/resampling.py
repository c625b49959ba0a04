# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
r"""Particle resampling schemes.

A resampler draws at most one particle per call from a *population* (a
``list`` of :class:`~resamplax.particles.Heavy` /
:class:`~resamplax.particles.Weightless` particles), shrinking it as it
goes.  All resamplers share the signature
``(accumulator, population, rng) -> particle | None``:

- the :class:`~resamplax.accumulator.WeightedAccumulator` is only read,
- the population is modified in place,
- every random draw comes from *rng*, one at a time, in a fixed order.

Two schemes are provided:

- :func:`identity` — multinomial draw of one particle as it is
- :func:`target_weight` — residual-style draw of one particle carrying
  exactly a target weight :math:`T`, splitting particles so the total
  weight of population plus draw is conserved
"""

import logging
from collections.abc import Callable
from typing import Optional, Protocol

from resamplax.accumulator import WeightedAccumulator
from resamplax.algebra import Semifield
from resamplax.particles import WeightedParticle, split, weight_of, with_weight
from resamplax.rng import RandomSource
from resamplax.types import W

logger = logging.getLogger(__name__)


class Resampler(Protocol):
    def __call__(
        self,
        accumulator: WeightedAccumulator,
        population: list[WeightedParticle],
        rng: RandomSource,
    ) -> Optional[WeightedParticle]: ...


# --- Public resampling functions -------------------------------------------


def identity() -> Resampler:
    """Multinomial resampling, one particle at a time.

    Removes a uniformly chosen particle from the population and returns
    it unchanged.  The population must not be empty.

    Returns:
        A resampler raising :class:`ValueError` on an empty population.
    """

    def resample(accumulator, population, rng):
        if not population:
            raise ValueError('cannot resample from an empty population')
        return remove_at(population, rng.uniform_index(len(population)))

    return resample


def target_weight(
    compute_target: Callable[[WeightedAccumulator[W]], W],
    field: Semifield[W],
) -> Resampler:
    r"""Draw one particle of weight exactly :math:`T`.

    :math:`T` is ``compute_target(accumulator)``.  Particles are removed
    uniformly at random until their weights sum to :math:`T`; the last
    one is split so that the running sum lands exactly on :math:`T` and
    its excess goes back into the population.  One of the removed
    particles is then drawn with probability proportional to its (used)
    weight and returned with its weight rewritten to :math:`T`.

    If the population runs out first, with removed weight
    :math:`S < T`, the draw also includes "no particle" with weight
    :math:`T \mathbin{\dot-} S`.

    Args:
        compute_target: Target weight as a function of the accumulator.
        field: Arithmetic of the weight type.

    Returns:
        A resampler returning ``None`` when the target is zero, the
        population is empty, or "no particle" was drawn.
    """

    def resample(accumulator, population, rng):
        target = compute_target(accumulator)
        if field.is_zero(target):
            logger.debug('Target weight is zero; nothing resampled')
            return None

        chosen, total = _collect(target, population, rng, field)
        if not chosen:
            logger.debug('Empty population; nothing resampled')
            return None
        if field.lt(total, target):
            logger.debug(
                'Population exhausted at weight %s of target %s',
                field.show(total),
                field.show(target),
            )

        outcomes = chosen + [(None, field.monus(target, total))]
        i = rng.categorical([field.log(w) for _, w in outcomes])
        particle = outcomes[i][0]
        if particle is None:
            return None
        return with_weight(particle, target)

    return resample


def target_mean_weight(field: Semifield[W]) -> Resampler:
    """:func:`target_weight` aiming at the accumulator's mean weight."""
    return target_weight(lambda accumulator: accumulator.mean_weight, field)


def draw(
    resampler: Resampler,
    accumulator: WeightedAccumulator,
    population: list[WeightedParticle],
    rng: RandomSource,
    num_draws: int,
) -> list[WeightedParticle]:
    """Call *resampler* up to *num_draws* times and keep what it returns.

    Stops early once the population is empty.

    Args:
        resampler: Resampling scheme.
        accumulator: Weight statistics of the population.
        population: Particles to draw from, modified in place.
        rng: Source of randomness.
        num_draws: Maximum number of calls.

    Returns:
        The particles drawn, ``None`` results left out.
    """
    drawn = []
    for _ in range(num_draws):
        if not population:
            break
        particle = resampler(accumulator, population, rng)
        if particle is not None:
            drawn.append(particle)
    return drawn


def remove_at(population: list, i: int):
    """Remove and return ``population[i]`` in constant time.

    The last element takes the place of the removed one, so the order of
    the remaining particles is not preserved.

    Raises:
        IndexError: If *i* is not a valid index.
    """
    if not 0 <= i < len(population):
        raise IndexError(
            f'index {i} out of range for population of {len(population)}'
        )
    last = population.pop()
    if i == len(population):
        return last
    removed = population[i]
    population[i] = last
    return removed


# --- Internal helpers -------------------------------------------------------


def _collect(
    target: W,
    population: list[WeightedParticle],
    rng: RandomSource,
    field: Semifield[W],
) -> tuple[list[tuple[WeightedParticle, W]], W]:
    """Remove random particles until their weights reach *target*.

    Returns the removed particles paired with the weight each contributes,
    and the sum of those weights.
    """
    chosen = []
    total = field.zero
    while population and field.lt(total, target):
        sample = remove_at(population, rng.uniform_index(len(population)))
        weight = weight_of(sample, field)
        new_total = field.add(total, weight)
        if field.lt(new_total, target):
            chosen.append((sample, weight))
            total = new_total
        else:
            amount = field.monus(target, total)
            # Rounding can leave the gap a hair above the weight.
            if field.lt(weight, amount):
                amount = weight
            used, leftover = split(sample, amount, field)
            chosen.append((used, weight_of(used, field)))
            population.append(leftover)
            total = target
    return chosen, total
