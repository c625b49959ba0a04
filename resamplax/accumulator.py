# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
r"""Online effective sample size (ESS) of a weight stream.

A :class:`WeightedAccumulator` keeps the running mean weight and mean
squared weight of every weight observed so far.  Kish's effective sample
size follows from those two moments,

.. math::

    \mathrm{ESS} = \frac{(\sum_i w_i)^2}{\sum_i w_i^2}
        = n \, \frac{\bar{w}^2}{\overline{w^2}},

which matches Blackjax (``blackjax.smc.ess``) on the same weights.

Accumulators are immutable values.  Weights can be folded in one at a
time with :func:`observe`, and accumulators built on separate partitions
of the data merge with :func:`combine`.
"""

from collections.abc import Iterable
from functools import reduce
from typing import Generic, NamedTuple

from resamplax.algebra import Semifield
from resamplax.types import W


class WeightedAccumulator(NamedTuple, Generic[W]):
    r"""Running moments of observed weights.

    Attributes:
        count: Number of weights observed.
        mean_weight: Arithmetic mean :math:`\bar{w}` of the weights.
        mean_squared_weight: Mean of the squared weights
            :math:`\overline{w^2}`.
    """

    count: int
    mean_weight: W
    mean_squared_weight: W


def empty(field: Semifield[W]) -> WeightedAccumulator[W]:
    """Return the accumulator that has observed nothing.

    It is the identity of :func:`combine`.
    """
    return WeightedAccumulator(0, field.zero, field.zero)


def from_weights(
    weights: Iterable[W], field: Semifield[W]
) -> WeightedAccumulator[W]:
    """Build an accumulator from a finite batch of weights.

    Equivalent to folding :func:`observe` over *weights* starting from
    :func:`empty`, but sums first and divides once.

    Args:
        weights: Observed weights.
        field: Arithmetic of the weight type.

    Returns:
        Accumulator over all of *weights*.
    """
    count = 0
    total = field.zero
    total_squared = field.zero
    for weight in weights:
        count += 1
        total = field.add(total, weight)
        total_squared = field.add(total_squared, field.square(weight))
    if count == 0:
        return empty(field)
    n = field.from_count(count)
    return WeightedAccumulator(
        count, field.div(total, n), field.div(total_squared, n)
    )


def observe(
    accumulator: WeightedAccumulator[W], weight: W, field: Semifield[W]
) -> WeightedAccumulator[W]:
    r"""Fold one more weight into the running moments.

    With :math:`n` previous observations,

    .. math::

        \bar{w}' = \bar{w} \, \frac{n}{n + 1} + \frac{w}{n + 1},

    and likewise for the mean squared weight.  Raw sums are never kept.

    Args:
        accumulator: Current moments.
        weight: Newly observed weight.
        field: Arithmetic of the weight type.

    Returns:
        Moments including *weight*.
    """
    count = accumulator.count + 1
    n = field.from_count(accumulator.count)
    n_next = field.from_count(count)
    correction = field.div(n, n_next)
    return WeightedAccumulator(
        count,
        field.add(
            field.mul(accumulator.mean_weight, correction),
            field.div(weight, n_next),
        ),
        field.add(
            field.mul(accumulator.mean_squared_weight, correction),
            field.div(field.square(weight), n_next),
        ),
    )


def combine(
    a: WeightedAccumulator[W],
    b: WeightedAccumulator[W],
    field: Semifield[W],
) -> WeightedAccumulator[W]:
    """Merge moments accumulated over two disjoint sets of weights.

    Associative, with :func:`empty` as identity.  Only commutative when
    the field's multiplication is; use :func:`combine_commutative` when
    the merge order is not fixed.
    """
    if a.count == 0:
        return b
    if b.count == 0:
        return a
    count = a.count + b.count
    n = field.from_count(count)
    cx = field.div(field.from_count(a.count), n)
    cy = field.div(field.from_count(b.count), n)
    return WeightedAccumulator(
        count,
        field.add(
            field.mul(a.mean_weight, cx), field.mul(b.mean_weight, cy)
        ),
        field.add(
            field.mul(a.mean_squared_weight, cx),
            field.mul(b.mean_squared_weight, cy),
        ),
    )


def combine_commutative(
    a: WeightedAccumulator[W],
    b: WeightedAccumulator[W],
    field: Semifield[W],
) -> WeightedAccumulator[W]:
    """Same merge as :func:`combine`, safe for unordered reduction.

    Raises:
        TypeError: If *field* does not declare commutative
            multiplication.
    """
    _require_commutative(field)
    return combine(a, b, field)


def combine_all(
    accumulators: Iterable[WeightedAccumulator[W]], field: Semifield[W]
) -> WeightedAccumulator[W]:
    """Merge accumulators left to right, in the order given."""
    return reduce(
        lambda a, b: combine(a, b, field), accumulators, empty(field)
    )


def combine_unordered(
    accumulators: Iterable[WeightedAccumulator[W]], field: Semifield[W]
) -> WeightedAccumulator[W]:
    """Merge accumulators whose order carries no meaning.

    Partitions reduced in parallel, or collected from a set, come back in
    no particular order.  That is only sound over a commutative field,
    which is checked before any merging happens.

    Raises:
        TypeError: If *field* does not declare commutative
            multiplication.
    """
    _require_commutative(field)
    return reduce(
        lambda a, b: combine_commutative(a, b, field),
        accumulators,
        empty(field),
    )


def relative_effective_sample_size(
    accumulator: WeightedAccumulator[W], field: Semifield[W]
) -> W:
    r"""Kish's ESS ratio :math:`\bar{w}^2 / \overline{w^2}`.

    Returns ``field.zero`` when every observed weight was zero (including
    when nothing was observed).
    """
    if field.is_zero(accumulator.mean_squared_weight):
        return field.zero
    return field.div(
        field.square(accumulator.mean_weight), accumulator.mean_squared_weight
    )


def effective_sample_size(
    accumulator: WeightedAccumulator[W], field: Semifield[W]
) -> W:
    """Kish's effective sample size, the relative ESS times the count."""
    return field.mul(
        relative_effective_sample_size(accumulator, field),
        field.from_count(accumulator.count),
    )


def accumulator_equal(
    a: WeightedAccumulator[W],
    b: WeightedAccumulator[W],
    field: Semifield[W],
) -> bool:
    """Structural equality using the field's notion of equal weights."""
    return (
        a.count == b.count
        and field.eq(a.mean_weight, b.mean_weight)
        and field.eq(a.mean_squared_weight, b.mean_squared_weight)
    )


def show(accumulator: WeightedAccumulator[W], field: Semifield[W]) -> str:
    return (
        f'WeightedAccumulator(count={accumulator.count}, '
        f'mean_weight={field.show(accumulator.mean_weight)}, '
        f'mean_squared_weight='
        f'{field.show(accumulator.mean_squared_weight)})'
    )


def _require_commutative(field: Semifield) -> None:
    if not field.commutative:
        raise TypeError(
            f'{field!r} does not declare commutative multiplication; '
            'merge with combine() in a fixed order instead'
        )
