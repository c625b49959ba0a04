# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
"""Tests for resamplax.accumulator — hand-computed values and Blackjax."""

from fractions import Fraction
from functools import reduce

import jax.numpy as jnp
import pytest
from blackjax.smc.ess import ess as blackjax_ess

from resamplax.accumulator import (
    WeightedAccumulator,
    accumulator_equal,
    combine,
    combine_all,
    combine_commutative,
    combine_unordered,
    effective_sample_size,
    empty,
    from_weights,
    observe,
    relative_effective_sample_size,
    show,
)
from resamplax.algebra import FractionSemifield


def _fold(weights, field):
    return reduce(lambda acc, w: observe(acc, w, field), weights, empty(field))


def _fracs(*values):
    return [Fraction(v) for v in values]


class TestConstruction:
    """Empty and batch construction."""

    def test_empty(self, fractions):
        assert empty(fractions) == WeightedAccumulator(0, 0, 0)

    def test_from_no_weights_is_empty(self, fractions):
        assert from_weights([], fractions) == empty(fractions)

    def test_hand_computed(self, fractions):
        """Weights [1, 2, 3, 4]: mean 2.5, mean square 7.5."""
        acc = from_weights(_fracs(1, 2, 3, 4), fractions)
        assert acc.count == 4
        assert acc.mean_weight == Fraction(5, 2)
        assert acc.mean_squared_weight == Fraction(15, 2)

    def test_accepts_generators(self, fractions):
        acc = from_weights((Fraction(w) for w in range(1, 5)), fractions)
        assert acc == from_weights(_fracs(1, 2, 3, 4), fractions)


class TestObserve:
    """Incremental updates agree with the batch constructor."""

    def test_single_observation(self, fractions):
        acc = observe(empty(fractions), Fraction(3), fractions)
        assert acc == WeightedAccumulator(1, Fraction(3), Fraction(9))

    def test_fold_matches_batch_exactly(self, fractions):
        weights = _fracs(1, 5, 2, 0, 7, Fraction(1, 3))
        assert _fold(weights, fractions) == from_weights(weights, fractions)

    def test_fold_matches_batch_floats(self, reals):
        weights = [0.3, 1.7, 2.2, 0.01, 5.0, 0.9]
        folded = _fold(weights, reals)
        batch = from_weights(weights, reals)
        assert folded.count == batch.count
        assert jnp.allclose(folded.mean_weight, batch.mean_weight)
        assert jnp.allclose(
            folded.mean_squared_weight, batch.mean_squared_weight
        )

    def test_fold_matches_batch_log_domain(self, logs):
        weights = [logs.from_int(k) for k in (1, 2, 3, 4)]
        acc = _fold(weights, logs)
        assert jnp.allclose(acc.mean_weight, jnp.log(2.5))
        assert jnp.allclose(acc.mean_squared_weight, jnp.log(7.5))

    def test_does_not_mutate(self, fractions):
        acc = from_weights(_fracs(1, 2), fractions)
        observe(acc, Fraction(10), fractions)
        assert acc == from_weights(_fracs(1, 2), fractions)


class TestCombine:
    """Merging accumulators over partitioned weights."""

    def test_identity(self, fractions):
        a = from_weights(_fracs(1, 2, 3), fractions)
        assert combine(empty(fractions), a, fractions) == a
        assert combine(a, empty(fractions), fractions) == a

    def test_associative(self, fractions):
        a = from_weights(_fracs(1, 2), fractions)
        b = from_weights(_fracs(7), fractions)
        c = from_weights(_fracs(0, 3, Fraction(1, 2), 9), fractions)
        left = combine(combine(a, b, fractions), c, fractions)
        right = combine(a, combine(b, c, fractions), fractions)
        assert left == right

    def test_matches_concatenation(self, fractions):
        xs, ys = _fracs(1, 2, 3), _fracs(4, 5)
        merged = combine(
            from_weights(xs, fractions), from_weights(ys, fractions), fractions
        )
        assert merged == from_weights(xs + ys, fractions)

    def test_combine_all(self, fractions):
        parts = [_fracs(1), _fracs(2, 3), [], _fracs(4)]
        accs = [from_weights(p, fractions) for p in parts]
        assert combine_all(accs, fractions) == from_weights(
            _fracs(1, 2, 3, 4), fractions
        )

    def test_combine_all_of_nothing_is_empty(self, fractions):
        assert combine_all([], fractions) == empty(fractions)

    def test_commutative_combine(self, fractions):
        a = from_weights(_fracs(1, 2), fractions)
        b = from_weights(_fracs(3), fractions)
        assert combine_commutative(a, b, fractions) == combine_commutative(
            b, a, fractions
        )

    def test_unordered_any_order(self, reals):
        accs = [from_weights(p, reals) for p in ([1.0, 2.0], [3.0], [4.0])]
        forward = combine_unordered(accs, reals)
        backward = combine_unordered(reversed(accs), reals)
        assert forward.count == backward.count == 4
        assert jnp.allclose(forward.mean_weight, backward.mean_weight)
        assert jnp.allclose(forward.mean_weight, 2.5)


class TestNonCommutativeField:
    """The commutative merge is refused when multiplication may not commute."""

    @pytest.fixture
    def field(self):
        class OrderedFractions(FractionSemifield):
            commutative = False

        return OrderedFractions()

    def test_ordered_combine_still_works(self, field):
        a = from_weights(_fracs(1), field)
        b = from_weights(_fracs(3), field)
        assert combine(a, b, field).mean_weight == 2

    def test_commutative_combine_rejected(self, field):
        a = from_weights(_fracs(1), field)
        with pytest.raises(TypeError):
            combine_commutative(a, a, field)

    def test_unordered_rejected_even_when_empty(self, field):
        with pytest.raises(TypeError):
            combine_unordered([], field)


class TestEffectiveSampleSize:
    """Kish's ESS from the running moments."""

    def test_hand_computed(self, fractions):
        acc = from_weights(_fracs(1, 2, 3, 4), fractions)
        assert relative_effective_sample_size(acc, fractions) == Fraction(5, 6)
        assert effective_sample_size(acc, fractions) == Fraction(10, 3)

    def test_hand_computed_floats(self, reals):
        acc = from_weights([1.0, 2.0, 3.0, 4.0], reals)
        assert jnp.allclose(relative_effective_sample_size(acc, reals), 5 / 6)
        assert jnp.allclose(effective_sample_size(acc, reals), 10 / 3)

    @pytest.mark.parametrize('n', [1, 2, 17, 100])
    def test_uniform_weights(self, fractions, n):
        """n copies of one weight -> relative ESS 1 and ESS n, exactly."""
        acc = _fold([Fraction(3, 7)] * n, fractions)
        assert relative_effective_sample_size(acc, fractions) == 1
        assert effective_sample_size(acc, fractions) == n

    def test_degenerate(self, fractions):
        """One non-zero weight among n -> ESS 1."""
        acc = from_weights(_fracs(0, 0, 5, 0), fractions)
        assert effective_sample_size(acc, fractions) == 1

    def test_empty_is_zero(self, fractions, reals, logs):
        for field in (fractions, reals, logs):
            acc = empty(field)
            assert field.is_zero(relative_effective_sample_size(acc, field))
            assert field.is_zero(effective_sample_size(acc, field))

    def test_all_zero_weights(self, fractions):
        acc = from_weights(_fracs(0, 0, 0), fractions)
        assert effective_sample_size(acc, fractions) == 0

    def test_count_beyond_native_range(self, fractions):
        """ESS injects counts past 2^31 through the base 2^30 digits."""
        n = 2**40 + 3
        acc = WeightedAccumulator(n, Fraction(2), Fraction(4))
        assert effective_sample_size(acc, fractions) == n

    def test_log_domain(self, logs):
        acc = from_weights([logs.from_int(k) for k in (1, 2, 3, 4)], logs)
        assert jnp.allclose(effective_sample_size(acc, logs), jnp.log(10 / 3))


class TestESSMatchesBlackjax:
    """Cross-validate ESS against blackjax.smc.ess on the same weights."""

    @pytest.mark.parametrize(
        'log_weights',
        [
            jnp.array([1.0, 2.0, 3.0, 4.0, 5.0]),
            jnp.array([-10.0, -5.0, 0.0, 5.0, 10.0]),
            jnp.array([100.0, 100.0, 100.0, 99.0, 99.0]),
        ],
    )
    def test_log_domain(self, logs, log_weights):
        acc = from_weights(list(log_weights), logs)
        ours = jnp.exp(effective_sample_size(acc, logs))
        assert jnp.allclose(ours, blackjax_ess(log_weights), atol=1e-5)

    def test_linear_domain(self, reals):
        log_weights = jnp.array([-1.0, 0.5, 0.0, -3.0])
        acc = _fold(list(jnp.exp(log_weights)), reals)
        assert jnp.allclose(
            effective_sample_size(acc, reals),
            blackjax_ess(log_weights),
            atol=1e-5,
        )


class TestEqualityAndShow:
    """Structural equality through the field, and textual form."""

    def test_equal(self, fractions):
        weights = _fracs(1, 2, Fraction(1, 3))
        a = from_weights(weights, fractions)
        b = _fold(weights, fractions)
        assert accumulator_equal(a, b, fractions)

    def test_not_equal(self, fractions):
        a = from_weights(_fracs(1, 2), fractions)
        b = from_weights(_fracs(1, 3), fractions)
        assert not accumulator_equal(a, b, fractions)
        assert not accumulator_equal(a, empty(fractions), fractions)

    def test_show(self, fractions):
        acc = from_weights(_fracs(1, 2), fractions)
        assert show(acc, fractions) == (
            'WeightedAccumulator(count=2, mean_weight=3/2, '
            'mean_squared_weight=5/2)'
        )
