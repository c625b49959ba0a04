# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
"""Effective sample size tracking and resampling over generic weights."""

from importlib.metadata import PackageNotFoundError as _PackageNotFoundError
from importlib.metadata import version as _version

from resamplax.accumulator import (
    WeightedAccumulator,
    combine,
    combine_all,
    combine_commutative,
    combine_unordered,
    effective_sample_size,
    empty,
    from_weights,
    observe,
    relative_effective_sample_size,
)
from resamplax.algebra import (
    FractionSemifield,
    LogSemifield,
    RealSemifield,
    Semifield,
)
from resamplax.particles import Heavy, Weightless, split
from resamplax.resampling import (
    draw,
    identity,
    remove_at,
    target_mean_weight,
    target_weight,
)
from resamplax.rng import PRNGSource, RandomSource

try:
    __version__ = _version('resamplax')
except _PackageNotFoundError:
    __version__ = '0.0.0'

__all__ = [
    'FractionSemifield',
    'Heavy',
    'LogSemifield',
    'PRNGSource',
    'RandomSource',
    'RealSemifield',
    'Semifield',
    'WeightedAccumulator',
    'Weightless',
    '__version__',
    'combine',
    'combine_all',
    'combine_commutative',
    'combine_unordered',
    'draw',
    'effective_sample_size',
    'empty',
    'from_weights',
    'identity',
    'observe',
    'relative_effective_sample_size',
    'remove_at',
    'split',
    'target_mean_weight',
    'target_weight',
]
