# Copyright 2026 Michael Ellis
# SPDX-License-Identifier: Apache-2.0
r"""Numeric capabilities required of particle weights.

Weights are not tied to a floating-point type.  Every operation that does
weight arithmetic takes a :class:`Semifield` instance describing how to
add, multiply, divide, truncate-subtract (monus), compare and print values
of the weight type.  Three instances ship with the package:

- :class:`RealSemifield` — JAX floating scalars
- :class:`FractionSemifield` — exact rationals
- :class:`LogSemifield` — non-negative reals stored as their logarithm
"""

import abc
import math
from fractions import Fraction
from typing import Generic

import jax.numpy as jnp
from jaxtyping import Array, Float

from resamplax.types import W

NATIVE_INT_MAX = 2**31 - 1
"""Largest count injected directly by :meth:`Semifield.from_int`."""

_DIGIT_BITS = 30
_DIGIT_MASK = (1 << _DIGIT_BITS) - 1


class Semifield(abc.ABC, Generic[W]):
    r"""Semifield with monus, order, equality and a textual form.

    Addition and multiplication are associative with identities
    :attr:`zero` and :attr:`one`; every non-zero element has a
    multiplicative inverse.  :meth:`monus` is truncated subtraction,
    :math:`a \mathbin{\dot-} b = \max(a - b, 0)`.

    Attributes:
        commutative: Whether :meth:`mul` commutes.  Merging accumulators
            in arbitrary order is only sound when it does.
    """

    commutative: bool = True

    @property
    @abc.abstractmethod
    def zero(self) -> W:
        """Additive identity."""

    @property
    @abc.abstractmethod
    def one(self) -> W:
        """Multiplicative identity."""

    @abc.abstractmethod
    def add(self, a: W, b: W) -> W: ...

    @abc.abstractmethod
    def mul(self, a: W, b: W) -> W: ...

    @abc.abstractmethod
    def div(self, a: W, b: W) -> W:
        """Return ``a * b^-1``; *b* must be non-zero."""

    @abc.abstractmethod
    def monus(self, a: W, b: W) -> W:
        """Truncated subtraction, never below :attr:`zero`."""

    @abc.abstractmethod
    def lt(self, a: W, b: W) -> bool: ...

    @abc.abstractmethod
    def eq(self, a: W, b: W) -> bool: ...

    @abc.abstractmethod
    def log(self, a: W) -> float:
        """Natural log of the represented value (``-inf`` for zero)."""

    def is_zero(self, a: W) -> bool:
        return self.eq(a, self.zero)

    def show(self, a: W) -> str:
        return str(a)

    def square(self, a: W) -> W:
        return self.mul(a, a)

    def sum_n(self, a: W, n: int) -> W:
        """Add *a* to itself *n* times using repeated doubling.

        Args:
            a: Summand.
            n: Non-negative number of copies.

        Returns:
            ``a + a + ... + a`` (*n* terms), :attr:`zero` when ``n == 0``.
        """
        if n < 0:
            raise ValueError(f'sum_n needs a non-negative count, got {n}')
        total = self.zero
        power = a
        while n:
            if n & 1:
                total = self.add(total, power)
            n >>= 1
            if n:
                power = self.add(power, power)
        return total

    def from_int(self, n: int) -> W:
        """Inject a native-range count as ``one + one + ... + one``."""
        return self.sum_n(self.one, n)

    def from_count(self, n: int) -> W:
        r"""Inject an arbitrarily large count into the weight type.

        Counts within :data:`NATIVE_INT_MAX` go straight through
        :meth:`from_int`.  Larger ones are evaluated from their base
        :math:`2^{30}` digits,

        .. math::

            n = \sum_j r_j \, (2^{30})^j,

        injecting each digit :math:`r_j` natively and combining with
        :meth:`mul` and :meth:`add`, so no step leaves the native range.

        Args:
            n: Count to inject; its magnitude is used.

        Returns:
            The weight equal to ``one`` added to itself *n* times.
        """
        n = abs(n)
        if n <= NATIVE_INT_MAX:
            return self.from_int(n)
        radix = self.from_int(1 << _DIGIT_BITS)
        k = self.one
        acc = self.zero
        while n > NATIVE_INT_MAX:
            digit = self.from_int(n & _DIGIT_MASK)
            acc = self.add(self.mul(k, digit), acc)
            k = self.mul(radix, k)
            n >>= _DIGIT_BITS
        return self.add(self.mul(k, self.from_int(n)), acc)

    def __repr__(self) -> str:
        return f'{type(self).__name__}()'


class RealSemifield(Semifield[Float[Array, '']]):
    """Non-negative reals as JAX floating scalars.

    Args:
        dtype: Floating dtype of every produced weight.  ``float64``
            requires ``jax_enable_x64``.
    """

    def __init__(self, dtype=jnp.float64):
        self.dtype = dtype

    def _cast(self, x) -> Float[Array, '']:
        return jnp.asarray(x, dtype=self.dtype)

    @property
    def zero(self) -> Float[Array, '']:
        return self._cast(0.0)

    @property
    def one(self) -> Float[Array, '']:
        return self._cast(1.0)

    def add(self, a, b):
        return self._cast(jnp.add(a, b))

    def mul(self, a, b):
        return self._cast(jnp.multiply(a, b))

    def div(self, a, b):
        return self._cast(jnp.divide(a, b))

    def monus(self, a, b):
        return self._cast(jnp.maximum(jnp.subtract(a, b), 0.0))

    def lt(self, a, b) -> bool:
        return bool(jnp.less(a, b))

    def eq(self, a, b) -> bool:
        return bool(jnp.equal(a, b))

    def log(self, a) -> float:
        return float(jnp.log(self._cast(a)))

    def show(self, a) -> str:
        return str(float(a))

    def from_int(self, n: int):
        return self._cast(n)

    def __repr__(self) -> str:
        return f'RealSemifield(dtype={jnp.dtype(self.dtype).name})'


class FractionSemifield(Semifield[Fraction]):
    """Exact non-negative rationals."""

    @property
    def zero(self) -> Fraction:
        return Fraction(0)

    @property
    def one(self) -> Fraction:
        return Fraction(1)

    def add(self, a, b):
        return Fraction(a) + Fraction(b)

    def mul(self, a, b):
        return Fraction(a) * Fraction(b)

    def div(self, a, b):
        return Fraction(a) / Fraction(b)

    def monus(self, a, b):
        return max(Fraction(a) - Fraction(b), Fraction(0))

    def lt(self, a, b) -> bool:
        return Fraction(a) < Fraction(b)

    def eq(self, a, b) -> bool:
        return Fraction(a) == Fraction(b)

    def log(self, a) -> float:
        if a == 0:
            return -math.inf
        # Numerator and denominator separately so huge values stay finite.
        a = Fraction(a)
        return math.log(a.numerator) - math.log(a.denominator)

    def from_int(self, n: int) -> Fraction:
        return Fraction(n)


class LogSemifield(Semifield[Float[Array, '']]):
    r"""Non-negative reals represented by their natural logarithm.

    A weight ``x`` is stored as :math:`\log x`, so :attr:`zero` is
    ``-inf``, :attr:`one` is ``0``, addition is ``logaddexp`` and
    multiplication is ``+``.  Useful when importance weights under- or
    overflow in linear space.
    """

    def __init__(self, dtype=jnp.float64):
        self.dtype = dtype

    def _cast(self, x) -> Float[Array, '']:
        return jnp.asarray(x, dtype=self.dtype)

    @property
    def zero(self):
        return self._cast(-jnp.inf)

    @property
    def one(self):
        return self._cast(0.0)

    def add(self, a, b):
        return self._cast(jnp.logaddexp(a, b))

    def mul(self, a, b):
        # -inf + finite stays -inf, which is the absorbing zero.
        return self._cast(jnp.add(a, b))

    def div(self, a, b):
        return self._cast(jnp.subtract(a, b))

    def monus(self, a, b):
        a = self._cast(a)
        b = self._cast(b)
        if not bool(jnp.less(b, a)):
            return self.zero
        if bool(jnp.isneginf(b)):
            return a
        return self._cast(a + jnp.log1p(-jnp.exp(b - a)))

    def lt(self, a, b) -> bool:
        return bool(jnp.less(a, b))

    def eq(self, a, b) -> bool:
        return bool(jnp.equal(a, b))

    def log(self, a) -> float:
        return float(a)

    def show(self, a) -> str:
        return f'exp({float(a)})'

    def from_int(self, n: int):
        return self._cast(jnp.log(jnp.asarray(n, dtype=self.dtype)))

    def __repr__(self) -> str:
        return f'LogSemifield(dtype={jnp.dtype(self.dtype).name})'
