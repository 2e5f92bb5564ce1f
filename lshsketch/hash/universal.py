"""
Universal hash family of affine maps over a finite domain.

Each member ``h_i(x) = (a_i * x + b_i) mod domain_size`` has its own pair of
coefficients drawn uniformly from ``[0, domain_size)``. Coefficients and
arguments are held as int64 and ``domain_size`` is capped at ``2**31 - 1``,
so ``a_i * x + b_i`` never overflows before the remainder is taken.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from lshsketch._config.config import MAX_DOMAIN_SIZE
from lshsketch.errors import InvalidParameter

logger = logging.getLogger(__name__)


class UniversalHashFamily:
    """
    A fixed set of ``count`` randomized affine hash functions.

    The family is immutable once built: the coefficient table is a read-only
    ``(count, 2)`` int64 array whose columns are ``a`` and ``b``.

    Example:
        >>> family = UniversalHashFamily(4, 100, seed=7)
        >>> 0 <= family.evaluate(2, 42) < 100
        True
    """

    def __init__(self, count: int, domain_size: int, seed: Optional[int] = None) -> None:
        self._validate(count, domain_size)

        rng = np.random.default_rng(seed)
        coefficients = rng.integers(0, domain_size, size=(count, 2), dtype=np.int64)
        self._set_state(coefficients, domain_size)

        logger.debug(
            "Generated universal hash family: count=%d, domain_size=%d", count, domain_size
        )

    @classmethod
    def from_coefficients(
        cls, coefficients: np.ndarray, domain_size: int
    ) -> "UniversalHashFamily":
        """Rebuild a family from a previously exported coefficient table."""
        arr = np.array(coefficients, dtype=np.int64)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise InvalidParameter(
                f"Coefficients must have shape (count, 2); received {arr.shape}"
            )
        cls._validate(arr.shape[0], domain_size)
        if arr.size and (arr.min() < 0 or arr.max() >= domain_size):
            raise InvalidParameter(
                f"Coefficients must lie in [0, {domain_size})"
            )

        family = cls.__new__(cls)
        family._set_state(arr, domain_size)
        logger.debug(
            "Restored universal hash family: count=%d, domain_size=%d",
            arr.shape[0],
            domain_size,
        )
        return family

    @property
    def count(self) -> int:
        return self._coefficients.shape[0]

    @property
    def domain_size(self) -> int:
        return self._domain_size

    @property
    def coefficients(self) -> np.ndarray:
        """Read-only ``(count, 2)`` table of ``(a, b)`` pairs."""
        return self._coefficients

    def evaluate(self, index: int, x: int) -> int:
        """Return ``(a[index] * x + b[index]) mod domain_size``."""
        if not 0 <= index < self.count:
            raise InvalidParameter(
                f"Hash function index must be in [0, {self.count}); received {index}"
            )
        if x < 0 or x > MAX_DOMAIN_SIZE:
            raise InvalidParameter(f"x must lie in [0, {MAX_DOMAIN_SIZE}]; received {x}")
        a, b = (int(c) for c in self._coefficients[index])
        return (a * int(x) + b) % self._domain_size

    def evaluate_all(self, xs: Iterable[int]) -> np.ndarray:
        """
        Evaluate every hash function on every element of ``xs``.

        Returns:
            int64 array of shape ``(count, len(xs))``.
        """
        if not isinstance(xs, np.ndarray):
            xs = list(xs)
        values = np.asarray(xs, dtype=np.int64).reshape(-1)
        if values.size and (values.min() < 0 or values.max() > MAX_DOMAIN_SIZE):
            raise InvalidParameter(
                f"Hash arguments must lie in [0, {MAX_DOMAIN_SIZE}]"
            )

        a = self._coefficients[:, 0:1]
        b = self._coefficients[:, 1:2]
        # a, x < 2**31 so a * x + b < 2**62 + 2**31
        return (a * values[np.newaxis, :] + b) % self._domain_size

    # ------------------------------------------------------------------

    @staticmethod
    def _validate(count: int, domain_size: int) -> None:
        if count <= 0:
            raise InvalidParameter(f"count must be greater than zero; received {count}")
        if domain_size <= 0:
            raise InvalidParameter(
                f"domain_size must be greater than zero; received {domain_size}"
            )
        if domain_size > MAX_DOMAIN_SIZE:
            raise InvalidParameter(
                f"domain_size must not exceed {MAX_DOMAIN_SIZE}, otherwise "
                f"a * x + b would overflow 64-bit accumulation; received {domain_size}"
            )

    def _set_state(self, coefficients: np.ndarray, domain_size: int) -> None:
        coefficients.flags.writeable = False
        self._coefficients = coefficients
        self._domain_size = int(domain_size)
