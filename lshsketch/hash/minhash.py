"""
MinHash signatures for Jaccard similarity estimation.

The Jaccard similarity between two sets is the relative number of elements
they share: ``J(A, B) = |A & B| / |A | B|``. A MinHash signature holds, for
each of ``n`` hash functions ``h_i``, the minimum of ``h_i`` over the set.
Since ``Pr[min h_i(A) == min h_i(B)] = J(A, B)``, the fraction of equal
positions of two signatures estimates the Jaccard similarity, with an
expected error of ``1 / sqrt(n)``.

Sets are given as collections of dictionary indices in
``[0, dictionary_size)`` or as boolean membership vectors of length
``dictionary_size``.
"""

from __future__ import annotations

import logging
import math
from typing import AbstractSet, Iterable, Optional, Set, Union

import numpy as np

from lshsketch._config.config import LARGE_SIGNATURE_WARNING, MAX_HASH_VALUE
from lshsketch.errors import InvalidParameter
from lshsketch.hash.universal import UniversalHashFamily
from lshsketch.similarity import convert_to_set, jaccard_index

logger = logging.getLogger(__name__)

SetInput = Union[AbstractSet[int], Iterable[int], np.ndarray]


class MinHash:
    """
    MinHash signature generator over a dictionary of ``dictionary_size`` elements.

    Typical usage:
        >>> mh = MinHash(128, dictionary_size=1000, seed=42)
        >>> sig1 = mh.signature({1, 5, 9, 200})
        >>> sig2 = mh.signature({1, 5, 9, 201})
        >>> estimate = mh.similarity(sig1, sig2)   # ~0.6

    Signatures from two instances are only comparable when both were built
    with the same ``signature_length``, ``dictionary_size`` and ``seed``.

    Attributes:
        signature_length: Number of hash functions, and length of every signature.
        dictionary_size: Size of the universe sets are drawn from.
        coefficients: Read-only ``(signature_length, 2)`` array of ``(a, b)`` pairs.
    """

    def __init__(
        self,
        signature_length: int,
        dictionary_size: int,
        seed: Optional[int] = None,
    ) -> None:
        """
        Draw ``signature_length`` hash functions for sets over ``dictionary_size`` elements.

        Args:
            signature_length: Number of hash functions; the signature size.
            dictionary_size: Size of the dictionary (or of membership vectors).
            seed: Seed for the coefficient draw. The same seed guarantees
                  identical signatures across instantiations.

        Raises:
            InvalidParameter: If either size is not positive, or
                              ``dictionary_size`` is too large for overflow-free hashing.
        """
        if signature_length <= 0:
            raise InvalidParameter(
                f"Signature size should be positive; received {signature_length}"
            )
        if dictionary_size <= 0:
            raise InvalidParameter(
                "Dictionary size (or vector size) should be positive; "
                f"received {dictionary_size}"
            )

        self._family = UniversalHashFamily(signature_length, dictionary_size, seed=seed)
        logger.debug(
            "Initialized MinHash: signature_length=%d, dictionary_size=%d",
            signature_length,
            dictionary_size,
        )

    @classmethod
    def from_error(
        cls,
        target_error: float,
        dictionary_size: int,
        seed: Optional[int] = None,
    ) -> "MinHash":
        """Build a MinHash whose expected estimation error is at most ``target_error``."""
        length = cls.size(target_error)
        if length > LARGE_SIGNATURE_WARNING:
            logger.warning(
                "target_error=%g requires a signature of %d positions", target_error, length
            )
        return cls(length, dictionary_size, seed=seed)

    @classmethod
    def from_coefficients(cls, coefficients: np.ndarray, dictionary_size: int) -> "MinHash":
        """Restore an engine from an exported coefficient table."""
        mh = cls.__new__(cls)
        mh._family = UniversalHashFamily.from_coefficients(coefficients, dictionary_size)
        return mh

    # ------------------------------------------------------------------

    @property
    def signature_length(self) -> int:
        return self._family.count

    @property
    def dictionary_size(self) -> int:
        return self._family.domain_size

    @property
    def coefficients(self) -> np.ndarray:
        return self._family.coefficients

    def signature(self, item: SetInput) -> np.ndarray:
        """
        Compute the MinHash signature of a set.

        Args:
            item: Either a collection of dictionary indices (``{0, 2, 3}``) or
                  a boolean membership vector of length ``dictionary_size``
                  (``[True, False, True, True, False]`` is the same set).

        Returns:
            Read-only int64 array of length ``signature_length``. Positions of
            an empty set hold ``MAX_HASH_VALUE``.

        Raises:
            InvalidParameter: If a membership vector has the wrong length or
                              an index falls outside ``[0, dictionary_size)``.
        """
        indices = self._resolve_indices(item)

        sig = np.full(self.signature_length, MAX_HASH_VALUE, dtype=np.int64)
        if indices.size:
            sig = np.minimum(sig, self._family.evaluate_all(indices).min(axis=1))
        sig.flags.writeable = False
        return sig

    def similarity(self, sig1: np.ndarray, sig2: np.ndarray) -> float:
        """
        Estimate the Jaccard similarity of two sets from their signatures.

        Both signatures must come from this engine (or a compatible one).
        """
        a = np.asarray(sig1).reshape(-1)
        b = np.asarray(sig2).reshape(-1)
        if a.shape != b.shape:
            raise InvalidParameter(
                f"Size of signatures should be the same; received {a.size} and {b.size}"
            )
        if a.size == 0:
            raise InvalidParameter("Signatures must not be empty")
        return float(np.count_nonzero(a == b)) / a.size

    def error(self) -> float:
        """Expected absolute error of :meth:`similarity`."""
        return 1.0 / math.sqrt(self.signature_length)

    # ------------------------------------------------------------------

    @staticmethod
    def size(error: float) -> int:
        """Signature length needed for an expected error of ``error`` (``ceil(1 / error**2)``)."""
        if not 0 < error <= 1:
            raise InvalidParameter(f"error should be in (0, 1]; received {error}")
        return math.ceil(1.0 / (error * error))

    @staticmethod
    def jaccard_index(a: SetInput, b: SetInput) -> float:
        """Exact Jaccard index of two sets (or two boolean vectors)."""
        return jaccard_index(a, b)

    @staticmethod
    def convert_to_set(vector: Iterable[bool]) -> Set[int]:
        return convert_to_set(vector)

    def _resolve_indices(self, item: SetInput) -> np.ndarray:
        if isinstance(item, (set, frozenset)):
            arr = np.asarray(list(item))
        else:
            arr = np.asarray(item if isinstance(item, np.ndarray) else list(item))
            if arr.dtype == np.bool_:
                if arr.ndim != 1 or arr.shape[0] != self.dictionary_size:
                    raise InvalidParameter(
                        f"Size of array should be dict_size ({self.dictionary_size}); "
                        f"received shape {arr.shape}"
                    )
                return np.flatnonzero(arr).astype(np.int64)

        if arr.size == 0:
            return np.empty(0, dtype=np.int64)
        # bool and object (out-of-int64) elements fail here too
        if arr.dtype == np.bool_ or not np.issubdtype(arr.dtype, np.integer):
            raise InvalidParameter(
                f"Set elements must be integer indices; received dtype {arr.dtype}"
            )
        if arr.min() < 0 or arr.max() >= self.dictionary_size:
            raise InvalidParameter(
                f"Set elements must lie in [0, {self.dictionary_size})"
            )
        return np.unique(arr.astype(np.int64).reshape(-1))
