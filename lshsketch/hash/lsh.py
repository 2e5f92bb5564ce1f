"""
Locality-Sensitive Hashing banding over fixed-length signatures.

A signature is divided into ``stages`` contiguous bands and each band is
folded into one of ``buckets`` bucket identifiers. Two items whose
identifiers agree in at least one stage are candidate-similar pairs: rows
within a stage are AND-ed, stages are OR-ed.

As described in Leskovec, Rajaraman & Ullman, "Mining of Massive Datasets",
Cambridge University Press, 2014.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

import numpy as np

from lshsketch._config.config import (
    DEFAULT_BUCKETS,
    DEFAULT_STAGES,
    LARGE_PRIME,
    MAX_BUCKETS,
    MAX_HASH_VALUE,
    BandAssignment,
)
from lshsketch.errors import InvalidParameter

SignatureInput = Union[np.ndarray, Sequence[int], Sequence[bool]]


class LSH:
    """
    Banding engine folding a signature into ``stages`` bucket identifiers.

    The engine is stateless apart from ``(stages, buckets)``; the same
    instance can hash MinHash (integer) and Super-Bit (boolean) signatures.

    Theory:
        - More stages → higher recall (more chances to collide)
        - More rows per stage → higher precision (harder to collide per stage)
        - Rows per stage = ``len(signature) // stages``; the last stage
          absorbs the remainder

    Typical usage:
        >>> lsh = LSH(stages=4, buckets=100)
        >>> assignment = lsh.hash_signature([3, 1, 4, 1, 5, 9, 2, 6])
        >>> len(assignment)
        4

    Attributes:
        stages: Number of bands.
        buckets: Number of buckets per band.
    """

    def __init__(self, stages: int = DEFAULT_STAGES, buckets: int = DEFAULT_BUCKETS) -> None:
        """
        Args:
            stages: Number of bands, ``>= 1``.
            buckets: Buckets per band, ``1 <= buckets <= MAX_BUCKETS``.

        Raises:
            InvalidParameter: If either parameter is out of range.
        """
        if stages <= 0:
            raise InvalidParameter(f"stages must be greater than zero; received {stages}")
        if buckets <= 0:
            raise InvalidParameter(f"buckets must be greater than zero; received {buckets}")
        if buckets > MAX_BUCKETS:
            raise InvalidParameter(
                f"buckets must not exceed {MAX_BUCKETS}; received {buckets}"
            )

        self.stages = stages
        self.buckets = buckets
        # (v * LARGE_PRIME) mod B == ((v mod B) * (LARGE_PRIME mod B)) mod B
        self._prime_mod_buckets = LARGE_PRIME % buckets

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return f"LSH(stages={self.stages}, buckets={self.buckets})"

    def stage_bounds(self, length: int) -> List[Tuple[int, int]]:
        """
        Return the ``[start, end)`` slice of each stage for a signature of ``length``.

        Example:
            >>> LSH(stages=3).stage_bounds(11)
            [(0, 3), (3, 6), (6, 11)]
        """
        if length < self.stages:
            raise InvalidParameter(
                f"Signature of length {length} is too short for {self.stages} stages"
            )
        rows = length // self.stages
        starts = [stage * rows for stage in range(self.stages)]
        ends = starts[1:] + [length]
        return list(zip(starts, ends))

    def hash_signature(self, signature: SignatureInput) -> BandAssignment:
        """
        Hash a signature into one bucket identifier per stage.

        Integer signatures accumulate ``value * LARGE_PRIME`` modulo
        ``buckets``. Boolean signatures accumulate ``(i + 1) * LARGE_PRIME``
        for every set bit ``i`` modulo ``MAX_HASH_VALUE`` and are reduced
        modulo ``buckets`` at the end.

        Args:
            signature: 1-D integer or boolean array-like.

        Returns:
            BandAssignment of ``stages`` integers in ``[0, buckets)``.

        Raises:
            InvalidParameter: If the signature is not 1-D, is shorter than
                              ``stages``, or holds non-integer values.
        """
        sig = self._validate_signature(signature)
        starts = np.array([start for start, _ in self.stage_bounds(sig.shape[0])])

        if sig.dtype == np.bool_:
            positions = np.arange(1, sig.shape[0] + 1, dtype=np.int64)
            terms = np.where(sig, (positions * LARGE_PRIME) % MAX_HASH_VALUE, 0)
            acc = np.add.reduceat(terms, starts) % MAX_HASH_VALUE
            acc %= self.buckets
        else:
            terms = (np.mod(sig, self.buckets) * self._prime_mod_buckets) % self.buckets
            acc = np.add.reduceat(terms, starts) % self.buckets

        return BandAssignment(tuple(int(bucket) for bucket in acc))

    def candidates(self, first: BandAssignment, second: BandAssignment) -> bool:
        """True when two assignments from this engine collide in any stage."""
        for assignment in (first, second):
            if len(assignment) != self.stages:
                raise InvalidParameter(
                    f"Expected {self.stages} bucket identifiers, received {len(assignment)}"
                )
        return first.collides_with(second)

    def _validate_signature(self, signature: SignatureInput) -> np.ndarray:
        sig = np.asarray(signature)
        if sig.ndim != 1:
            raise InvalidParameter(f"Signature must be 1-D; received shape {sig.shape}")
        if sig.shape[0] < self.stages:
            raise InvalidParameter(
                f"Signature of length {sig.shape[0]} is too short for {self.stages} stages"
            )
        if sig.dtype == np.bool_:
            return sig
        if not np.issubdtype(sig.dtype, np.integer):
            raise InvalidParameter(
                f"Signature must hold integers or booleans; received dtype {sig.dtype}"
            )
        if sig.dtype == np.uint64 and sig.size and sig.max() > np.iinfo(np.int64).max:
            raise InvalidParameter("Signature values must fit in a signed 64-bit integer")
        return sig.astype(np.int64)
