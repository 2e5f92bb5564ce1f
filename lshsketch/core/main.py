"""
Composed hashers: one signature engine plus one banding engine.

This module ties the components together:
    1. Item → MinHash / SuperBit → fixed-length signature
    2. Signature → LSH banding → one bucket identifier per stage

The signature length is derived from ``(stages, buckets, size)`` so callers
only choose how many stages and buckets they want:

- ``LSHMinHash`` uses ``minhash_rows(stages) * stages`` hash functions, which
  places the 50% collision point of the banding S-curve near Jaccard 0.5.
- ``LSHSuperBit`` uses ``stages * buckets // 2`` hyperplanes with the largest
  Super-Bit depth ``<= dimensions`` dividing that code length.

Both hashers can export their parameters and tables with ``to_state()`` and
be rebuilt with ``from_state()``, which reproduces bit-identical bucket
identifiers. Storing that state is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np

from lshsketch._config.config import BandAssignment
from lshsketch.errors import InvalidParameter
from lshsketch.hash.lsh import LSH, SignatureInput
from lshsketch.hash.minhash import MinHash, SetInput
from lshsketch.hash.superbit import SuperBit, VectorInput
from lshsketch.utils.br import minhash_rows, superbit_depth

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class LSHMinHash:
    """
    Jaccard-similarity LSH: MinHash signatures folded into bucket identifiers.

    Parameters
    ----------
    stages : int
        Number of bands. More stages give higher recall.
    buckets : int
        Buckets per band.
    dictionary_size : int
        Size of the dictionary the hashed sets are drawn from.
    seed : int, optional
        Seed for the MinHash coefficients. Hashers built with the same
        ``(stages, buckets, dictionary_size, seed)`` produce identical buckets.

    Examples
    --------
    >>> lsh = LSHMinHash(stages=3, buckets=20, dictionary_size=1000, seed=42)
    >>> assignment = lsh.hash({1, 17, 256})
    >>> len(assignment)
    3
    >>> empty = lsh.hash(np.zeros(1000, dtype=bool))  # membership vector input
    """

    def __init__(
        self,
        stages: int,
        buckets: int,
        dictionary_size: int,
        seed: Optional[int] = None,
    ) -> None:
        self._lsh = LSH(stages, buckets)
        rows = minhash_rows(stages)
        self._minhash = MinHash(rows * stages, dictionary_size, seed=seed)
        self._seed = seed

        logger.debug(
            "Initialized LSHMinHash: stages=%d, buckets=%d, rows=%d, dictionary_size=%d",
            stages,
            buckets,
            rows,
            dictionary_size,
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return (
            "LSHMinHash("
            f"stages={self.stages}, "
            f"buckets={self.buckets}, "
            f"dictionary_size={self.dictionary_size}, "
            f"signature_length={self.signature_length}"
            ")"
        )

    @property
    def stages(self) -> int:
        return self._lsh.stages

    @property
    def buckets(self) -> int:
        return self._lsh.buckets

    @property
    def dictionary_size(self) -> int:
        return self._minhash.dictionary_size

    @property
    def signature_length(self) -> int:
        return self._minhash.signature_length

    @property
    def coefficients(self) -> np.ndarray:
        return self._minhash.coefficients

    @property
    def minhash(self) -> MinHash:
        return self._minhash

    def signature(self, item: SetInput) -> np.ndarray:
        return self._minhash.signature(item)

    def hash_signature(self, signature: SignatureInput) -> BandAssignment:
        return self._lsh.hash_signature(signature)

    def hash(self, item: SetInput) -> BandAssignment:
        """
        Bucket a set given as indices or as a boolean membership vector.

        Returns
        -------
        BandAssignment
            ``stages`` integers in ``[0, buckets)``.
        """
        return self._lsh.hash_signature(self._minhash.signature(item))

    def stats(self) -> Dict[str, Any]:
        return {
            "stages": self.stages,
            "buckets": self.buckets,
            "dictionary_size": self.dictionary_size,
            "rows_per_stage": self.signature_length // self.stages,
            "signature_length": self.signature_length,
            "seed": self._seed,
        }

    # ---------------------------------------------------------------------
    # State export
    # ---------------------------------------------------------------------

    def to_state(self) -> Dict[str, Any]:
        """
        Export parameters and coefficients.

        Returns
        -------
        dict
            ``{"version", "kind", "config", "coefficients"}`` where
            ``coefficients`` is the ``(signature_length, 2)`` int64 table.
        """
        return {
            "version": STATE_VERSION,
            "kind": "minhash",
            "config": self.stats(),
            "coefficients": np.array(self.coefficients),
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "LSHMinHash":
        """Rebuild a hasher exported with :meth:`to_state`."""
        config = _check_state(
            state, "minhash", "coefficients", ("stages", "buckets", "dictionary_size")
        )
        stages = config["stages"]
        buckets = config["buckets"]
        coefficients = np.asarray(state["coefficients"])
        expected = minhash_rows(stages) * stages
        if coefficients.ndim != 2 or coefficients.shape[0] != expected:
            raise InvalidParameter(
                f"Expected {expected} coefficient pairs for {stages} stages, "
                f"received shape {coefficients.shape}"
            )

        hasher = cls.__new__(cls)
        hasher._lsh = LSH(stages, buckets)
        hasher._minhash = MinHash.from_coefficients(coefficients, config["dictionary_size"])
        hasher._seed = config.get("seed")
        logger.debug("Restored LSHMinHash with %d stages", stages)
        return hasher


class LSHSuperBit:
    """
    Cosine-similarity LSH: Super-Bit signatures folded into bucket identifiers.

    Parameters
    ----------
    stages : int
        Number of bands.
    buckets : int
        Buckets per band. Together with ``stages`` fixes the code length
        ``stages * buckets // 2``.
    dimensions : int
        Dimension of hashed vectors.
    seed : int, optional
        Seed for the hyperplanes.

    Raises
    ------
    InvalidParameter
        If ``stages * buckets // 2`` is 0 (no Super-Bit depth exists) or any
        parameter is out of range.

    Examples
    --------
    >>> lsh = LSHSuperBit(stages=2, buckets=10, dimensions=100, seed=42)
    >>> assignment = lsh.hash(np.random.rand(100))
    >>> len(assignment)
    2
    """

    def __init__(
        self,
        stages: int,
        buckets: int,
        dimensions: int,
        seed: Optional[int] = None,
    ) -> None:
        self._lsh = LSH(stages, buckets)
        if dimensions <= 0:
            raise InvalidParameter(
                f"dimensions must be greater than zero; received {dimensions}"
            )

        code_length = stages * buckets // 2
        depth = superbit_depth(code_length, dimensions)
        if code_length < stages:
            raise InvalidParameter(
                f"Code length {code_length} is too short for {stages} stages"
            )
        if depth < min(dimensions, code_length):
            logger.warning(
                "Super-Bit depth reduced to %d: code length %d has no larger divisor <= %d",
                depth,
                code_length,
                dimensions,
            )

        self._superbit = SuperBit(dimensions, depth, code_length // depth, seed=seed)
        self._seed = seed

        logger.debug(
            "Initialized LSHSuperBit: stages=%d, buckets=%d, dimensions=%d, "
            "code_length=%d, depth=%d",
            stages,
            buckets,
            dimensions,
            code_length,
            depth,
        )

    def __repr__(self) -> str:  # pragma: no cover - convenience
        return (
            "LSHSuperBit("
            f"stages={self.stages}, "
            f"buckets={self.buckets}, "
            f"dimensions={self.dimensions}, "
            f"code_length={self.code_length}"
            ")"
        )

    @property
    def stages(self) -> int:
        return self._lsh.stages

    @property
    def buckets(self) -> int:
        return self._lsh.buckets

    @property
    def dimensions(self) -> int:
        return self._superbit.dimensions

    @property
    def code_length(self) -> int:
        return self._superbit.code_length

    @property
    def hyperplanes(self) -> np.ndarray:
        return self._superbit.hyperplanes

    @property
    def superbit(self) -> SuperBit:
        return self._superbit

    def signature(self, vector: VectorInput) -> np.ndarray:
        return self._superbit.signature(vector)

    def hash_signature(self, signature: SignatureInput) -> BandAssignment:
        return self._lsh.hash_signature(signature)

    def hash(self, vector: VectorInput) -> BandAssignment:
        """Bucket a dense vector or any :class:`~lshsketch.hash.superbit.DotProductVector`."""
        return self._lsh.hash_signature(self._superbit.signature(vector))

    def stats(self) -> Dict[str, Any]:
        return {
            "stages": self.stages,
            "buckets": self.buckets,
            "dimensions": self.dimensions,
            "code_length": self.code_length,
            "depth": self._superbit.depth,
            "seed": self._seed,
        }

    def to_state(self) -> Dict[str, Any]:
        """Export parameters and the ``(code_length, dimensions)`` hyperplane table."""
        return {
            "version": STATE_VERSION,
            "kind": "superbit",
            "config": self.stats(),
            "hyperplanes": np.array(self.hyperplanes),
        }

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "LSHSuperBit":
        """Rebuild a hasher exported with :meth:`to_state`."""
        config = _check_state(
            state, "superbit", "hyperplanes", ("stages", "buckets", "depth")
        )
        stages = config["stages"]
        buckets = config["buckets"]
        hyperplanes = np.asarray(state["hyperplanes"])
        expected = stages * buckets // 2
        if hyperplanes.ndim != 2 or hyperplanes.shape[0] != expected:
            raise InvalidParameter(
                f"Expected {expected} hyperplanes for {stages} stages x {buckets} buckets, "
                f"received shape {hyperplanes.shape}"
            )

        hasher = cls.__new__(cls)
        hasher._lsh = LSH(stages, buckets)
        hasher._superbit = SuperBit.from_hyperplanes(hyperplanes, config["depth"])
        hasher._seed = config.get("seed")
        logger.debug("Restored LSHSuperBit with %d stages", stages)
        return hasher


def _check_state(
    state: Dict[str, Any], kind: str, table: str, required: Sequence[str]
) -> Dict[str, Any]:
    for key in ("version", "kind", "config"):
        if key not in state:
            raise InvalidParameter(f"State is missing required key '{key}'")
    if state["version"] != STATE_VERSION:
        raise InvalidParameter(
            f"Unsupported state version {state['version']} (expected {STATE_VERSION})"
        )
    if state["kind"] != kind:
        raise InvalidParameter(f"State describes a '{state['kind']}' hasher, not '{kind}'")
    if table not in state:
        raise InvalidParameter(f"State is missing required key '{table}'")
    config = state["config"]
    for key in required:
        if key not in config:
            raise InvalidParameter(f"State config is missing required key '{key}'")
    return config
