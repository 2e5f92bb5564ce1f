"""
Super-Bit Locality-Sensitive Hashing for cosine similarity.

Each bit of a signature records on which side of a hyperplane a vector lies.
For two vectors at angle ``theta`` a random hyperplane separates them with
probability ``theta / pi``, so the fraction of agreeing bits estimates
``1 - theta / pi`` and ``cos((1 - agreement) * pi)`` estimates the cosine
similarity. The hyperplanes are orthogonalized in batches (see
:mod:`lshsketch.utils.orthogonal`).

Reference: Jianqiu Ji, Jianmin Li, Shuicheng Yan, Bo Zhang, Qi Tian.
"Super-Bit Locality-Sensitive Hashing", NIPS 2012.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np

from lshsketch._config.config import DEFAULT_CODE_LENGTH
from lshsketch.errors import InvalidParameter
from lshsketch.similarity import cosine_similarity
from lshsketch.utils.orthogonal import generate_hyperplanes

logger = logging.getLogger(__name__)


@runtime_checkable
class DotProductVector(Protocol):
    """
    Capability required from sparse (or otherwise custom) vector types.

    ``dot`` receives the dense ``(dimensions, code_length)`` matrix of
    transposed hyperplanes and returns the ``code_length`` projections.
    ``scipy.sparse`` row vectors satisfy this protocol as-is.
    """

    def dot(self, other: np.ndarray) -> np.ndarray:
        ...


VectorInput = Union[np.ndarray, Sequence[float], DotProductVector]


class SuperBit:
    """
    Super-Bit signature generator for real vectors of dimension ``dimensions``.

    Typical usage:
        >>> sb = SuperBit(dimensions=50, depth=25, superbit_count=100, seed=42)
        >>> sig1 = sb.signature(v1)
        >>> sig2 = sb.signature(v2)
        >>> estimate = sb.similarity(sig1, sig2)
        >>> exact = SuperBit.cosine_similarity(v1, v2)

    Attributes:
        dimensions: Dimension ``d`` of accepted vectors.
        depth: Super-Bit depth ``N`` (hyperplanes orthogonalized together).
        superbit_count: Number of batches ``L``.
        code_length: ``N * L``, the length of every signature.
        hyperplanes: Read-only ``(code_length, dimensions)`` array.
    """

    def __init__(
        self,
        dimensions: int,
        depth: Optional[int] = None,
        superbit_count: Optional[int] = None,
        seed: Optional[int] = None,
    ) -> None:
        """
        Generate the hyperplanes.

        Args:
            dimensions: Dimension of the data space, ``>= 1``.
            depth: Super-Bit depth ``N`` with ``1 <= N <= dimensions``.
                   Defaults to ``dimensions``.
            superbit_count: Number of Super-Bits ``L >= 1``. Defaults to
                   ``DEFAULT_CODE_LENGTH // dimensions``.
            seed: Seed for the hyperplane draw; the same seed yields
                  identical signatures across instantiations.

        Raises:
            InvalidParameter: If the parameters violate the bounds above.
        """
        if depth is None:
            depth = dimensions
        if superbit_count is None:
            superbit_count = DEFAULT_CODE_LENGTH // dimensions if dimensions > 0 else 0

        rng = np.random.default_rng(seed)
        hyperplanes = generate_hyperplanes(dimensions, depth, superbit_count, rng)
        self._set_state(hyperplanes, depth)

        logger.debug(
            "Initialized SuperBit: dimensions=%d, depth=%d, superbit_count=%d, code_length=%d",
            dimensions,
            depth,
            superbit_count,
            self.code_length,
        )

    @classmethod
    def from_hyperplanes(cls, hyperplanes: np.ndarray, depth: int) -> "SuperBit":
        """Restore an engine from an exported hyperplane table."""
        arr = np.array(hyperplanes, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InvalidParameter(
                f"Hyperplanes must be a non-empty 2D array; received shape {arr.shape}"
            )
        if depth < 1 or depth > arr.shape[1] or arr.shape[0] % depth != 0:
            raise InvalidParameter(
                f"depth {depth} is incompatible with hyperplanes of shape {arr.shape}"
            )

        sb = cls.__new__(cls)
        sb._set_state(arr, depth)
        logger.debug("Restored SuperBit from hyperplanes of shape %s", arr.shape)
        return sb

    # ------------------------------------------------------------------

    @property
    def dimensions(self) -> int:
        return self._hyperplanes.shape[1]

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def superbit_count(self) -> int:
        return self.code_length // self._depth

    @property
    def code_length(self) -> int:
        return self._hyperplanes.shape[0]

    @property
    def hyperplanes(self) -> np.ndarray:
        return self._hyperplanes

    def signature(self, vector: VectorInput) -> np.ndarray:
        """
        Compute the bit signature of ``vector``.

        Bit ``i`` is ``dot(hyperplane_i, vector) >= 0``.

        Args:
            vector: Dense array-like of length ``dimensions``, or any object
                    implementing :class:`DotProductVector`.

        Returns:
            Read-only boolean array of length ``code_length``.
        """
        projections = self._project(vector)
        sig = projections >= 0
        sig.flags.writeable = False
        return sig

    def similarity(self, sig1: np.ndarray, sig2: np.ndarray) -> float:
        """Estimate the cosine similarity of two vectors from their signatures."""
        a = np.asarray(sig1).reshape(-1)
        b = np.asarray(sig2).reshape(-1)
        for sig in (a, b):
            if sig.dtype != np.bool_:
                raise InvalidParameter(
                    f"Signatures must hold booleans; received dtype {sig.dtype}"
                )
        if a.shape != b.shape:
            raise InvalidParameter(
                f"Size of signatures should be the same; received {a.size} and {b.size}"
            )
        if a.size == 0:
            raise InvalidParameter("Signatures must not be empty")

        agreement = np.count_nonzero(a == b) / a.size
        return math.cos((1.0 - agreement) * math.pi)

    @staticmethod
    def cosine_similarity(v1: np.ndarray, v2: np.ndarray) -> float:
        """Exact cosine similarity; raises :class:`InvalidParameter` for zero vectors."""
        return cosine_similarity(v1, v2)

    # ------------------------------------------------------------------

    def _project(self, vector: VectorInput) -> np.ndarray:
        if isinstance(vector, DotProductVector) and not isinstance(vector, np.ndarray):
            shape: Optional[Tuple[int, ...]] = getattr(vector, "shape", None)
            if shape is not None and shape[-1] != self.dimensions:
                raise InvalidParameter(
                    f"Expected vector of dimension {self.dimensions}, received {shape}"
                )
            projections = np.asarray(vector.dot(self._hyperplanes.T), dtype=np.float64)
            projections = projections.reshape(-1)
            if projections.shape[0] != self.code_length:
                raise InvalidParameter(
                    f"dot() returned {projections.shape[0]} projections, "
                    f"expected {self.code_length}"
                )
            return projections

        vec = np.asarray(vector, dtype=np.float64)
        if vec.ndim != 1 or vec.shape[0] != self.dimensions:
            raise InvalidParameter(
                f"Expected vector of dimension {self.dimensions}, received {vec.shape}"
            )
        return self._hyperplanes @ vec

    def _set_state(self, hyperplanes: np.ndarray, depth: int) -> None:
        hyperplanes.flags.writeable = False
        self._hyperplanes = hyperplanes
        self._depth = int(depth)
