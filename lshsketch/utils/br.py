"""
Stage/row parameter derivation for the composed hashers.

Banding with ``S`` stages of ``R`` rows gives the S-curve
``P(s) = 1 - (1 - s**R)**S``: the probability that two items of similarity
``s`` collide in at least one stage. Its inflection point sits near
``(1/S)**(1/R)``.
"""

from __future__ import annotations

import math
from typing import Union

import numpy as np

from lshsketch._config.config import THRESHOLD
from lshsketch.errors import InvalidParameter

ArrayLike = Union[float, np.ndarray]


def minhash_rows(stages: int, threshold: float = THRESHOLD) -> int:
    """
    Rows per stage such that the S-curve of ``stages`` stages crosses 1/2 near ``threshold``.

    ``R = ceil(ln(1/S) / ln(threshold)) + 1``

    Examples:
        >>> minhash_rows(3)
        3
        >>> minhash_rows(1)
        1
    """
    if stages <= 0:
        raise InvalidParameter(f"stages must be greater than zero; received {stages}")
    if not 0 < threshold < 1:
        raise InvalidParameter(f"threshold must be in (0, 1); received {threshold}")
    return math.ceil(math.log(1.0 / stages) / math.log(threshold)) + 1


def superbit_depth(code_length: int, dimensions: int) -> int:
    """
    Largest Super-Bit depth ``<= dimensions`` that evenly divides ``code_length``.

    Raises:
        InvalidParameter: If no such depth exists (``code_length < 1``).

    Examples:
        >>> superbit_depth(15, 10)
        5
        >>> superbit_depth(15, 100)
        15
    """
    if dimensions <= 0:
        raise InvalidParameter(f"dimensions must be greater than zero; received {dimensions}")
    for depth in range(min(dimensions, code_length), 0, -1):
        if code_length % depth == 0:
            return depth
    raise InvalidParameter(
        f"No Super-Bit depth divides code length {code_length}; "
        "increase stages or buckets"
    )


def collision_probability(similarity: ArrayLike, rows: int, stages: int) -> ArrayLike:
    """Probability ``1 - (1 - s**rows)**stages`` that two items collide in any stage."""
    if rows <= 0 or stages <= 0:
        raise InvalidParameter(
            f"rows and stages must be greater than zero; received {rows}, {stages}"
        )
    s = np.asarray(similarity, dtype=np.float64)
    if s.size and (s.min() < 0 or s.max() > 1):
        raise InvalidParameter("similarity must lie in [0, 1]")
    p = 1.0 - (1.0 - s**rows) ** stages
    return float(p) if p.ndim == 0 else p


def threshold_estimate(rows: int, stages: int) -> float:
    """Approximate similarity ``(1/stages)**(1/rows)`` at which the S-curve is steepest."""
    if rows <= 0 or stages <= 0:
        raise InvalidParameter(
            f"rows and stages must be greater than zero; received {rows}, {stages}"
        )
    return (1.0 / stages) ** (1.0 / rows)


__all__ = ["minhash_rows", "superbit_depth", "collision_probability", "threshold_estimate"]
