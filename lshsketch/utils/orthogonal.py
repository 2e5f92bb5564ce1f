"""
Batch-orthogonalized random hyperplanes for Super-Bit hashing.

Plain sign-random-projection draws every hyperplane independently. Super-Bit
(Ji et al., NIPS 2012) groups the ``K = depth * count`` hyperplanes into
``count`` batches of ``depth`` vectors and orthogonalizes each batch, which
lowers the variance of the cosine estimate without paying for a full
``K x K`` orthogonalization.
"""

from __future__ import annotations

import numpy as np

from lshsketch.errors import InvalidParameter


def generate_hyperplanes(
    dimensions: int,
    depth: int,
    count: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Generate ``depth * count`` unit hyperplanes in ``R^dimensions``.

    Algorithm:
        1. Draw ``H = [v_1, ..., v_K]`` with i.i.d. N(0, 1) entries and
           normalize each ``v`` to unit length.
        2. For each batch ``i`` and each ``j`` in ``1..depth``:
           ``w = v_{i,j} - sum_{k<j} (w_{i,k} . v_{i,j}) w_{i,k}``, then
           normalize ``w``. Batches never see each other.

    Args:
        dimensions: Dimension ``d`` of the data space.
        depth: Super-Bit depth ``N``, ``1 <= N <= d``.
        count: Number of Super-Bits ``L >= 1``.
        rng: Random source; consumed only here.

    Returns:
        float64 array of shape ``(depth * count, dimensions)``; rows are
        orthonormal within each consecutive block of ``depth`` rows.
    """
    if dimensions < 1:
        raise InvalidParameter(f"Dimension d must be >= 1; received {dimensions}")
    if depth < 1 or depth > dimensions:
        raise InvalidParameter(
            f"Super-Bit depth N must be 1 <= N <= d ({dimensions}); received {depth}"
        )
    if count < 1:
        raise InvalidParameter(f"Number of Super-Bit L must be >= 1; received {count}")

    code_length = depth * count
    v = rng.standard_normal((code_length, dimensions))
    v /= np.linalg.norm(v, axis=1, keepdims=True)

    w = np.empty_like(v)
    for start in range(0, code_length, depth):
        for j in range(start, start + depth):
            previous = w[start:j]
            vec = v[j] - previous.T @ (previous @ v[j])
            w[j] = vec / np.linalg.norm(vec)

    return w
