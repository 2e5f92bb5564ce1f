from __future__ import annotations

from typing import AbstractSet, Iterable, Set, Union

import numpy as np

from lshsketch.errors import InvalidParameter

SetLike = Union[AbstractSet[int], np.ndarray, Iterable[bool]]


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    """Return the L2-normalized version of ``vector``."""
    vec = np.asarray(vector, dtype=np.float64).reshape(-1)
    norm = np.linalg.norm(vec)
    if norm == 0:
        raise InvalidParameter("Cannot normalize zero vector")
    return vec / norm


def cosine_similarity(v1: np.ndarray, v2: np.ndarray) -> float:
    """Exact cosine similarity ``dot(v1, v2) / (|v1| * |v2|)`` of two dense vectors."""
    a = np.asarray(v1, dtype=np.float64).reshape(-1)
    b = np.asarray(v2, dtype=np.float64).reshape(-1)
    if a.shape != b.shape:
        raise InvalidParameter(
            f"Vectors must have the same dimension, received {a.shape} and {b.shape}"
        )
    return float(np.dot(l2_normalize(a), l2_normalize(b)))


def convert_to_set(vector: Iterable[bool]) -> Set[int]:
    """Convert a boolean membership vector into the set of its true positions.

    >>> sorted(convert_to_set([True, False, True, True, False]))
    [0, 2, 3]
    """
    arr = np.asarray(vector)
    if arr.ndim != 1:
        raise InvalidParameter(f"Membership vector must be 1-D, received shape {arr.shape}")
    if arr.size and arr.dtype != np.bool_:
        raise InvalidParameter(
            f"Membership vector must contain booleans, received dtype {arr.dtype}"
        )
    return {int(i) for i in np.flatnonzero(arr)}


def jaccard_index(a: SetLike, b: SetLike) -> float:
    """
    Exact Jaccard index ``|A & B| / |A | B|``.

    Accepts two sets of indices or two boolean membership vectors of equal
    length. Two empty sets have an index of 0.
    """
    if isinstance(a, (set, frozenset)) and isinstance(b, (set, frozenset)):
        set_a, set_b = a, b
    else:
        arr_a = np.asarray(a)
        arr_b = np.asarray(b)
        if arr_a.dtype != np.bool_ or arr_b.dtype != np.bool_:
            raise InvalidParameter(
                "jaccard_index expects two sets or two boolean vectors"
            )
        if arr_a.shape != arr_b.shape:
            raise InvalidParameter(
                f"Sets must be same size, received {arr_a.shape} and {arr_b.shape}"
            )
        set_a, set_b = convert_to_set(arr_a), convert_to_set(arr_b)

    union = len(set_a | set_b)
    if union == 0:
        return 0.0
    return len(set_a & set_b) / union
