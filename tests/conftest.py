"""Shared test fixtures and test doubles."""

from __future__ import annotations

from typing import Dict

import numpy as np
import pytest


class SparseVector:
    """Minimal sparse vector exposing the ``dot`` capability SuperBit relies on."""

    def __init__(self, size: int, entries: Dict[int, float]) -> None:
        self.shape = (size,)
        self.entries = dict(entries)
        self.dot_calls = 0

    @classmethod
    def from_dense(cls, vector: np.ndarray) -> "SparseVector":
        return cls(
            len(vector),
            {int(i): float(vector[i]) for i in np.flatnonzero(vector)},
        )

    def dot(self, other: np.ndarray) -> np.ndarray:
        self.dot_calls += 1
        result = np.zeros(other.shape[1], dtype=np.float64)
        for index, value in self.entries.items():
            result += value * other[index]
        return result


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator for deterministic tests."""
    return np.random.default_rng(12345)


@pytest.fixture
def sparse_vector_factory():
    """Factory building :class:`SparseVector` instances from dense arrays."""
    return SparseVector.from_dense
