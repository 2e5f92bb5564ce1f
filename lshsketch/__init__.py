"""
Locality-Sensitive Hashing primitives for Jaccard and cosine similarity.

- :class:`MinHash` - Jaccard-preserving integer signatures of sets
- :class:`SuperBit` - cosine-preserving bit signatures of real vectors
- :class:`LSH` - banding of any signature into per-stage bucket identifiers
- :class:`LSHMinHash`, :class:`LSHSuperBit` - signature engine + banding,
  with the signature length derived from ``(stages, buckets)``
"""

from __future__ import annotations

from lshsketch._config.config import BandAssignment
from lshsketch.core.main import LSHMinHash, LSHSuperBit
from lshsketch.errors import InvalidParameter
from lshsketch.hash.lsh import LSH
from lshsketch.hash.minhash import MinHash
from lshsketch.hash.superbit import DotProductVector, SuperBit
from lshsketch.hash.universal import UniversalHashFamily
from lshsketch.similarity import convert_to_set, cosine_similarity, jaccard_index

__version__ = "0.1.0"

__all__ = [
    "BandAssignment",
    "DotProductVector",
    "InvalidParameter",
    "LSH",
    "LSHMinHash",
    "LSHSuperBit",
    "MinHash",
    "SuperBit",
    "UniversalHashFamily",
    "convert_to_set",
    "cosine_similarity",
    "jaccard_index",
]
