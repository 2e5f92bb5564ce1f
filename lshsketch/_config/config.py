"""
The config module holds package-wide constants and the small value types
shared by the hashing engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from lshsketch.errors import InvalidParameter

# Multiplier used by the banding accumulation.
LARGE_PRIME = 433494437

# Largest 32-bit signed value. MinHash uses it as the "infinity" of an
# empty set and boolean banding reduces modulo it before the final mod B.
MAX_HASH_VALUE = 2**31 - 1

# domain_size**2 + domain_size must fit in int64.
MAX_DOMAIN_SIZE = MAX_HASH_VALUE

# buckets**2 must fit in int64 for the reduced products in integer banding.
MAX_BUCKETS = MAX_HASH_VALUE

DEFAULT_STAGES = 3
DEFAULT_BUCKETS = 10

# Code length used when SuperBit is built from a dimension alone.
DEFAULT_CODE_LENGTH = 10000

# Similarity at which the composed MinHash S-curve crosses 1/2.
THRESHOLD = 0.5

# MinHash.from_error logs a warning above this signature length.
LARGE_SIGNATURE_WARNING = 100_000


@dataclass(frozen=True)
class BandAssignment:
    """
    Bucket identifiers produced for one signature, one per stage.

    Two items are candidate-similar when their assignments agree in at least
    one stage.

    Example:
        >>> a = BandAssignment((3, 7, 1))
        >>> b = BandAssignment((4, 7, 0))
        >>> a.collides_with(b)
        True
        >>> len(a)
        3
    """

    buckets: Tuple[int, ...]

    def __iter__(self) -> Iterator[int]:
        return iter(self.buckets)

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self.buckets)

    def __getitem__(self, stage: int) -> int:
        return self.buckets[stage]

    def tolist(self) -> List[int]:
        return list(self.buckets)

    def collides_with(self, other: "BandAssignment") -> bool:
        """Return True if both assignments share a bucket in any stage."""
        if len(self.buckets) != len(other.buckets):
            raise InvalidParameter(
                "Cannot compare assignments with different stage counts "
                f"({len(self.buckets)} != {len(other.buckets)})"
            )
        return any(a == b for a, b in zip(self.buckets, other.buckets))
