"""Tests for the banding engine."""

from __future__ import annotations

import numpy as np
import pytest

from lshsketch import LSH, BandAssignment, InvalidParameter
from lshsketch._config.config import LARGE_PRIME, MAX_HASH_VALUE


def reference_int_buckets(signature, stages, buckets):
    rows = len(signature) // stages
    acc = [0] * stages
    for i, value in enumerate(signature):
        stage = min(i // rows, stages - 1)
        acc[stage] = (acc[stage] + int(value) * LARGE_PRIME) % buckets
    return acc


def reference_bool_buckets(signature, stages, buckets):
    rows = len(signature) // stages
    acc = [0] * stages
    for i, bit in enumerate(signature):
        stage = min(i // rows, stages - 1)
        value = (i + 1) * LARGE_PRIME if bit else 0
        acc[stage] = (acc[stage] + value) % MAX_HASH_VALUE
    return [a % buckets for a in acc]


class TestConstruction:
    def test_defaults(self):
        lsh = LSH()
        assert lsh.stages == 3
        assert lsh.buckets == 10

    @pytest.mark.parametrize("stages, buckets", [(0, 10), (-1, 10), (3, 0), (3, -5)])
    def test_non_positive_rejected(self, stages, buckets):
        with pytest.raises(InvalidParameter, match="greater than zero"):
            LSH(stages, buckets)

    def test_buckets_upper_bound(self):
        with pytest.raises(InvalidParameter, match="must not exceed"):
            LSH(3, 2**40)


class TestStageBounds:
    def test_last_stage_absorbs_remainder(self):
        assert LSH(stages=3).stage_bounds(11) == [(0, 3), (3, 6), (6, 11)]

    def test_one_row_per_stage(self):
        assert LSH(stages=3).stage_bounds(3) == [(0, 1), (1, 2), (2, 3)]

    def test_too_short(self):
        with pytest.raises(InvalidParameter, match="too short"):
            LSH(stages=4).stage_bounds(3)


class TestIntegerSignatures:
    def test_worked_example(self):
        # LARGE_PRIME % 10 == 7: stage sums 6 * 7 and 15 * 7
        assignment = LSH(stages=2, buckets=10).hash_signature([1, 2, 3, 4, 5, 6])
        assert assignment == BandAssignment((2, 5))

    def test_plain_list_signature(self):
        signature = [3, 1, 4, 1, 5, 9, 2, 6]
        assignment = LSH(stages=4, buckets=100).hash_signature(signature)
        assert len(assignment) == 4
        assert assignment.tolist() == reference_int_buckets(signature, 4, 100)

    def test_matches_reference_accumulation(self, rng):
        lsh = LSH(stages=4, buckets=97)
        for _ in range(200):
            sig = rng.integers(0, MAX_HASH_VALUE, size=rng.integers(4, 40))
            assert lsh.hash_signature(sig).tolist() == reference_int_buckets(sig, 4, 97)

    def test_negative_values_stay_in_range(self, rng):
        lsh = LSH(stages=3, buckets=13)
        sig = rng.integers(-(2**40), 2**40, size=30)
        assert lsh.hash_signature(sig).tolist() == reference_int_buckets(sig, 3, 13)

    def test_buckets_in_range_for_random_signatures(self, rng):
        buckets = 17
        lsh = LSH(stages=5, buckets=buckets)
        signatures = rng.integers(-(2**62), 2**62, size=(10_000, 23))
        for sig in signatures:
            assignment = lsh.hash_signature(sig)
            assert len(assignment) == 5
            assert all(0 <= bucket < buckets for bucket in assignment)

    def test_remainder_only_affects_last_stage(self):
        lsh = LSH(stages=3, buckets=10)
        sig = np.arange(11)
        changed = sig.copy()
        changed[-1] += 1
        a = lsh.hash_signature(sig)
        b = lsh.hash_signature(changed)
        assert a[0] == b[0]
        assert a[1] == b[1]
        assert a[2] != b[2]

    def test_identical_signatures_collide_everywhere(self, rng):
        lsh = LSH(stages=3, buckets=50)
        sig = rng.integers(0, 1000, size=12)
        a = lsh.hash_signature(sig)
        b = lsh.hash_signature(sig.copy())
        assert a == b
        assert lsh.candidates(a, b)


class TestBooleanSignatures:
    def test_matches_reference_accumulation(self, rng):
        lsh = LSH(stages=3, buckets=23)
        for _ in range(200):
            sig = rng.random(rng.integers(3, 60)) > 0.5
            assert lsh.hash_signature(sig).tolist() == reference_bool_buckets(sig, 3, 23)

    def test_buckets_in_range_for_random_signatures(self, rng):
        lsh = LSH(stages=4, buckets=10)
        signatures = rng.random((10_000, 40)) > 0.5
        for sig in signatures:
            assert all(0 <= bucket < 10 for bucket in lsh.hash_signature(sig))

    def test_all_false_maps_to_bucket_zero(self):
        assert LSH(stages=2, buckets=7).hash_signature(np.zeros(8, dtype=bool)).tolist() == [0, 0]


class TestValidation:
    def test_signature_shorter_than_stages(self):
        with pytest.raises(InvalidParameter, match="too short"):
            LSH(stages=5, buckets=10).hash_signature([1, 2, 3])

    def test_float_signature_rejected(self):
        with pytest.raises(InvalidParameter, match="integers or booleans"):
            LSH(stages=2, buckets=10).hash_signature([0.5, 1.5, 2.5])

    def test_two_dimensional_signature_rejected(self):
        with pytest.raises(InvalidParameter, match="1-D"):
            LSH(stages=2, buckets=10).hash_signature(np.zeros((2, 4), dtype=np.int64))

    def test_candidates_requires_matching_stage_count(self):
        lsh = LSH(stages=3, buckets=10)
        with pytest.raises(InvalidParameter, match="Expected 3"):
            lsh.candidates(BandAssignment((1, 2)), BandAssignment((1, 2)))


class TestBandAssignment:
    def test_collision_in_any_stage(self):
        assert BandAssignment((1, 2, 3)).collides_with(BandAssignment((9, 9, 3)))
        assert not BandAssignment((1, 2, 3)).collides_with(BandAssignment((0, 0, 0)))
