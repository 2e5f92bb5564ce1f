"""Tests for MinHash signatures and Jaccard helpers."""

from __future__ import annotations

import numpy as np
import pytest

from lshsketch import InvalidParameter, MinHash, convert_to_set, jaccard_index
from lshsketch._config.config import MAX_HASH_VALUE

# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_signature_length_must_be_positive(self):
        with pytest.raises(InvalidParameter, match="Signature size should be positive"):
            MinHash(0, 100)

    def test_dictionary_size_must_be_positive(self):
        with pytest.raises(InvalidParameter, match="Dictionary size"):
            MinHash(10, 0)

    def test_dictionary_size_too_large(self):
        with pytest.raises(InvalidParameter, match="overflow"):
            MinHash(10, 2**40)

    @pytest.mark.parametrize("error, expected", [(0.1, 100), (0.5, 4), (1.0, 1), (0.3, 12)])
    def test_size_from_error(self, error, expected):
        assert MinHash.size(error) == expected

    @pytest.mark.parametrize("error", [0.0, -0.1, 1.5])
    def test_error_out_of_range(self, error):
        with pytest.raises(InvalidParameter, match="error should be in"):
            MinHash.from_error(error, 100)

    def test_from_error(self):
        mh = MinHash.from_error(0.1, 500, seed=3)
        assert mh.signature_length == 100
        assert mh.dictionary_size == 500
        assert mh.error() == pytest.approx(0.1)


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


class TestSignature:
    def test_seed_gives_identical_signatures(self, rng):
        mh = MinHash(100, 100, seed=123456)
        mh2 = MinHash(100, 100, seed=123456)

        ints = set(int(i) for i in rng.choice(100, size=50, replace=False))

        sig1 = mh.signature(ints)
        sig2 = mh2.signature(ints)
        assert sig1.shape == (100,)
        np.testing.assert_array_equal(sig1, sig2)

    def test_set_and_vector_inputs_agree(self, rng):
        mh = MinHash(64, 200, seed=7)
        for _ in range(20):
            vector = rng.random(200) > 0.7
            np.testing.assert_array_equal(
                mh.signature(vector), mh.signature(convert_to_set(vector))
            )

    def test_list_and_array_of_indices(self):
        mh = MinHash(16, 50, seed=1)
        expected = mh.signature({3, 9, 27})
        np.testing.assert_array_equal(mh.signature([27, 3, 9, 9]), expected)
        np.testing.assert_array_equal(mh.signature(np.array([3, 9, 27])), expected)

    def test_signature_is_minimum_of_hash_values(self):
        mh = MinHash(8, 31, seed=2)
        members = [1, 4, 30]
        sig = mh.signature(set(members))
        for i in range(8):
            a, b = (int(c) for c in mh.coefficients[i])
            assert sig[i] == min((a * x + b) % 31 for x in members)

    def test_empty_set_is_sentinel(self):
        mh = MinHash(10, 20, seed=0)
        assert (mh.signature(set()) == MAX_HASH_VALUE).all()
        assert (mh.signature(np.zeros(20, dtype=bool)) == MAX_HASH_VALUE).all()

    def test_vector_length_must_match_dictionary(self):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter, match="dict_size"):
            mh.signature(np.ones(21, dtype=bool))

    @pytest.mark.parametrize("bad", [{-1, 2}, {0, 20}])
    def test_index_outside_dictionary_rejected(self, bad):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter, match=r"\[0, 20\)"):
            mh.signature(bad)

    def test_float_elements_rejected(self):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter, match="integer"):
            mh.signature([0.5, 1.5])

    @pytest.mark.parametrize("bad", [{0.5, 1.5}, frozenset({0.5, 1.9})])
    def test_float_set_elements_rejected(self, bad):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter, match="integer"):
            mh.signature(bad)

    def test_set_element_beyond_int64_rejected(self):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter):
            mh.signature({2**70})

    def test_boolean_set_elements_rejected(self):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter, match="integer"):
            mh.signature({True})

    def test_signature_is_read_only(self):
        mh = MinHash(10, 20, seed=0)
        sig = mh.signature({1, 2})
        with pytest.raises(ValueError):
            sig[0] = 0

    def test_different_seeds_generally_differ(self):
        members = set(range(0, 400, 3))
        a = MinHash(100, 400, seed=1).signature(members)
        b = MinHash(100, 400, seed=2).signature(members)
        assert not np.array_equal(a, b)


# ---------------------------------------------------------------------------
# Similarity estimation
# ---------------------------------------------------------------------------


class TestSimilarity:
    def test_self_similarity_is_one(self, rng):
        mh = MinHash(50, 300, seed=4)
        sig = mh.signature(rng.random(300) > 0.5)
        assert mh.similarity(sig, sig) == 1.0

    def test_estimate_close_to_exact_jaccard(self):
        # 300 shared, 150 + 150 own elements: J = 300 / 600
        a = set(range(0, 450))
        b = set(range(150, 600))
        mh = MinHash(1000, 1009, seed=21)
        estimate = mh.similarity(mh.signature(a), mh.signature(b))
        assert jaccard_index(a, b) == pytest.approx(0.5)
        assert estimate == pytest.approx(0.5, abs=0.1)

    def test_similarity_requires_same_length(self):
        mh = MinHash(10, 20, seed=0)
        with pytest.raises(InvalidParameter, match="same"):
            mh.similarity(np.zeros(10), np.zeros(11))


class TestJaccardIndex:
    def test_sets(self):
        assert MinHash.jaccard_index({1, 2, 3}, {2, 3, 4}) == pytest.approx(0.5)

    def test_empty_sets(self):
        assert jaccard_index(set(), set()) == 0.0

    def test_boolean_vectors(self):
        a = np.array([True, False, True, True, False])
        b = np.array([True, True, False, True, False])
        assert jaccard_index(a, b) == pytest.approx(2 / 4)

    def test_boolean_vectors_must_be_same_size(self):
        with pytest.raises(InvalidParameter, match="same size"):
            jaccard_index(np.ones(3, dtype=bool), np.ones(4, dtype=bool))

    def test_convert_to_set(self):
        assert MinHash.convert_to_set([True, False, True, True, False]) == {0, 2, 3}
