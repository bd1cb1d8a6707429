"""
Unit tests for Tendermint binary Merkle hashing and proofs.
"""

import hashlib

import pytest
from celestia_trees import merkle_aunts, merkle_root

from da_challenge_toolkit.proofs.merkle import (
    compute_root_from_aunts,
    get_split_point,
    inner_hash,
    leaf_hash,
    verify_merkle_proof,
)

ITEMS = [bytes([i]) * 8 for i in range(7)]


class TestHashing:
    """Tests for the leaf and inner hash domain separation."""

    def test_leaf_hash_prefix(self):
        assert leaf_hash(b"abc") == hashlib.sha256(b"\x00abc").digest()

    def test_inner_hash_prefix(self):
        left, right = b"\x11" * 32, b"\x22" * 32
        assert (
            inner_hash(left, right)
            == hashlib.sha256(b"\x01" + left + right).digest()
        )

    def test_leaf_and_inner_differ(self):
        data = b"\x11" * 32 + b"\x22" * 32
        assert leaf_hash(data) != inner_hash(data[:32], data[32:])


class TestSplitPoint:
    """Tests for get_split_point."""

    @pytest.mark.parametrize(
        "length,expected",
        [(1, 0), (2, 1), (3, 2), (4, 2), (5, 4), (8, 4), (9, 8), (100, 64)],
    )
    def test_largest_power_of_two_below(self, length, expected):
        assert get_split_point(length) == expected

    def test_rejects_empty_tree(self):
        with pytest.raises(ValueError):
            get_split_point(0)


class TestComputeRootFromAunts:
    """Tests for compute_root_from_aunts."""

    def test_single_leaf_is_root(self):
        leaf = leaf_hash(b"only")
        assert compute_root_from_aunts(0, 1, leaf, []) == leaf

    def test_two_leaves(self):
        a, b = leaf_hash(b"a"), leaf_hash(b"b")
        assert compute_root_from_aunts(0, 2, a, [b]) == inner_hash(a, b)
        assert compute_root_from_aunts(1, 2, b, [a]) == inner_hash(a, b)

    @pytest.mark.parametrize("index", range(len(ITEMS)))
    def test_every_leaf_of_unbalanced_tree(self, index):
        """Seven leaves split 4 / 3 / 2 / 1."""
        root = merkle_root(ITEMS)
        aunts = merkle_aunts(ITEMS, index)
        assert (
            compute_root_from_aunts(
                index, len(ITEMS), leaf_hash(ITEMS[index]), aunts
            )
            == root
        )

    def test_index_out_of_range(self):
        assert compute_root_from_aunts(2, 2, b"\x00" * 32, [b"\x00" * 32]) is None
        assert compute_root_from_aunts(-1, 2, b"\x00" * 32, [b"\x00" * 32]) is None

    def test_wrong_aunt_count(self):
        aunts = merkle_aunts(ITEMS, 3)
        leaf = leaf_hash(ITEMS[3])
        assert compute_root_from_aunts(3, len(ITEMS), leaf, aunts[:-1]) is None
        assert (
            compute_root_from_aunts(3, len(ITEMS), leaf, aunts + [b"\x00" * 32])
            is None
        )

    def test_extra_aunt_for_single_leaf(self):
        assert compute_root_from_aunts(0, 1, b"\x00" * 32, [b"\x01" * 32]) is None


class TestVerifyMerkleProof:
    """Tests for verify_merkle_proof."""

    def test_valid_proof(self):
        root = merkle_root(ITEMS)
        assert verify_merkle_proof(
            root, ITEMS[5], 5, len(ITEMS), merkle_aunts(ITEMS, 5)
        )

    def test_wrong_leaf(self):
        root = merkle_root(ITEMS)
        assert not verify_merkle_proof(
            root, b"other", 5, len(ITEMS), merkle_aunts(ITEMS, 5)
        )

    def test_wrong_index(self):
        root = merkle_root(ITEMS)
        assert not verify_merkle_proof(
            root, ITEMS[5], 4, len(ITEMS), merkle_aunts(ITEMS, 5)
        )

    def test_expected_leaf_hash_mismatch(self):
        root = merkle_root(ITEMS)
        assert not verify_merkle_proof(
            root,
            ITEMS[5],
            5,
            len(ITEMS),
            merkle_aunts(ITEMS, 5),
            expected_leaf_hash=leaf_hash(ITEMS[4]),
        )

    def test_expected_leaf_hash_match(self):
        root = merkle_root(ITEMS)
        assert verify_merkle_proof(
            root,
            ITEMS[0],
            0,
            len(ITEMS),
            merkle_aunts(ITEMS, 0),
            expected_leaf_hash=leaf_hash(ITEMS[0]),
        )
