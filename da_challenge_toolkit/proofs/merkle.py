"""
Tendermint / RFC 6962 binary Merkle tree hashing.

Celestia commits to both its row roots (inside the data root) and to
data root tuples (inside a Blobstream data commitment) with this tree:

    leaf  = sha256(0x00 || data)
    inner = sha256(0x01 || left || right)

Trees are left-balanced: a tree over n leaves splits at the largest
power of two strictly below n.
"""

import hashlib
from typing import Optional, Sequence

LEAF_PREFIX = b"\x00"
INNER_PREFIX = b"\x01"


def leaf_hash(data: bytes) -> bytes:
    return hashlib.sha256(LEAF_PREFIX + data).digest()


def inner_hash(left: bytes, right: bytes) -> bytes:
    return hashlib.sha256(INNER_PREFIX + left + right).digest()


def get_split_point(length: int) -> int:
    """Largest power of two strictly less than ``length`` (``length >= 1``)."""
    if length < 1:
        raise ValueError("Trying to split a tree with size < 1")
    k = 1 << (length.bit_length() - 1)
    if k == length:
        k >>= 1
    return k


def compute_root_from_aunts(
    index: int, total: int, leaf: bytes, aunts: Sequence[bytes]
) -> Optional[bytes]:
    """
    Recompute a root from a leaf hash and its aunts.

    Aunts are ordered from the leaf upwards (the last aunt is the sibling of
    the root's direct child). Returns None when the shape is inconsistent.
    """
    if index >= total or index < 0 or total <= 0:
        return None
    if total == 1:
        if aunts:
            return None
        return leaf
    if not aunts:
        return None

    num_left = get_split_point(total)
    if index < num_left:
        left = compute_root_from_aunts(index, num_left, leaf, aunts[:-1])
        if left is None:
            return None
        return inner_hash(left, aunts[-1])

    right = compute_root_from_aunts(
        index - num_left, total - num_left, leaf, aunts[:-1]
    )
    if right is None:
        return None
    return inner_hash(aunts[-1], right)


def verify_merkle_proof(
    root: bytes,
    leaf: bytes,
    index: int,
    total: int,
    aunts: Sequence[bytes],
    expected_leaf_hash: Optional[bytes] = None,
) -> bool:
    """
    Check that ``leaf`` (raw data, hashed here) sits at ``index`` of a tree
    of ``total`` leaves whose root is ``root``.

    When the proof ships its own leaf hash, pass it as ``expected_leaf_hash``
    so a proof for a different leaf is rejected early.
    """
    hashed = leaf_hash(leaf)
    if expected_leaf_hash is not None and expected_leaf_hash != hashed:
        return False
    computed = compute_root_from_aunts(index, total, hashed, aunts)
    return computed is not None and computed == root
