"""
Namespaced Merkle Tree (NMT) range-proof verification, Celestia flavour.

Every node is ``min_ns || max_ns || digest`` (29 + 29 + 32 bytes):

    leaf(ns || share)  = ns || ns || sha256(0x00 || ns || share)
    node(left, right)  = min_ns || max_ns || sha256(0x01 || left || right)

Row trees are built with the "ignore max namespace" rule: when the right
child starts in the parity namespace (0xff * 29), the parent keeps the
left child's max namespace so parity shares do not widen the range.
"""

import hashlib
from typing import List, Optional, Sequence

from da_challenge_toolkit.proofs.merkle import get_split_point
from da_challenge_toolkit.shared.constants import CelestiaConstants
from da_challenge_toolkit.shared.logging import get_logger

NS_SIZE = CelestiaConstants.NAMESPACE_SIZE
NODE_SIZE = CelestiaConstants.NMT_NODE_SIZE

_logger = get_logger(__name__)


class NMTHashError(ValueError):
    """Raised when a node or leaf does not have the NMT layout."""


def _check_node(node: bytes, where: str) -> None:
    if len(node) != NODE_SIZE:
        raise NMTHashError(
            f"{where} must be {NODE_SIZE} bytes, got {len(node)}"
        )
    if node[:NS_SIZE] > node[NS_SIZE : 2 * NS_SIZE]:
        raise NMTHashError(f"{where} has min namespace > max namespace")


def hash_leaf(namespaced_data: bytes) -> bytes:
    """Hash ``ns || data``; the first 29 bytes are the leaf's namespace."""
    if len(namespaced_data) < NS_SIZE:
        raise NMTHashError(
            f"leaf must be at least {NS_SIZE} bytes, got {len(namespaced_data)}"
        )
    ns = namespaced_data[:NS_SIZE]
    digest = hashlib.sha256(b"\x00" + namespaced_data).digest()
    return ns + ns + digest


def hash_node(
    left: bytes, right: bytes, ignore_max_namespace: bool = True
) -> bytes:
    _check_node(left, "left node")
    _check_node(right, "right node")

    left_min, left_max = left[:NS_SIZE], left[NS_SIZE : 2 * NS_SIZE]
    right_min, right_max = right[:NS_SIZE], right[NS_SIZE : 2 * NS_SIZE]
    if left_max > right_min:
        raise NMTHashError("sibling namespaces are out of order")

    min_ns = min(left_min, right_min)
    if (
        ignore_max_namespace
        and right_min == CelestiaConstants.PARITY_NAMESPACE
    ):
        max_ns = left_max
    else:
        max_ns = max(left_max, right_max)

    digest = hashlib.sha256(b"\x01" + left + right).digest()
    return min_ns + max_ns + digest


def verify_range_inclusion(
    namespace: bytes,
    shares: Sequence[bytes],
    start: int,
    end: int,
    nodes: Sequence[bytes],
    root: bytes,
    ignore_max_namespace: bool = True,
) -> bool:
    """
    Verify that ``shares`` occupy leaves ``[start, end)`` of the row whose
    NMT root is ``root``.

    Each share is pushed into the tree as ``namespace || share``. ``nodes``
    are the proof's subtree roots in left-to-right order.
    """
    if len(namespace) != NS_SIZE:
        _logger.debug(
            f"namespace has {len(namespace)} bytes, expected {NS_SIZE}"
        )
        return False
    if start < 0 or start >= end:
        return False
    if len(shares) != end - start:
        return False

    try:
        _check_node(root, "root")
        leaf_hashes = [hash_leaf(namespace + share) for share in shares]
        computed = _root_from_leaf_hashes(
            leaf_hashes, start, end, list(nodes), ignore_max_namespace
        )
    except NMTHashError as e:
        _logger.debug(f"NMT range proof rejected: {e}")
        return False

    return computed == root


def _root_from_leaf_hashes(
    leaf_hashes: List[bytes],
    start: int,
    end: int,
    nodes: List[bytes],
    ignore_max_namespace: bool,
) -> bytes:
    pending_leaves = list(leaf_hashes)

    def pop_node() -> Optional[bytes]:
        if nodes:
            return nodes.pop(0)
        return None

    def compute(lo: int, hi: int) -> Optional[bytes]:
        if hi - lo == 1:
            if start <= lo < end:
                return pending_leaves.pop(0)
            return pop_node()

        if hi <= start or lo >= end:
            return pop_node()

        k = get_split_point(hi - lo)
        left = compute(lo, lo + k)
        right = compute(lo + k, hi)
        # only the right subtree may be missing
        if left is None:
            raise NMTHashError("proof is missing a left subtree")
        if right is None:
            return left
        return hash_node(left, right, ignore_max_namespace)

    # smallest perfect subtree holding the proven range
    estimate = get_split_point(end) * 2 or 1
    root = compute(0, estimate)
    if root is None:
        raise NMTHashError("empty proof")

    while nodes:
        root = hash_node(root, nodes.pop(0), ignore_max_namespace)

    if pending_leaves:
        raise NMTHashError("proof does not consume every share")
    return root
