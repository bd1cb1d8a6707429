"""
Builders for small Celestia-shaped trees used as test vectors.

Roots and proofs are computed with the toolkit's own hash functions so the
tests exercise proof shape and verification. Fixed digests computed
outside the toolkit live in test_known_answers.py.
"""

from typing import Dict, List, Sequence, Tuple

from eth_abi import encode

from da_challenge_toolkit.proofs.merkle import (
    get_split_point,
    inner_hash,
    leaf_hash,
)
from da_challenge_toolkit.proofs.nmt import hash_leaf, hash_node
from da_challenge_toolkit.proofs.types import (
    MerkleProof,
    NMTRangeProof,
    RowProof,
    SharesProof,
)
from da_challenge_toolkit.shared.constants import CelestiaConstants

PARITY = CelestiaConstants.PARITY_NAMESPACE


def namespace(byte: int, version: int = 0) -> bytes:
    """29-byte namespace: version byte then a 28-byte id ending in ``byte``."""
    return bytes([version]) + b"\x00" * 27 + bytes([byte])


def share(tag: int, size: int = 16) -> bytes:
    return bytes([tag]) * size


# -- Tendermint binary Merkle tree --------------------------------------------


def merkle_root_from_hashes(hashes: Sequence[bytes]) -> bytes:
    if len(hashes) == 1:
        return hashes[0]
    k = get_split_point(len(hashes))
    return inner_hash(
        merkle_root_from_hashes(hashes[:k]),
        merkle_root_from_hashes(hashes[k:]),
    )


def merkle_root(items: Sequence[bytes]) -> bytes:
    return merkle_root_from_hashes([leaf_hash(x) for x in items])


def merkle_aunts(items: Sequence[bytes], index: int) -> List[bytes]:
    """Aunts of ``items[index]``, leaf level first."""

    def _aunts(hashes: Sequence[bytes], i: int) -> List[bytes]:
        if len(hashes) == 1:
            return []
        k = get_split_point(len(hashes))
        if i < k:
            return _aunts(hashes[:k], i) + [merkle_root_from_hashes(hashes[k:])]
        return _aunts(hashes[k:], i - k) + [merkle_root_from_hashes(hashes[:k])]

    return _aunts([leaf_hash(x) for x in items], index)


def merkle_proof(items: Sequence[bytes], index: int) -> MerkleProof:
    return MerkleProof(
        total=len(items),
        index=index,
        leaf_hash=leaf_hash(items[index]),
        aunts=tuple(merkle_aunts(items, index)),
    )


# -- Namespaced Merkle tree ---------------------------------------------------


def nmt_leaves(leaves: Sequence[Tuple[bytes, bytes]]) -> List[bytes]:
    """Leaf nodes for ``(namespace, share)`` pairs."""
    return [hash_leaf(ns + data) for ns, data in leaves]


def nmt_root_from_nodes(nodes: Sequence[bytes]) -> bytes:
    if len(nodes) == 1:
        return nodes[0]
    k = get_split_point(len(nodes))
    return hash_node(
        nmt_root_from_nodes(nodes[:k]), nmt_root_from_nodes(nodes[k:])
    )


def nmt_root(leaves: Sequence[Tuple[bytes, bytes]]) -> bytes:
    return nmt_root_from_nodes(nmt_leaves(leaves))


def nmt_range_nodes(
    leaves: Sequence[Tuple[bytes, bytes]], start: int, end: int
) -> List[bytes]:
    """Roots of the maximal subtrees outside ``[start, end)``, left to right."""
    nodes = nmt_leaves(leaves)

    def _collect(lo: int, hi: int) -> List[bytes]:
        if hi <= start or lo >= end:
            return [nmt_root_from_nodes(nodes[lo:hi])]
        if hi - lo == 1:
            return []
        k = get_split_point(hi - lo)
        return _collect(lo, lo + k) + _collect(lo + k, hi)

    return _collect(0, len(nodes))


# -- Celestia square ----------------------------------------------------------


class Square:
    """
    A tiny data square: each row is a list of ``(namespace, share)`` leaves.

    The data root is the Tendermint root over the rows' NMT roots.
    """

    def __init__(self, rows: Sequence[Sequence[Tuple[bytes, bytes]]]):
        self.rows = [list(r) for r in rows]
        self.row_roots = [nmt_root(r) for r in self.rows]
        self.data_root = merkle_root(self.row_roots)

    def shares_proof(
        self, ns: bytes, spans: Dict[int, Tuple[int, int]]
    ) -> SharesProof:
        """Proof for ``{row: (start, end)}`` spans, rows consecutive."""
        row_indexes = sorted(spans)
        data: List[bytes] = []
        share_proofs = []
        for row in row_indexes:
            start, end = spans[row]
            data.extend(s for _, s in self.rows[row][start:end])
            share_proofs.append(
                NMTRangeProof(
                    start=start,
                    end=end,
                    nodes=tuple(nmt_range_nodes(self.rows[row], start, end)),
                )
            )
        return SharesProof(
            data=tuple(data),
            share_proofs=tuple(share_proofs),
            namespace_id=ns[1:],
            namespace_version=ns[0],
            row_proof=RowProof(
                row_roots=tuple(self.row_roots[r] for r in row_indexes),
                proofs=tuple(
                    merkle_proof(self.row_roots, r) for r in row_indexes
                ),
                start_row=row_indexes[0],
                end_row=row_indexes[-1],
            ),
        )


def data_root_tuple_leaf(height: int, data_root: bytes) -> bytes:
    return encode(["uint256", "bytes32"], [height, data_root])


class Commitment:
    """Data roots for Celestia blocks ``[start, end)`` and their commitment."""

    def __init__(self, start: int, end: int, roots: Dict[int, bytes]):
        self.start = start
        self.end = end
        self.roots = {
            h: roots.get(h, bytes([h % 256]) * 32) for h in range(start, end)
        }
        self.leaves = [
            data_root_tuple_leaf(h, self.roots[h]) for h in range(start, end)
        ]
        self.data_commitment = merkle_root(self.leaves)

    def inclusion_proof(self, height: int) -> MerkleProof:
        return merkle_proof(self.leaves, height - self.start)
