"""
Type definitions for data availability proofs.
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from eth_abi import encode

from da_challenge_toolkit.proofs.merkle import (
    compute_root_from_aunts,
    leaf_hash,
    verify_merkle_proof,
)
from da_challenge_toolkit.proofs.nmt import verify_range_inclusion
from da_challenge_toolkit.shared.constants import CelestiaConstants
from da_challenge_toolkit.shared.exceptions import (
    MalformedProofException,
    QueryException,
)
from da_challenge_toolkit.shared.logging import get_logger
from da_challenge_toolkit.shared.types import (
    CelestiaPointerDict,
    CommitmentEventDict,
    DAProofDict,
)
from da_challenge_toolkit.utils.encoding import to_bytes32, to_hex

_logger = get_logger(__name__)

DA_PROOF_ABI_TYPE = "(uint256,(uint256,bytes32),(bytes32[],uint256,uint256))"

# =============================================================================
# SETTLEMENT CHAIN TYPES
# =============================================================================


@dataclass(frozen=True)
class BlockRange:
    """Inclusive range of settlement-chain blocks scanned in one log query."""

    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"Block range start {self.start} is after end {self.end}"
            )

    def __iter__(self) -> Iterator[int]:
        yield self.start
        yield self.end

    def __len__(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class CommitmentEvent:
    """
    A DataCommitmentStored event: Celestia blocks ``[start_block, end_block)``
    were committed under ``data_commitment`` with ``proof_nonce``.
    """

    start_block: int
    end_block: int
    proof_nonce: int
    data_commitment: Optional[bytes] = None
    block_number: Optional[int] = None  # Settlement block of the event
    transaction_hash: Optional[str] = None

    def covers(self, height: int) -> bool:
        return self.start_block <= height < self.end_block

    @property
    def num_blocks(self) -> int:
        return self.end_block - self.start_block

    def to_dict(self) -> CommitmentEventDict:
        return {
            "proofNonce": self.proof_nonce,
            "startBlock": self.start_block,
            "endBlock": self.end_block,
            "dataCommitment": (
                to_hex(self.data_commitment)
                if self.data_commitment is not None
                else None
            ),
            "blockNumber": self.block_number,
            "transactionHash": self.transaction_hash,
        }


@dataclass(frozen=True)
class CelestiaPointer:
    """Celestia height and share span referenced by a rollup header."""

    height: int
    share_start: int
    share_len: int

    @property
    def share_end(self) -> int:
        """Exclusive end of the share span."""
        return self.share_start + self.share_len

    def to_dict(self) -> CelestiaPointerDict:
        return {
            "height": self.height,
            "shareStart": self.share_start,
            "shareLen": self.share_len,
        }


@dataclass(frozen=True)
class RollupHeader:
    """Header stored in the CanonicalStateChain contract."""

    epoch: int
    l2_height: int
    prev_hash: bytes
    output_root: bytes
    celestia_pointers: Tuple[CelestiaPointer, ...] = ()

    def pointer(self, index: int) -> CelestiaPointer:
        if index < 0 or index >= len(self.celestia_pointers):
            raise QueryException(
                f"Header for epoch {self.epoch} has "
                f"{len(self.celestia_pointers)} pointers, no pointer {index}",
                stage="rollup_header",
                context={
                    "epoch": self.epoch,
                    "pointer_index": index,
                    "pointer_count": len(self.celestia_pointers),
                },
            )
        return self.celestia_pointers[index]


# =============================================================================
# CELESTIA PROOF TYPES
# =============================================================================


@dataclass(frozen=True)
class MerkleProof:
    """Tendermint binary Merkle proof (the data root inclusion proof)."""

    total: int
    index: int
    leaf_hash: bytes
    aunts: Tuple[bytes, ...] = ()

    def verify(self, root: bytes, leaf: bytes) -> bool:
        return verify_merkle_proof(
            root,
            leaf,
            self.index,
            self.total,
            self.aunts,
            expected_leaf_hash=self.leaf_hash or None,
        )


@dataclass(frozen=True)
class NMTRangeProof:
    """Proof that a run of shares ``[start, end)`` belongs to one row."""

    start: int
    end: int
    nodes: Tuple[bytes, ...] = ()
    is_max_namespace_ignored: bool = True


@dataclass(frozen=True)
class RowProof:
    """Proofs of the row roots spanned by a share range against the data root."""

    row_roots: Tuple[bytes, ...]
    proofs: Tuple[MerkleProof, ...]
    start_row: int
    end_row: int

    def verify(self, data_root: bytes) -> bool:
        if len(self.row_roots) != len(self.proofs):
            return False
        if self.end_row - self.start_row + 1 != len(self.row_roots):
            return False
        return all(
            proof.verify(data_root, row_root)
            for row_root, proof in zip(self.row_roots, self.proofs)
        )


@dataclass(frozen=True)
class SharesProof:
    """
    Proof that the shares of a pointer are available at a Celestia height.

    ``data`` holds the raw shares in order; each entry of ``share_proofs``
    covers the next ``end - start`` shares inside the matching row root.
    """

    data: Tuple[bytes, ...]
    share_proofs: Tuple[NMTRangeProof, ...]
    namespace_id: bytes
    namespace_version: int
    row_proof: RowProof

    @property
    def namespace(self) -> bytes:
        return bytes([self.namespace_version]) + self.namespace_id

    def verify(self, data_root: Optional[bytes] = None) -> bool:
        """
        Check every NMT range proof against its row root and, when
        ``data_root`` is given, every row root against the data root.
        """
        if not 0 <= self.namespace_version <= 0xFF:
            return False
        if len(self.namespace) != CelestiaConstants.NAMESPACE_SIZE:
            return False
        if len(self.share_proofs) != len(self.row_proof.row_roots):
            return False
        if sum(p.end - p.start for p in self.share_proofs) != len(self.data):
            return False

        cursor = 0
        for i, proof in enumerate(self.share_proofs):
            used = proof.end - proof.start
            shares = self.data[cursor : cursor + used]
            if not verify_range_inclusion(
                self.namespace,
                shares,
                proof.start,
                proof.end,
                proof.nodes,
                self.row_proof.row_roots[i],
                ignore_max_namespace=proof.is_max_namespace_ignored,
            ):
                _logger.debug(
                    f"NMT proof {i} failed for row "
                    f"{self.row_proof.start_row + i}"
                )
                return False
            cursor += used

        if data_root is not None and not self.row_proof.verify(data_root):
            _logger.debug("Row roots do not verify against the data root")
            return False
        return True


# =============================================================================
# DA PROOF TYPES
# =============================================================================


@dataclass(frozen=True)
class DataRootTuple:
    """Leaf of a Blobstream data commitment."""

    height: int
    data_root: bytes

    def __post_init__(self):
        to_bytes32(self.data_root, "data root", stage="data_root_tuple")

    def abi_encode(self) -> bytes:
        """Leaf bytes as committed by Blobstream: abi.encode(height, dataRoot)."""
        return encode(["uint256", "bytes32"], [self.height, self.data_root])


@dataclass(frozen=True)
class BinaryMerkleProof:
    """Format-neutral inclusion proof consumed by the Challenge contract."""

    side_nodes: Tuple[bytes, ...]
    key: int
    num_leaves: int

    def __post_init__(self):
        for i, node in enumerate(self.side_nodes):
            to_bytes32(node, f"side node {i}", stage="inclusion_proof")
        if self.num_leaves <= 0 or not 0 <= self.key < self.num_leaves:
            raise MalformedProofException(
                f"Leaf key {self.key} is outside a tree of {self.num_leaves} leaves",
                stage="inclusion_proof",
                context={"key": self.key, "num_leaves": self.num_leaves},
            )

    @classmethod
    def from_merkle_proof(cls, proof: MerkleProof) -> "BinaryMerkleProof":
        side_nodes = tuple(
            to_bytes32(aunt, f"aunt {i}", stage="inclusion_proof")
            for i, aunt in enumerate(proof.aunts)
        )
        return cls(
            side_nodes=side_nodes, key=proof.index, num_leaves=proof.total
        )

    def compute_root(self, leaf: bytes) -> Optional[bytes]:
        return compute_root_from_aunts(
            self.key, self.num_leaves, leaf_hash(leaf), self.side_nodes
        )


@dataclass(frozen=True)
class DAProof:
    """Proof that a Celestia data root is part of a Blobstream commitment."""

    root_nonce: int
    data_root_tuple: DataRootTuple
    proof: BinaryMerkleProof = field(repr=False)

    def as_abi_tuple(self) -> tuple:
        return (
            self.root_nonce,
            (self.data_root_tuple.height, self.data_root_tuple.data_root),
            (
                list(self.proof.side_nodes),
                self.proof.key,
                self.proof.num_leaves,
            ),
        )

    def abi_encode(self) -> bytes:
        """ABI encoding of the DAProof struct."""
        return encode([DA_PROOF_ABI_TYPE], [self.as_abi_tuple()])

    def to_dict(self) -> DAProofDict:
        return {
            "rootNonce": self.root_nonce,
            "dataRootTuple": {
                "height": self.data_root_tuple.height,
                "dataRoot": to_hex(self.data_root_tuple.data_root),
            },
            "proof": {
                "sideNodes": [to_hex(n) for n in self.proof.side_nodes],
                "key": self.proof.key,
                "numLeaves": self.proof.num_leaves,
            },
        }
