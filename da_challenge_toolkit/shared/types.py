"""
Shared type definitions for JSON output of the DA Challenge Toolkit.
"""

from typing import List, Optional, TypedDict

# =============================================================================
# PROOF OUTPUT TYPES
# =============================================================================


class DataRootTupleDict(TypedDict):
    """Leaf proven inside a data commitment."""

    height: int  # Celestia block height
    dataRoot: str  # 0x-prefixed 32-byte data root


class BinaryMerkleProofDict(TypedDict):
    """Binary Merkle proof in the layout the Challenge contract expects."""

    sideNodes: List[str]  # 0x-prefixed 32-byte hashes, leaf to root
    key: int  # Leaf index
    numLeaves: int  # Total leaves in the commitment


class DAProofDict(TypedDict):
    """Data availability proof, ready for JSON output."""

    rootNonce: int  # Blobstream proof nonce of the commitment
    dataRootTuple: DataRootTupleDict
    proof: BinaryMerkleProofDict


# =============================================================================
# SETTLEMENT CHAIN TYPES
# =============================================================================


class CommitmentEventDict(TypedDict):
    """DataCommitmentStored event emitted by BlobstreamX."""

    proofNonce: int
    startBlock: int  # First Celestia height covered (inclusive)
    endBlock: int  # Last Celestia height covered (exclusive)
    dataCommitment: Optional[str]
    blockNumber: Optional[int]  # Settlement block of the event
    transactionHash: Optional[str]


class CelestiaPointerDict(TypedDict):
    """Pointer from a rollup header into Celestia."""

    height: int
    shareStart: int
    shareLen: int
