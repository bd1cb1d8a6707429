from da_challenge_toolkit.proofs.types import (
    BinaryMerkleProof,
    BlockRange,
    CelestiaPointer,
    CommitmentEvent,
    DAProof,
    DataRootTuple,
    MerkleProof,
    RollupHeader,
    SharesProof,
)
from da_challenge_toolkit.proofs.generators.commitment import find_commitment
from da_challenge_toolkit.proofs.generators.da_proof import assemble_da_proof
from da_challenge_toolkit.proofs.generators.scan_ranges import (
    challenge_window_block_ranges,
    derive_scan_ranges,
)
from da_challenge_toolkit.proofs.manager import DAChallengeProofs

__all__ = [
    "DAChallengeProofs",
    "derive_scan_ranges",
    "challenge_window_block_ranges",
    "find_commitment",
    "assemble_da_proof",
    "BlockRange",
    "CommitmentEvent",
    "CelestiaPointer",
    "RollupHeader",
    "SharesProof",
    "MerkleProof",
    "BinaryMerkleProof",
    "DataRootTuple",
    "DAProof",
]
