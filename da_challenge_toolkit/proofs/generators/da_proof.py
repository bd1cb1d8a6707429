"""Data availability proof assembler"""

from da_challenge_toolkit.proofs.types import (
    BinaryMerkleProof,
    CelestiaPointer,
    CommitmentEvent,
    DAProof,
    DataRootTuple,
    MerkleProof,
)
from da_challenge_toolkit.shared.exceptions import (
    InvalidSharesProofException,
    MalformedProofException,
)
from da_challenge_toolkit.shared.logging import get_logger
from da_challenge_toolkit.utils.encoding import to_bytes32

_logger = get_logger(__name__)


def _check_inclusion_proof(
    proof: MerkleProof,
    pointer: CelestiaPointer,
    commitment: CommitmentEvent,
) -> None:
    """The proof must address ``pointer.height`` inside the commitment's tree."""
    context = {
        "height": pointer.height,
        "start_block": commitment.start_block,
        "end_block": commitment.end_block,
        "total": proof.total,
        "index": proof.index,
    }
    if proof.total != commitment.num_blocks:
        raise MalformedProofException(
            f"Inclusion proof has {proof.total} leaves, commitment covers "
            f"{commitment.num_blocks} blocks",
            stage="inclusion_proof",
            context=context,
        )
    if proof.index != pointer.height - commitment.start_block:
        raise MalformedProofException(
            f"Inclusion proof is for leaf {proof.index}, expected "
            f"{pointer.height - commitment.start_block}",
            stage="inclusion_proof",
            context=context,
        )


def assemble_da_proof(
    celestia,
    pointer: CelestiaPointer,
    commitment: CommitmentEvent,
) -> DAProof:
    """
    Build the DA proof for a pointer committed by ``commitment``.

    Steps:
        1. Fetch the block at ``pointer.height`` and take its data root
        2. Fetch the shares proof for ``[share_start, share_end)``
        3. Verify it locally (also against the data root)
        4. Fetch the data root inclusion proof for the commitment's range
        5-6. Build the data root tuple and normalize the inclusion proof
        7. Attach the commitment's proof nonce

    Args:
        celestia: Service exposing ``data_root``, ``shares_proof`` and
            ``data_root_inclusion_proof`` (see CelestiaService)
        pointer: Celestia height and share span from the rollup header
        commitment: Commitment covering ``pointer.height``

    Returns:
        DAProof: The assembled proof

    Raises:
        BlockNotFoundException: No block at the pointer height
        InvalidSharesProofException: Shares proof failed verification
        MalformedProofException: Bad hash sizes, leaf counts or root mismatch
        ConnectivityException / QueryException: From the Celestia RPC
    """
    height = pointer.height

    # 1. data root of the block holding the shares
    data_root = to_bytes32(
        celestia.data_root(height), "data root", stage="fetch_block"
    )

    # 2-3. shares proof, verified before anything else is fetched
    shares_proof = celestia.shares_proof(
        height, pointer.share_start, pointer.share_end
    )
    if not shares_proof.verify(data_root):
        raise InvalidSharesProofException(
            f"Shares proof for shares [{pointer.share_start}, "
            f"{pointer.share_end}) at height {height} failed verification",
            stage="shares_proof",
            context={
                "height": height,
                "share_start": pointer.share_start,
                "share_end": pointer.share_end,
            },
        )
    _logger.debug(
        f"Shares [{pointer.share_start}, {pointer.share_end}) verified at height {height}"
    )

    # 4. data root inclusion proof against the commitment range
    inclusion_proof = celestia.data_root_inclusion_proof(
        height, commitment.start_block, commitment.end_block
    )
    _check_inclusion_proof(inclusion_proof, pointer, commitment)

    # 5-6. leaf and normalized proof
    tuple_ = DataRootTuple(height=height, data_root=data_root)
    binary_proof = BinaryMerkleProof.from_merkle_proof(inclusion_proof)

    if commitment.data_commitment is not None:
        computed = binary_proof.compute_root(tuple_.abi_encode())
        if computed != commitment.data_commitment:
            raise MalformedProofException(
                f"Inclusion proof for height {height} does not reconstruct "
                f"the data commitment of nonce {commitment.proof_nonce}",
                stage="inclusion_proof",
                context={
                    "height": height,
                    "proof_nonce": commitment.proof_nonce,
                    "computed": computed.hex() if computed else None,
                    "data_commitment": commitment.data_commitment.hex(),
                },
            )

    # 7.
    proof = DAProof(
        root_nonce=commitment.proof_nonce,
        data_root_tuple=tuple_,
        proof=binary_proof,
    )
    _logger.info(
        f"Assembled DA proof for height {height} under nonce {commitment.proof_nonce}"
    )
    return proof
