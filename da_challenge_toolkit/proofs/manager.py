from typing import Any, Callable, Dict, List, Optional, TypeVar

from da_challenge_toolkit.proofs.generators.commitment import find_commitment
from da_challenge_toolkit.proofs.generators.da_proof import assemble_da_proof
from da_challenge_toolkit.proofs.generators.scan_ranges import (
    challenge_window_block_ranges,
)
from da_challenge_toolkit.proofs.types import (
    BlockRange,
    CelestiaPointer,
    CommitmentEvent,
    DAProof,
)
from da_challenge_toolkit.shared.config import DAConfig
from da_challenge_toolkit.shared.exceptions import (
    NonRetryableException,
    RetryableException,
)
from da_challenge_toolkit.shared.logging import get_logger
from da_challenge_toolkit.shared.results import ProcessingError, Result
from da_challenge_toolkit.shared.retry import NO_RETRY_CONFIG, RetryConfig
from da_challenge_toolkit.shared.services.celestia_service import (
    CelestiaService,
)
from da_challenge_toolkit.shared.services.web3_service import (
    SettlementChainService,
)

T = TypeVar("T")

_logger = get_logger(__name__)


class DAChallengeProofs:
    """Entry point for locating commitments and generating DA proofs"""

    def __init__(
        self,
        config: Optional[DAConfig] = None,
        settlement: Optional[SettlementChainService] = None,
        celestia: Optional[CelestiaService] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        self.config = config if config is not None else DAConfig.from_env()
        self.settlement = (
            settlement
            if settlement is not None
            else SettlementChainService(self.config)
        )
        self.celestia = (
            celestia if celestia is not None else CelestiaService(self.config)
        )
        self.retry_config = (
            retry_config if retry_config is not None else NO_RETRY_CONFIG
        )

    def close(self) -> None:
        """Release the Celestia HTTP client"""
        self.celestia.close()

    def __enter__(self) -> "DAChallengeProofs":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _run(
        self,
        source: str,
        operation: Callable[[], T],
        max_retries: Optional[int],
        context: Optional[Dict[str, Any]] = None,
    ) -> Result[T]:
        """
        Run a pipeline call and turn toolkit exceptions into a failed Result.

        Runs under ``retry_config``; ``max_retries`` overrides its number of
        attempts for this call. Only connectivity failures are retried.
        """
        try:
            policy = (
                self.retry_config
                if max_retries is None
                else self.retry_config.with_attempts(max_retries)
            )
            data = policy.run(operation, operation_name=source)
            return Result.ok(data)
        except (RetryableException, NonRetryableException) as e:
            error = ProcessingError.from_exception(e, default_source=source)
            if context:
                error.context = {**context, **error.context}
            _logger.error(f"{error.source} failed: {error.message}")
            return Result.fail(error)

    def check_connections(self) -> Result[Dict[str, Any]]:
        """
        Check both RPC endpoints answer.

        Returns:
            Result[dict]: ``chain_id`` of the settlement chain and the
            Celestia ``network`` / ``latest_height``
        """

        def _check():
            chain_id = self.settlement.check_connection()
            status = self.celestia.status()
            return {"chain_id": chain_id, **status}

        return self._run("check_connections", _check, max_retries=1)

    def latest_rollup_block(
        self, max_retries: Optional[int] = None
    ) -> Result[int]:
        """Index of the newest header in CanonicalStateChain"""
        return self._run(
            "rollup_header", self.settlement.latest_rollup_block, max_retries
        )

    def get_pointer(
        self,
        rollup_block: int,
        pointer_index: int = 0,
        max_retries: Optional[int] = None,
    ) -> Result[CelestiaPointer]:
        """
        Read a Celestia pointer from a rollup header.

        Args:
            rollup_block: Header index in CanonicalStateChain
            pointer_index: Which of the header's pointers to use
            max_retries: Attempts for RPC calls (default: retry_config)

        Returns:
            Result[CelestiaPointer]: Success with the pointer, or failure with error
        """

        def _get():
            header = self.settlement.get_rollup_header(rollup_block)
            return header.pointer(pointer_index)

        return self._run(
            "rollup_header",
            _get,
            max_retries,
            context={"rollup_block": rollup_block, "pointer_index": pointer_index},
        )

    def get_scan_ranges(
        self, max_retries: Optional[int] = None
    ) -> Result[List[BlockRange]]:
        """Settlement block ranges covering the current challenge window"""
        return self._run(
            "scan_window",
            lambda: challenge_window_block_ranges(
                self.settlement,
                self.config.block_time_ms,
                self.config.scan_chunk_size,
            ),
            max_retries,
        )

    def find_commitment(
        self, height: int, max_retries: Optional[int] = None
    ) -> Result[CommitmentEvent]:
        """
        Find the commitment covering a Celestia height in the challenge window.

        Args:
            height: Celestia block height
            max_retries: Attempts for RPC calls (default: retry_config)

        Returns:
            Result[CommitmentEvent]: Success with the event, or failure with error
        """

        def _find():
            ranges = challenge_window_block_ranges(
                self.settlement,
                self.config.block_time_ms,
                self.config.scan_chunk_size,
            )
            return find_commitment(self.settlement, ranges, height)

        return self._run(
            "find_commitment", _find, max_retries, context={"height": height}
        )

    def get_da_proof(
        self,
        pointer: CelestiaPointer,
        commitment: CommitmentEvent,
        max_retries: Optional[int] = None,
    ) -> Result[DAProof]:
        """
        Assemble the DA proof for a pointer and its commitment.

        Returns:
            Result[DAProof]: Success with proof data, or failure with error
        """
        return self._run(
            "da_proof",
            lambda: assemble_da_proof(self.celestia, pointer, commitment),
            max_retries,
            context={
                "height": pointer.height,
                "proof_nonce": commitment.proof_nonce,
            },
        )

    def get_rollup_da_proof(
        self,
        rollup_block: int,
        pointer_index: int = 0,
        max_retries: Optional[int] = None,
    ) -> Result[DAProof]:
        """
        Full pipeline: rollup header -> pointer -> commitment -> DA proof.

        Stops at the first failed stage and returns its error.
        """
        pointer_result = self.get_pointer(
            rollup_block, pointer_index, max_retries
        )
        if not pointer_result.success:
            return Result(success=False, errors=pointer_result.errors)
        pointer = pointer_result.data

        commitment_result = self.find_commitment(pointer.height, max_retries)
        if not commitment_result.success:
            return Result(success=False, errors=commitment_result.errors)

        return self.get_da_proof(pointer, commitment_result.data, max_retries)
