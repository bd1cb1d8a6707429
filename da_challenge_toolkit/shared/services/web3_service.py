"""
Settlement chain service module.

This module provides a SettlementChainService class that wraps the web3
connection to the settlement chain and the three contracts the toolkit
reads: BlobstreamX (data commitments), Challenge (challenge window) and
CanonicalStateChain (rollup headers with Celestia pointers).

RPC failures are translated into the toolkit's exception hierarchy: a
transport failure becomes ConnectivityException, an RPC or contract error
becomes QueryException.
"""

from typing import Any, Callable, Dict, List, Optional, TypeVar

from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    Web3Exception,
)

from da_challenge_toolkit.proofs.types import (
    CelestiaPointer,
    CommitmentEvent,
    RollupHeader,
)
from da_challenge_toolkit.shared.config import DAConfig
from da_challenge_toolkit.shared.constants import ContractConstants
from da_challenge_toolkit.shared.exceptions import (
    ConnectivityException,
    QueryException,
)
from da_challenge_toolkit.shared.logging import get_logger
from da_challenge_toolkit.shared.services.resource_manager import (
    resource_manager,
)
from da_challenge_toolkit.utils.encoding import to_hex

T = TypeVar("T")

_logger = get_logger(__name__)


class SettlementChainService:
    """
    A service class for the settlement-chain side of a DA challenge.

    Reads are blocking and bounded by the configured request timeout.
    """

    def __init__(self, config: DAConfig, w3: Optional[Web3] = None):
        """
        Initialize the SettlementChainService.

        Args:
            config (DAConfig): Endpoints and contract addresses.
            w3 (Web3, optional): Pre-built Web3 instance (used by tests).
        """
        self.config = config
        self.w3 = w3 if w3 is not None else self._initialize_web3(config)
        self._contract_cache: Dict[str, Any] = {}

    @staticmethod
    def _initialize_web3(config: DAConfig) -> Web3:
        """Initialize Web3 instance with the configured timeout and no provider retries"""
        return Web3(
            Web3.HTTPProvider(
                config.ethereum_rpc,
                request_kwargs={"timeout": config.request_timeout},
                exception_retry_configuration=None,
            )
        )

    def _call(
        self, stage: str, context: Dict[str, Any], fn: Callable[[], T]
    ) -> T:
        try:
            return fn()
        except (ContractLogicError, BadFunctionCallOutput) as e:
            raise QueryException(
                f"{stage}: contract call failed: {e}",
                stage=stage,
                context=context,
            ) from e
        except OSError as e:
            raise ConnectivityException(
                f"{stage}: settlement RPC unreachable: {e}",
                stage=stage,
                context={**context, "rpc": self.config.ethereum_rpc},
            ) from e
        except Web3Exception as e:
            raise QueryException(
                f"{stage}: settlement RPC error: {e}",
                stage=stage,
                context=context,
            ) from e

    def get_contract(self, name: str) -> Any:
        """Get a contract instance for one of the known contracts"""
        if name not in self._contract_cache:
            address = {
                "blobstreamx": self.config.blobstreamx_address,
                "challenge": self.config.challenge_address,
                "canonical_state_chain": (
                    self.config.canonical_state_chain_address
                ),
            }[name]
            abi = resource_manager.load_abi(ContractConstants.ABI_NAMES[name])
            self._contract_cache[name] = self.w3.eth.contract(
                address=Web3.to_checksum_address(address), abi=abi
            )
        return self._contract_cache[name]

    def check_connection(self) -> int:
        """Return the chain id, failing if the RPC cannot be reached"""
        return self._call("connect_settlement", {}, lambda: self.w3.eth.chain_id)

    def current_block_number(self) -> int:
        return self._call(
            "current_block", {}, lambda: int(self.w3.eth.block_number)
        )

    def challenge_window_seconds(self) -> int:
        """Challenge window of the Challenge contract, in seconds"""
        contract = self.get_contract("challenge")
        return self._call(
            "challenge_window",
            {"challenge": self.config.challenge_address},
            lambda: int(contract.functions.challengeWindow().call()),
        )

    def filter_commitment_events(
        self, start_block: int, end_block: int
    ) -> List[CommitmentEvent]:
        """
        DataCommitmentStored events emitted in ``[start_block, end_block]``,
        in the order returned by the node.
        """
        contract = self.get_contract("blobstreamx")
        logs = self._call(
            "filter_commitments",
            {"from_block": start_block, "to_block": end_block},
            lambda: contract.events.DataCommitmentStored().get_logs(
                from_block=start_block, to_block=end_block
            ),
        )
        events = [self._decode_commitment(log) for log in logs]
        _logger.debug(
            f"{len(events)} commitments emitted in blocks {start_block}-{end_block}"
        )
        return events

    @staticmethod
    def _decode_commitment(log: Any) -> CommitmentEvent:
        args = log["args"]
        tx_hash = log.get("transactionHash")
        return CommitmentEvent(
            start_block=int(args["startBlock"]),
            end_block=int(args["endBlock"]),
            proof_nonce=int(args["proofNonce"]),
            data_commitment=bytes(args["dataCommitment"]),
            block_number=log.get("blockNumber"),
            transaction_hash=to_hex(tx_hash) if tx_hash is not None else None,
        )

    def latest_rollup_block(self) -> int:
        """Index of the CanonicalStateChain head"""
        contract = self.get_contract("canonical_state_chain")
        return self._call(
            "rollup_header",
            {},
            lambda: int(contract.functions.chainHead().call()),
        )

    def get_rollup_header(self, rollup_block: int) -> RollupHeader:
        """Rollup header stored at ``rollup_block`` in CanonicalStateChain"""
        contract = self.get_contract("canonical_state_chain")
        raw = self._call(
            "rollup_header",
            {"rollup_block": rollup_block},
            lambda: contract.functions.getHeaderByNum(rollup_block).call(),
        )
        epoch, l2_height, prev_hash, output_root, pointers = raw
        return RollupHeader(
            epoch=int(epoch),
            l2_height=int(l2_height),
            prev_hash=bytes(prev_hash),
            output_root=bytes(output_root),
            celestia_pointers=tuple(
                CelestiaPointer(
                    height=int(height),
                    share_start=int(share_start),
                    share_len=int(share_len),
                )
                for height, share_start, share_len in pointers
            ),
        )
