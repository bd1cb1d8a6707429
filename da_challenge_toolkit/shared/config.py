"""
Runtime configuration for the DA Challenge Toolkit.

The configuration is built once at startup (usually with
``DAConfig.from_env()``) and handed to the services and the manager. The
scanning, locating and assembly functions never read the environment.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address

from da_challenge_toolkit.shared.constants import (
    ContractConstants,
    NetworkConstants,
    ScanConstants,
)
from da_challenge_toolkit.shared.exceptions import ConfigurationException


@dataclass(frozen=True)
class DAConfig:
    """Endpoints, contract addresses and scan parameters."""

    ethereum_rpc: str = NetworkConstants.ETHEREUM_RPC
    celestia_rpc: str = NetworkConstants.CELESTIA_RPC
    blobstreamx_address: str = ContractConstants.BLOBSTREAMX
    challenge_address: str = ContractConstants.CHALLENGE
    canonical_state_chain_address: str = (
        ContractConstants.CANONICAL_STATE_CHAIN
    )
    block_time_ms: int = ScanConstants.BLOCK_TIME_MS
    scan_chunk_size: int = ScanConstants.MAX_BLOCK_RANGE
    request_timeout: float = ScanConstants.RPC_TIMEOUT
    connect_timeout: float = NetworkConstants.CONNECT_TIMEOUT
    user_agent: str = NetworkConstants.USER_AGENT

    def __post_init__(self):
        for field_name in (
            "blobstreamx_address",
            "challenge_address",
            "canonical_state_chain_address",
        ):
            value = getattr(self, field_name)
            if not value or not is_address(value):
                raise ConfigurationException(
                    f"Invalid {field_name}: {value!r} is not a valid address",
                    stage="config",
                    context={field_name: value},
                )
            object.__setattr__(self, field_name, to_checksum_address(value))

        for field_name in ("ethereum_rpc", "celestia_rpc"):
            if not getattr(self, field_name):
                raise ConfigurationException(
                    f"{field_name} must be a non-empty URL", stage="config"
                )

        for field_name in (
            "block_time_ms",
            "scan_chunk_size",
            "request_timeout",
            "connect_timeout",
        ):
            value = getattr(self, field_name)
            if value <= 0:
                raise ConfigurationException(
                    f"{field_name} must be positive, got {value}",
                    stage="config",
                    context={field_name: value},
                )

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv: bool = True,
    ) -> "DAConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            dotenv: Load a ``.env`` file first (ignored when ``environ`` is given)

        Returns:
            DAConfig: Validated configuration
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        def _get(*names: str, default):
            for name in names:
                value = environ.get(name)
                if value:
                    return value
            return default

        return cls(
            ethereum_rpc=_get("ETHEREUM_RPC", default=NetworkConstants.ETHEREUM_RPC),
            celestia_rpc=_get(
                "CELESTIA_RPC",
                "CELESTIA_TRPC",
                default=NetworkConstants.CELESTIA_RPC,
            ),
            blobstreamx_address=_get(
                "BLOBSTREAMX_ADDRESS", default=ContractConstants.BLOBSTREAMX
            ),
            challenge_address=_get(
                "CHALLENGE_ADDRESS", default=ContractConstants.CHALLENGE
            ),
            canonical_state_chain_address=_get(
                "CANONICAL_STATE_CHAIN_ADDRESS",
                default=ContractConstants.CANONICAL_STATE_CHAIN,
            ),
            block_time_ms=_parse_number(
                _get("DA_BLOCK_TIME_MS", default=ScanConstants.BLOCK_TIME_MS),
                "DA_BLOCK_TIME_MS",
                int,
            ),
            scan_chunk_size=_parse_number(
                _get(
                    "DA_SCAN_CHUNK_SIZE", default=ScanConstants.MAX_BLOCK_RANGE
                ),
                "DA_SCAN_CHUNK_SIZE",
                int,
            ),
            request_timeout=_parse_number(
                _get("DA_RPC_TIMEOUT", default=ScanConstants.RPC_TIMEOUT),
                "DA_RPC_TIMEOUT",
                float,
            ),
            connect_timeout=_parse_number(
                _get(
                    "DA_HTTP_CONNECT_TIMEOUT",
                    default=NetworkConstants.CONNECT_TIMEOUT,
                ),
                "DA_HTTP_CONNECT_TIMEOUT",
                float,
            ),
            user_agent=_get("DA_HTTP_UA", default=NetworkConstants.USER_AGENT),
        )

    def with_overrides(self, **changes) -> "DAConfig":
        """Return a copy with some fields replaced (validated again)."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


def _parse_number(value, name: str, kind):
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigurationException(
            f"{name} must be a number, got {value!r}",
            stage="config",
            context={name: value},
        )
