"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

from unittest.mock import MagicMock

import pytest

from da_challenge_toolkit.proofs.types import CommitmentEvent
from da_challenge_toolkit.shared.config import DAConfig


@pytest.fixture
def da_config() -> DAConfig:
    """Configuration with placeholder endpoints and default addresses."""
    return DAConfig(
        ethereum_rpc="http://settlement.test:8545",
        celestia_rpc="http://celestia.test:26657",
        block_time_ms=12000,
        scan_chunk_size=10000,
        request_timeout=5.0,
    )


@pytest.fixture
def mock_settlement():
    """Mock SettlementChainService for unit tests."""
    service = MagicMock()
    service.challenge_window_seconds.return_value = 86400
    service.current_block_number.return_value = 20000
    service.filter_commitment_events.return_value = []
    service.check_connection.return_value = 11155111
    return service


@pytest.fixture
def mock_celestia():
    """Mock CelestiaService for unit tests."""
    service = MagicMock()
    service.status.return_value = {
        "network": "mocha-4",
        "latest_height": 1600000,
    }
    return service


@pytest.fixture
def sample_commitments():
    """Two consecutive commitments: [100, 200) and [200, 300)."""
    return [
        CommitmentEvent(start_block=100, end_block=200, proof_nonce=1),
        CommitmentEvent(start_block=200, end_block=300, proof_nonce=2),
    ]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")
