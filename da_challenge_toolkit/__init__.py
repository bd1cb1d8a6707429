"""DA Challenge Toolkit - Python SDK for Blobstream data availability proofs."""

__version__ = "0.1.0"

from .proofs import DAChallengeProofs as ProofManager
from .proofs import DAProof
from .shared.config import DAConfig

__all__ = ["ProofManager", "DAProof", "DAConfig"]
