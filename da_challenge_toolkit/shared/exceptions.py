"""
Exception hierarchy for the DA Challenge Toolkit.

Exception Categories:
- RetryableException: Transient failures that may succeed on retry (RPC, network)
- NonRetryableException: Permanent failures that won't benefit from retry (bad data)
- ConfigurationException: Startup/config errors that prevent operation

Every exception carries the pipeline ``stage`` that raised it and a
``context`` dict with the key parameters of that stage, so a failure can
be reconstructed without re-running the pipeline.

Pipeline exceptions are categorized:
- ConnectivityException -> RetryableException (RPC unreachable, transport errors)
- QueryException / BlockNotFoundException -> NonRetryableException
- InvalidWindowException -> NonRetryableException (raised before any query)
- CommitmentNotFoundException -> NonRetryableException
- InvalidSharesProofException -> NonRetryableException (correctness failure)
- MalformedProofException -> NonRetryableException
"""

from typing import Any, Dict, Optional


class RetryableException(Exception):
    """
    Base class for exceptions that may succeed on retry.

    Use for transient failures like:
    - RPC timeouts
    - Rate limiting
    - Temporary network issues
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.context = context or {}


class NonRetryableException(Exception):
    """
    Base class for exceptions that won't benefit from retry.

    Use for permanent failures like:
    - Invalid input data
    - Missing required data
    - Proofs that fail verification
    """

    def __init__(
        self,
        message: str,
        stage: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.context = context or {}


class ConfigurationException(NonRetryableException):
    """
    Exception for configuration/startup errors.

    Use when:
    - Required environment variables are malformed
    - Invalid contract addresses
    - Non-positive block time or chunk size
    """

    pass


class ConnectivityException(RetryableException):
    """
    Exception for an RPC endpoint that is unreachable or fails at the
    transport level.

    Never retried inside the pipeline; callers may opt into a retry policy.
    """

    pass


class QueryException(NonRetryableException):
    """
    Exception for an RPC that answered, but with an error object or a
    payload that cannot be used.
    """

    pass


class BlockNotFoundException(QueryException):
    """Exception for a Celestia height with no block (or no data root)."""

    pass


class InvalidWindowException(NonRetryableException):
    """
    Exception for a challenge window that cannot be turned into scan ranges.

    Raised when the derived scan start would fall below genesis or the
    scan parameters are not positive.
    """

    pass


class CommitmentNotFoundException(NonRetryableException):
    """
    Exception for a target height not covered by any commitment in the window.

    ``last_seen_end`` is the highest end block observed across all scanned
    events (0 if none were seen). A ``target_height`` at or above it means
    the height has simply not been committed yet.
    """

    def __init__(
        self,
        target_height: int,
        last_seen_end: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"No commitment found for height {target_height} "
            f"(last commitment ends at {last_seen_end})"
        )
        ctx = {"target_height": target_height, "last_seen_end": last_seen_end}
        ctx.update(context or {})
        super().__init__(message, stage="find_commitment", context=ctx)
        self.target_height = target_height
        self.last_seen_end = last_seen_end

    @property
    def not_yet_committed(self) -> bool:
        """True when the height lies beyond every commitment seen."""
        return self.target_height >= self.last_seen_end


class InvalidSharesProofException(NonRetryableException):
    """
    Exception for a shares proof that fails local verification.

    This is a correctness failure and must never be downgraded to a warning.
    """

    pass


class MalformedProofException(NonRetryableException):
    """
    Exception for structurally invalid proof material.

    Use when:
    - A hash is not exactly 32 bytes
    - Leaf counts or indexes disagree with the commitment
    - A proof does not reconstruct the committed root
    """

    pass
