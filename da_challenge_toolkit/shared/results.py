"""
Result types for explicit success/failure tracking in proof assembly.

This module provides structured result types that carry success/failure
information, so the host application decides what a failed stage means
instead of the toolkit terminating the process.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from da_challenge_toolkit.shared.exceptions import (
    InvalidSharesProofException,
    MalformedProofException,
    NonRetryableException,
    RetryableException,
)

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    ERROR = "error"  # Stage failed, caller may retry or skip
    CRITICAL = "critical"  # Proof material is wrong, stop entirely


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Stage that generated the error (e.g., "find_commitment", "shares_proof")
        message: Human-readable error description
        severity: How severe the error is (affects control flow)
        context: Additional context like height, share range, block range
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    @classmethod
    def from_exception(
        cls, exc: Exception, default_source: str = "unknown"
    ) -> "ProcessingError":
        """Build an error from a toolkit exception, keeping its stage and context."""
        if isinstance(
            exc, (InvalidSharesProofException, MalformedProofException)
        ):
            severity = ErrorSeverity.CRITICAL
        else:
            severity = ErrorSeverity.ERROR

        if isinstance(exc, (RetryableException, NonRetryableException)):
            return cls(
                source=exc.stage or default_source,
                message=exc.message,
                severity=severity,
                context=dict(exc.context),
                exception=exc,
            )
        return cls(
            source=default_source,
            message=str(exc),
            severity=severity,
            exception=exc,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
        }


@dataclass
class Result(Generic[T]):
    """
    Result type that carries success/failure information.

    This is a simple Result/Either monad pattern that makes error handling
    explicit and prevents silent failures.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        errors: Errors that made the operation fail
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ProcessingError) -> "Result[T]":
        """Create a failed result with an error."""
        return cls(success=False, errors=[error])

    def get_error_messages(self) -> List[str]:
        """Get all error messages as strings."""
        return [e.message for e in self.errors]

    def unwrap(self) -> T:
        """Return the data, re-raising the original exception on failure."""
        if self.success:
            return self.data  # type: ignore[return-value]
        for error in self.errors:
            if error.exception is not None:
                raise error.exception
        raise RuntimeError("; ".join(self.get_error_messages()))
