"""Error taxonomy with error codes for the judgment core.

Error Code Convention:
    SJ1xx - Scope classification
    SJ2xx - Capture outcomes / sensor summaries
    SJ3xx - Evidence bundles
    SJ4xx - Judgment (execution mode, confidence, evidence law)
    SJ5xx - Determinism (normalization, serialization)

Only SJ4xx errors are raised by the core today. The other codes are
attached to log records when a component degrades instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Scope classification (SJ1xx)
    SJ100 = "SJ100"  # Input exceeded size limit, degraded to opaque comparison
    SJ101 = "SJ101"  # Input was not text, coerced

    # Capture (SJ2xx)
    SJ200 = "SJ200"  # Unknown capture status
    SJ201 = "SJ201"  # Sensor summary could not be coerced

    # Evidence (SJ3xx)
    SJ300 = "SJ300"  # Sensor reported failure, signal unavailable
    SJ301 = "SJ301"  # Unknown sensor ignored

    # Judgment (SJ4xx)
    SJ400 = "SJ400"  # Execution mode context missing at confidence time
    SJ401 = "SJ401"  # Target URL unreachable, no execution mode possible
    SJ402 = "SJ402"  # CONFIRMED downgraded by evidence law

    # Determinism (SJ5xx)
    SJ500 = "SJ500"  # Value not representable in canonical JSON


@dataclass
class JudgeError(Exception):
    """Base exception with structured context for logging.

    Attributes:
        message: Human-readable error description
        code: Structured error code for categorization
        context: Additional context (promise id, sensor name, etc.)
        recoverable: Whether the run can continue
        recovery_hint: Suggested fix for the user
    """

    message: str
    code: ErrorCode
    context: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = False
    recovery_hint: str | None = None

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_json(self) -> dict[str, Any]:
        """Structured logging format."""
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context,
            "recoverable": self.recoverable,
            "recovery_hint": self.recovery_hint,
        }


class ExecutionContextError(JudgeError):
    """Errors in run setup that make judgment impossible (SJ4xx)."""

    pass


class MissingExecutionContextError(ExecutionContextError):
    """Raised when confidence is assessed without an ExecutionModeContext."""

    def __init__(self, promise_id: str | None = None):
        super().__init__(
            message="Confidence assessment requires an ExecutionModeContext",
            code=ErrorCode.SJ400,
            context={"promise_id": promise_id} if promise_id else {},
            recovery_hint="Resolve the execution mode once at run start and pass it to every assessment",
        )


class UnreachableTargetError(ExecutionContextError):
    """Raised when the run's target URL was not reachable."""

    def __init__(self, url: str | None = None):
        super().__init__(
            message="Target URL is not reachable; no execution mode can be resolved",
            code=ErrorCode.SJ401,
            context={"url": url} if url else {},
            recovery_hint="Check that the target URL is up before judging interactions",
        )
