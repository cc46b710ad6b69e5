"""Uniform capture outcome for every sensor.

A CaptureOutcome answers one question for one sensor call: did it produce
usable data? The evidence builder folds over these without knowing how
any sensor works.

Invariants (enforced by coercion, never by raising):
    status == FAILED  -> data is None
    status == SUCCESS -> error is None
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..exceptions import ErrorCode
from ..logging_config import get_logger

logger = get_logger(__name__)


class CaptureStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class CaptureOutcome:
    sensor: str
    status: CaptureStatus
    data: Any = None
    error: Optional[str] = None
    stage: Optional[str] = None

    @property
    def usable(self) -> bool:
        """True when the sensor produced data that may be combined."""
        return self.status is not CaptureStatus.FAILED and self.data is not None

    def to_dict(self) -> dict[str, Any]:
        data = self.data
        if hasattr(data, "to_dict"):
            data = data.to_dict()
        return {
            "sensor": self.sensor,
            "status": self.status.value,
            "data": data,
            "error": self.error,
            "stage": self.stage,
        }


def _coerce_status(status: Any) -> tuple[CaptureStatus, Optional[str]]:
    if isinstance(status, CaptureStatus):
        return status, None
    try:
        return CaptureStatus(str(status).strip().lower()), None
    except ValueError:
        return CaptureStatus.FAILED, f"unknown capture status: {status!r}"


def outcome(
    sensor: str,
    status: Any,
    data: Any = None,
    error: Optional[str] = None,
    stage: Optional[str] = None,
) -> CaptureOutcome:
    """Build a CaptureOutcome. Never raises.

    An unrecognized status becomes FAILED with an explanatory error, so a
    broken sensor can only ever remove a signal, never invent one.
    """
    resolved, status_error = _coerce_status(status)
    if status_error is not None:
        logger.debug("[%s] Sensor %s: %s", ErrorCode.SJ200.value, sensor, status_error)
        error = f"{error}; {status_error}" if error else status_error

    if resolved is CaptureStatus.FAILED:
        data = None
        if not error:
            error = "capture failed"
    elif resolved is CaptureStatus.SUCCESS:
        error = None

    return CaptureOutcome(
        sensor=str(sensor),
        status=resolved,
        data=data,
        error=None if error is None else str(error),
        stage=None if stage is None else str(stage),
    )


def success(sensor: str, data: Any, stage: Optional[str] = None) -> CaptureOutcome:
    return outcome(sensor, CaptureStatus.SUCCESS, data=data, stage=stage)


def failure(sensor: str, message: str, stage: Optional[str] = None) -> CaptureOutcome:
    return outcome(sensor, CaptureStatus.FAILED, error=message, stage=stage)
