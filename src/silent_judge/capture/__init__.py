"""Capture outcomes and the closed set of sensor summary records."""

from .outcome import CaptureOutcome, CaptureStatus, failure, outcome, success
from .sensors import (
    SENSOR_TYPES,
    ConsoleSummary,
    NavigationSummary,
    NetworkSummary,
    SensorSummary,
    StateSummary,
    UIStateSummary,
    canonical_sensor_name,
    coerce_summary,
)

__all__ = [
    "CaptureOutcome",
    "CaptureStatus",
    "outcome",
    "success",
    "failure",
    "SENSOR_TYPES",
    "SensorSummary",
    "NavigationSummary",
    "NetworkSummary",
    "ConsoleSummary",
    "StateSummary",
    "UIStateSummary",
    "canonical_sensor_name",
    "coerce_summary",
]
