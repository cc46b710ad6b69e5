"""Confidence assessment for one evidence bundle.

Score model:
    raw   = feedback_weight                      (if feedback was seen)
          + signal_weight x min(signals, max)    (distinct contributing signals)
          + multi_sensor_bonus                   (signals from 2+ sensors)
    final = min(raw, execution-mode ceiling[, non-deterministic cap])

The level is read off the final score; a bundle with no contributing signal
at all is UNKNOWN rather than LOW.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..config import DEFAULT_CONFIG, JudgeConfig
from ..evidence import EvidenceBundle, EvidenceSignals
from ..exceptions import MissingExecutionContextError
from ..logging_config import get_logger
from .execution_mode import ExecutionModeContext

logger = get_logger(__name__)


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNKNOWN = "UNKNOWN"


NON_DETERMINISTIC = "NON_DETERMINISTIC"


@dataclass(frozen=True)
class ConfidenceAssessment:
    raw_score: float
    ceiling: float
    final_score: float
    level: ConfidenceLevel
    evidence_sufficient: bool
    contributing_signals: tuple[str, ...] = ()
    reasons: tuple[str, ...] = ()
    execution_mode: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rawScore": self.raw_score,
            "ceiling": self.ceiling,
            "finalScore": self.final_score,
            "level": self.level.value,
            "evidenceSufficient": self.evidence_sufficient,
            "contributingSignals": list(self.contributing_signals),
            "reasons": list(self.reasons),
            "executionMode": self.execution_mode,
        }


def contributing_signals(signals: EvidenceSignals) -> list[tuple[str, str]]:
    """Distinct contributing signals as (signal, sensor) pairs."""
    found: list[tuple[str, str]] = []
    if signals.meaningful_dom_change:
        found.append(("meaningful_dom_change", "dom"))
    elif signals.dom_changed:
        found.append(("dom_change", "dom"))
    if signals.url_changed:
        found.append(("url_change", "navigation"))
    if signals.history_length_delta != 0:
        found.append(("history_change", "navigation"))
    if signals.network_request_count > 0:
        found.append(("network_request", "network"))
    if signals.network_failure_count > 0:
        found.append(("network_failure", "network"))
    if signals.state_changed:
        found.append(("state_mutation", "state"))
    if signals.ui_state_flip:
        found.append(("ui_state_flip", "ui_state"))
    if signals.console_error_count > 0:
        found.append(("console_errors", "console"))
    return found


def is_evidence_sufficient(signals: EvidenceSignals) -> bool:
    """Substantive evidence: something observable happened, or a sensor said so.

    Explicit sensor data means a nonzero console, history, UI-flip or
    blocked-write reading.
    """
    return (
        signals.dom_changed
        or signals.url_changed
        or signals.network_request_count > 0
        or signals.state_changed
        or signals.console_error_count > 0
        or signals.history_length_delta != 0
        or signals.ui_state_flip
        or signals.blocked_writes > 0
    )


def level_for(score: float, signal_count: int, config: JudgeConfig) -> ConfidenceLevel:
    if signal_count == 0:
        return ConfidenceLevel.UNKNOWN
    thresholds = config.confidence
    if score >= thresholds.high_threshold:
        return ConfidenceLevel.HIGH
    if score >= thresholds.medium_threshold:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def assess_confidence(
    bundle: EvidenceBundle,
    context: Optional[ExecutionModeContext],
    config: Optional[JudgeConfig] = None,
    determinism_verdict: Any = None,
) -> ConfidenceAssessment:
    """Score a bundle under the run's execution mode.

    Args:
        bundle: Evidence for one interaction
        context: The run's execution mode (required)
        config: Weights and thresholds
        determinism_verdict: Optional verdict from a determinism check; a
            NON_DETERMINISTIC verdict caps the final score

    Raises:
        MissingExecutionContextError: If context is None
    """
    if context is None:
        raise MissingExecutionContextError(bundle.promise_id)
    config = config or DEFAULT_CONFIG
    weights = config.confidence
    signals = bundle.signals

    found = contributing_signals(signals)
    names = tuple(name for name, _ in found)
    sensors = {sensor for _, sensor in found}
    reasons: list[str] = []

    raw = 0.0
    if signals.feedback_seen:
        raw += weights.feedback_weight
        reasons.append("FEEDBACK_SEEN")
    raw += weights.signal_weight * min(len(found), weights.max_counted_signals)
    if len(sensors) >= 2:
        raw += weights.multi_sensor_bonus
        reasons.append("MULTI_SENSOR_CORROBORATION")
    raw = round(min(max(raw, 0.0), 1.0), 6)

    final = min(raw, context.ceiling)
    if raw > context.ceiling:
        reasons.append(f"CEILING_{context.mode.value}")

    verdict = getattr(determinism_verdict, "value", determinism_verdict)
    if verdict == NON_DETERMINISTIC and final > weights.non_deterministic_max_confidence:
        final = weights.non_deterministic_max_confidence
        reasons.append("TRUTH_LOCK_NON_DETERMINISTIC_CAP")

    if not found:
        reasons.append("NO_SIGNALS")
    for sensor in bundle.sensors_failed:
        reasons.append(f"SENSOR_FAILED_{sensor.upper()}")

    assessment = ConfidenceAssessment(
        raw_score=raw,
        ceiling=context.ceiling,
        final_score=final,
        level=level_for(final, len(found), config),
        evidence_sufficient=is_evidence_sufficient(signals),
        contributing_signals=names,
        reasons=tuple(reasons),
        execution_mode=context.mode.value,
    )
    logger.debug(
        "Confidence for %s: raw=%.3f final=%.3f level=%s sufficient=%s",
        bundle.promise_id,
        assessment.raw_score,
        assessment.final_score,
        assessment.level.value,
        assessment.evidence_sufficient,
    )
    return assessment
