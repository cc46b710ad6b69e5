"""Evidence bundle: every observable signal for one interaction.

The builder is pure combination. Each signal is read off a typed sensor
summary (see capture.sensors) or off the scope classification; nothing here
parses raw sensor output. A sensor that failed contributes false/zero and is
listed in sensors_failed; a sensor that is simply absent is unavailable and
listed nowhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Union

from ..capture import (
    SENSOR_TYPES,
    CaptureOutcome,
    CaptureStatus,
    ConsoleSummary,
    NavigationSummary,
    NetworkSummary,
    SensorSummary,
    StateSummary,
    UIStateSummary,
    canonical_sensor_name,
    coerce_summary,
)
from ..exceptions import ErrorCode
from ..logging_config import get_logger
from ..scope import Classification, ScopeClassification

logger = get_logger(__name__)

Captures = Union[CaptureOutcome, Iterable[CaptureOutcome], Mapping[str, CaptureOutcome], None]


@dataclass(frozen=True)
class EvidenceSignals:
    feedback_seen: bool = False
    meaningful_dom_change: bool = False
    dom_changed: bool = False
    url_changed: bool = False
    network_activity: bool = False
    network_request_count: int = 0
    network_failure_count: int = 0
    console_error_count: int = 0
    state_changed: bool = False
    ui_state_flip: bool = False
    history_length_delta: int = 0
    blocked_writes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "feedbackSeen": self.feedback_seen,
            "meaningfulDomChange": self.meaningful_dom_change,
            "domChanged": self.dom_changed,
            "urlChanged": self.url_changed,
            "networkActivity": self.network_activity,
            "networkRequestCount": self.network_request_count,
            "networkFailureCount": self.network_failure_count,
            "consoleErrorCount": self.console_error_count,
            "stateChanged": self.state_changed,
            "uiStateFlip": self.ui_state_flip,
            "historyLengthDelta": self.history_length_delta,
            "blockedWrites": self.blocked_writes,
        }


@dataclass(frozen=True)
class EvidenceBundle:
    promise_id: str
    interaction_index: int
    signals: EvidenceSignals
    scope: Optional[ScopeClassification] = None
    sensors_available: tuple[str, ...] = ()
    sensors_failed: tuple[str, ...] = ()
    summaries: dict[str, SensorSummary] = field(default_factory=dict, compare=False)

    @property
    def out_of_scope(self) -> bool:
        return self.scope is not None and self.scope.is_out_of_scope

    def to_dict(self) -> dict[str, Any]:
        return {
            "promiseId": self.promise_id,
            "interactionIndex": self.interaction_index,
            "signals": self.signals.to_dict(),
            "scope": None if self.scope is None else self.scope.to_dict(),
            "sensorsAvailable": list(self.sensors_available),
            "sensorsFailed": list(self.sensors_failed),
        }


def _iter_captures(captures: Captures) -> Iterable[CaptureOutcome]:
    if captures is None:
        return ()
    if isinstance(captures, CaptureOutcome):
        return (captures,)
    if isinstance(captures, Mapping):
        return captures.values()
    if not isinstance(captures, Iterable) or isinstance(captures, (str, bytes)):
        logger.debug("Ignoring captures of type %s", type(captures).__name__)
        return ()
    return captures


def collect_summaries(
    captures: Captures,
) -> tuple[dict[str, SensorSummary], tuple[str, ...], tuple[str, ...]]:
    """Fold capture outcomes into typed summaries.

    Returns:
        (summaries by sensor name, sensors available, sensors failed)
    """
    summaries: dict[str, SensorSummary] = {}
    failed: set[str] = set()

    for capture in _iter_captures(captures):
        if not isinstance(capture, CaptureOutcome):
            logger.debug("Ignoring non-outcome capture %r", type(capture).__name__)
            continue
        name = canonical_sensor_name(capture.sensor)
        if name not in SENSOR_TYPES:
            logger.debug("[%s] Unknown sensor %r ignored", ErrorCode.SJ301.value, capture.sensor)
            continue
        if capture.status is CaptureStatus.FAILED:
            logger.debug(
                "[%s] Sensor %s failed (%s): signal unavailable",
                ErrorCode.SJ300.value,
                name,
                capture.error,
            )
            failed.add(name)
            continue
        summary = coerce_summary(name, capture.data)
        if summary is None:
            logger.debug("[%s] Sensor %s summary unusable", ErrorCode.SJ201.value, name)
            continue
        summaries[name] = summary

    available = tuple(sorted(summaries))
    # A later successful capture of the same sensor supersedes a failure.
    failed_only = tuple(sorted(failed - set(summaries)))
    return summaries, available, failed_only


def derive_signals(
    scope: Optional[ScopeClassification], summaries: Mapping[str, SensorSummary]
) -> EvidenceSignals:
    navigation = summaries.get("navigation")
    network = summaries.get("network")
    console = summaries.get("console")
    state = summaries.get("state")
    ui_state = summaries.get("ui_state")

    meaningful = scope is not None and scope.is_meaningful
    dom_changed = scope is not None and scope.changed and scope.classification not in (
        Classification.NO_CHANGE,
        Classification.NOISE_ONLY,
    )
    url_changed = isinstance(navigation, NavigationSummary) and navigation.url_changed
    network_activity = isinstance(network, NetworkSummary) and network.qualifying_activity
    state_changed = isinstance(state, StateSummary) and state.changed
    ui_flip = isinstance(ui_state, UIStateSummary) and ui_state.flipped

    return EvidenceSignals(
        feedback_seen=meaningful or url_changed or network_activity or state_changed or ui_flip,
        meaningful_dom_change=meaningful,
        dom_changed=dom_changed,
        url_changed=url_changed,
        network_activity=network_activity,
        network_request_count=network.total_requests if isinstance(network, NetworkSummary) else 0,
        network_failure_count=network.failed_requests if isinstance(network, NetworkSummary) else 0,
        console_error_count=console.error_total if isinstance(console, ConsoleSummary) else 0,
        state_changed=state_changed,
        ui_state_flip=ui_flip,
        history_length_delta=(
            navigation.history_length_delta if isinstance(navigation, NavigationSummary) else 0
        ),
        blocked_writes=network.writes_blocked if isinstance(network, NetworkSummary) else 0,
    )


def build_evidence_bundle(
    promise_id: str,
    interaction_index: int,
    scope: Optional[ScopeClassification],
    captures: Captures = None,
) -> EvidenceBundle:
    """Combine a scope classification and capture outcomes.

    captures may be one outcome, an iterable of outcomes, or a mapping of
    sensor name to outcome. Malformed or unknown captures are skipped, never
    raised; promise_id and interaction_index are taken as given.
    """
    summaries, available, failed = collect_summaries(captures)
    signals = derive_signals(scope, summaries)
    logger.debug(
        "Evidence for %s[%d]: feedback=%s available=%s failed=%s",
        promise_id,
        interaction_index,
        signals.feedback_seen,
        ",".join(available) or "-",
        ",".join(failed) or "-",
    )
    return EvidenceBundle(
        promise_id=str(promise_id),
        interaction_index=int(interaction_index),
        signals=signals,
        scope=scope,
        sensors_available=available,
        sensors_failed=failed,
        summaries=summaries,
    )
