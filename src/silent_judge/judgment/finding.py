"""Findings and judgments.

Every judged interaction yields exactly one Judgment. A Finding is attached
only when the interaction looks like a silent failure, or when feedback was
out of the observable scope (informational).

Finding enforces the Evidence Law itself: constructing a CONFIRMED finding
without sufficient evidence yields a SUSPECTED one, whoever the caller is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..config import DEFAULT_CONFIG, JudgeConfig
from ..determinism.canonical import stable_id
from ..evidence import EvidenceBundle
from ..logging_config import get_logger
from .confidence import ConfidenceAssessment, ConfidenceLevel, assess_confidence
from .evidence_law import FindingStatus, apply_evidence_law, detect_ambiguities, enforce_evidence_law
from .execution_mode import ExecutionModeContext

logger = get_logger(__name__)


class JudgmentKind(str, Enum):
    FEEDBACK_OBSERVED = "FEEDBACK_OBSERVED"
    SILENT_FAILURE = "SILENT_FAILURE"
    OUT_OF_SCOPE_FEEDBACK = "OUT_OF_SCOPE_FEEDBACK"


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


FINDING_TYPE_SILENT_FAILURE = "silent_failure"
FINDING_TYPE_OUT_OF_SCOPE = "out_of_scope_feedback"

SEVERITY_BY_STATUS = {
    FindingStatus.CONFIRMED: Severity.HIGH,
    FindingStatus.SUSPECTED: Severity.MEDIUM,
    FindingStatus.INFORMATIONAL: Severity.LOW,
}


@dataclass(frozen=True)
class InteractionPromise:
    """What an interaction was expected to do.

    ``proven`` marks promises backed by source analysis, which is what
    permits a CONFIRMED finding.
    """

    promise_id: str
    kind: str = "interaction"
    value: Optional[str] = None
    selector: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    proven: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "promiseId": self.promise_id,
            "kind": self.kind,
            "value": self.value,
            "selector": self.selector,
            "proven": self.proven,
        }


def compute_finding_id(
    finding_type: str, promise: InteractionPromise, interaction_index: int
) -> str:
    """Deterministic id over the finding's identifying fields."""
    return stable_id(
        "fnd",
        {
            "type": finding_type,
            "promiseId": promise.promise_id,
            "interactionIndex": interaction_index,
            "selector": promise.selector,
            "file": promise.file,
            "line": promise.line,
            "column": promise.column,
        },
    )


def compute_judgment_id(promise_id: str, interaction_index: int) -> str:
    return stable_id("jdg", {"promiseId": promise_id, "interactionIndex": interaction_index})


@dataclass(frozen=True)
class Finding:
    id: str
    type: str
    status: FindingStatus
    confidence: float
    level: ConfidenceLevel
    evidence_sufficient: bool
    promise_id: str
    interaction_index: int
    summary: str
    severity: Optional[Severity] = None
    file: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    ambiguities: tuple[str, ...] = ()
    downgrade_reason: Optional[str] = None
    evidence: dict[str, Any] = field(default_factory=dict, compare=False)
    evidence_refs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        status = FindingStatus(self.status)
        result = apply_evidence_law(status, self.evidence_sufficient, "downgrade", self.promise_id)
        if result.downgraded:
            status = result.status
            object.__setattr__(self, "downgrade_reason", result.reason)
        object.__setattr__(self, "status", status)
        # Severity always follows the (possibly downgraded) status.
        object.__setattr__(self, "severity", SEVERITY_BY_STATUS[status])

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "status": self.status.value,
            "severity": self.severity.value,
            "confidence": self.confidence,
            "confidenceLevel": self.level.value,
            "evidenceSufficient": self.evidence_sufficient,
            "promiseId": self.promise_id,
            "interactionIndex": self.interaction_index,
            "summary": self.summary,
            "source": {"file": self.file, "line": self.line, "col": self.column},
            "ambiguities": list(self.ambiguities),
            "downgradeReason": self.downgrade_reason,
            "evidence": dict(self.evidence),
            "evidenceRefs": list(self.evidence_refs),
        }


@dataclass(frozen=True)
class Judgment:
    id: str
    promise_id: str
    interaction_index: int
    kind: JudgmentKind
    assessment: ConfidenceAssessment
    classification: Optional[str] = None
    finding: Optional[Finding] = None
    note: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "promiseId": self.promise_id,
            "interactionIndex": self.interaction_index,
            "judgment": self.kind.value,
            "classification": self.classification,
            "confidence": self.assessment.to_dict(),
            "findingId": None if self.finding is None else self.finding.id,
            "note": self.note,
        }


def _evidence_refs(bundle: EvidenceBundle) -> tuple[str, ...]:
    refs = [f"sensor:{name}" for name in bundle.sensors_available]
    if bundle.scope is not None:
        refs.append(f"scope:{bundle.scope.classification.value}")
    return tuple(sorted(refs))


def _silent_failure_summary(promise: InteractionPromise) -> str:
    target = promise.selector or promise.value or promise.promise_id
    return f"{promise.kind} on {target} produced no observable feedback"


def judge_interaction(
    promise: InteractionPromise,
    bundle: EvidenceBundle,
    context: Optional[ExecutionModeContext],
    config: Optional[JudgeConfig] = None,
    determinism_verdict: Any = None,
) -> Judgment:
    """Judge one interaction.

    Raises:
        MissingExecutionContextError: If context is None
    """
    config = config or DEFAULT_CONFIG
    assessment = assess_confidence(bundle, context, config, determinism_verdict)
    signals = bundle.signals
    judgment_id = compute_judgment_id(promise.promise_id, bundle.interaction_index)
    classification = None if bundle.scope is None else bundle.scope.classification.value

    common = dict(
        confidence=assessment.final_score,
        level=assessment.level,
        evidence_sufficient=assessment.evidence_sufficient,
        promise_id=promise.promise_id,
        interaction_index=bundle.interaction_index,
        file=promise.file,
        line=promise.line,
        column=promise.column,
        evidence=signals.to_dict(),
        evidence_refs=_evidence_refs(bundle),
    )

    if signals.feedback_seen:
        kind = JudgmentKind.FEEDBACK_OBSERVED
        finding = None
        note = None
    elif bundle.out_of_scope:
        kind = JudgmentKind.OUT_OF_SCOPE_FEEDBACK
        explanation = bundle.scope.out_of_scope_explanation
        finding = Finding(
            id=compute_finding_id(FINDING_TYPE_OUT_OF_SCOPE, promise, bundle.interaction_index),
            type=FINDING_TYPE_OUT_OF_SCOPE,
            status=FindingStatus.INFORMATIONAL,
            summary=explanation.summary if explanation else "Feedback outside the observable scope",
            **common,
        )
        note = None
    else:
        kind = JudgmentKind.SILENT_FAILURE
        requested = FindingStatus.CONFIRMED if promise.proven else FindingStatus.SUSPECTED
        result = enforce_evidence_law(
            requested, assessment, config.evidence_law_policy, promise.promise_id
        )
        if result.dropped:
            finding = None
            note = result.reason
        else:
            finding = Finding(
                id=compute_finding_id(FINDING_TYPE_SILENT_FAILURE, promise, bundle.interaction_index),
                type=FINDING_TYPE_SILENT_FAILURE,
                status=result.status,
                summary=_silent_failure_summary(promise),
                ambiguities=detect_ambiguities(signals),
                downgrade_reason=result.reason,
                **common,
            )
            note = None

    logger.debug(
        "Judged %s[%d]: %s (%s, %.3f)",
        promise.promise_id,
        bundle.interaction_index,
        kind.value,
        assessment.level.value,
        assessment.final_score,
    )
    return Judgment(
        id=judgment_id,
        promise_id=promise.promise_id,
        interaction_index=bundle.interaction_index,
        kind=kind,
        assessment=assessment,
        classification=classification,
        finding=finding,
        note=note,
    )
