"""Execution mode, confidence, the Evidence Law, findings and judgments."""

from .confidence import (
    ConfidenceAssessment,
    ConfidenceLevel,
    assess_confidence,
    contributing_signals,
    is_evidence_sufficient,
)
from .evidence_law import (
    EvidenceLawResult,
    FindingStatus,
    apply_evidence_law,
    detect_ambiguities,
    enforce_evidence_law,
)
from .execution_mode import ExecutionMode, ExecutionModeContext, resolve_execution_mode
from .finding import (
    Finding,
    InteractionPromise,
    Judgment,
    JudgmentKind,
    Severity,
    compute_finding_id,
    compute_judgment_id,
    judge_interaction,
)

__all__ = [
    "ConfidenceAssessment",
    "ConfidenceLevel",
    "assess_confidence",
    "contributing_signals",
    "is_evidence_sufficient",
    "EvidenceLawResult",
    "FindingStatus",
    "apply_evidence_law",
    "detect_ambiguities",
    "enforce_evidence_law",
    "ExecutionMode",
    "ExecutionModeContext",
    "resolve_execution_mode",
    "Finding",
    "InteractionPromise",
    "Judgment",
    "JudgmentKind",
    "Severity",
    "compute_finding_id",
    "compute_judgment_id",
    "judge_interaction",
]
