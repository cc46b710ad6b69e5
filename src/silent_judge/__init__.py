"""
silent-judge - Judgment & Determinism Engine for silent-failure detection

Turns a before/after observation of one user interaction into a
scope-classified, confidence-bounded finding, and canonicalizes every
decision-relevant artifact so repeated runs serialize to identical bytes.
"""

__version__ = "0.1.0"

from .capture import CaptureOutcome, CaptureStatus, failure, outcome, success
from .config import JudgeConfig, load_config
from .determinism import normalize_artifact, serialize_artifact, verify_determinism
from .engine import InteractionObservation, JudgmentEngine
from .evidence import EvidenceBundle, build_evidence_bundle
from .judgment import (
    ExecutionMode,
    ExecutionModeContext,
    Finding,
    FindingStatus,
    InteractionPromise,
    Judgment,
    assess_confidence,
    judge_interaction,
    resolve_execution_mode,
)
from .scope import ScopeClassification, classify_scope

__all__ = [
    "JudgmentEngine",  # Main entry point
    "InteractionObservation",
    "InteractionPromise",
    "classify_scope",
    "ScopeClassification",
    "build_evidence_bundle",
    "EvidenceBundle",
    "resolve_execution_mode",
    "ExecutionMode",
    "ExecutionModeContext",
    "assess_confidence",
    "judge_interaction",
    "Finding",
    "FindingStatus",
    "Judgment",
    "normalize_artifact",
    "serialize_artifact",
    "verify_determinism",
    "CaptureOutcome",
    "CaptureStatus",
    "outcome",
    "success",
    "failure",
    "JudgeConfig",
    "load_config",
]
