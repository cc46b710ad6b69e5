"""Run engine: judges a run's interactions and emits normalized artifacts.

The engine holds the run's ExecutionModeContext, computed once before any
interaction is judged, and judges observations sequentially so the trace
log stays chronological. Judging itself is pure; the engine only
accumulates results.

Example:
    >>> engine = JudgmentEngine.for_run(source_path=None, url_reachable=True)
    >>> engine.judge(InteractionObservation(promise, before_html, after_html))
    >>> artifacts = engine.serialized_artifacts()
"""

from __future__ import annotations

import os
import time
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

from .capture import CaptureOutcome
from .config import DEFAULT_CONFIG, JudgeConfig
from .determinism import normalize_artifact, serialize_artifact
from .evidence import EvidenceBundle, build_evidence_bundle
from .exceptions import MissingExecutionContextError
from .judgment import (
    ExecutionModeContext,
    Finding,
    InteractionPromise,
    Judgment,
    judge_interaction,
    resolve_execution_mode,
)
from .logging_config import get_logger
from .scope import classify_scope

logger = get_logger(__name__)


@dataclass(frozen=True)
class InteractionObservation:
    """Everything captured for one interaction."""

    promise: InteractionPromise
    html_before: Any
    html_after: Any
    captures: tuple[CaptureOutcome, ...] = ()
    elapsed_ms: Optional[float] = None


class JudgmentEngine:
    """Judge interactions for one run under a fixed execution mode."""

    def __init__(
        self,
        context: ExecutionModeContext,
        config: Optional[JudgeConfig] = None,
        determinism_verdict: Any = None,
    ):
        if context is None:
            raise MissingExecutionContextError()
        self.context = context
        self.config = config or DEFAULT_CONFIG
        self.determinism_verdict = determinism_verdict
        self._judgments: list[Judgment] = []
        self._bundles: list[EvidenceBundle] = []
        self._trace: list[dict[str, Any]] = []
        self._elapsed_ms = 0.0

    @classmethod
    def for_run(
        cls,
        source_path: Union[str, os.PathLike, None],
        url_reachable: bool,
        url: Optional[str] = None,
        config: Optional[JudgeConfig] = None,
    ) -> "JudgmentEngine":
        """Resolve the execution mode once and build an engine for the run.

        Raises:
            UnreachableTargetError: If the target URL is not reachable
        """
        config = config or DEFAULT_CONFIG
        context = resolve_execution_mode(source_path, url_reachable, config, url=url)
        logger.info("Run mode %s, confidence ceiling %.2f", context.mode.value, context.ceiling)
        return cls(context, config)

    # ── Judging ──────────────────────────────────────────────────────

    def judge(self, observation: InteractionObservation) -> Judgment:
        index = len(self._judgments)
        promise = observation.promise
        started = time.perf_counter()

        scope = classify_scope(
            observation.html_before, observation.html_after, self.config.max_html_chars
        )
        bundle = build_evidence_bundle(promise.promise_id, index, scope, observation.captures)
        judgment = judge_interaction(
            promise, bundle, self.context, self.config, self.determinism_verdict
        )

        elapsed = observation.elapsed_ms
        if elapsed is None:
            elapsed = (time.perf_counter() - started) * 1000
        self._elapsed_ms += elapsed

        self._judgments.append(judgment)
        self._bundles.append(bundle)
        self._trace.append(
            {
                "interactionIndex": index,
                "promiseId": promise.promise_id,
                "classification": scope.classification.value,
                "judgment": judgment.kind.value,
                "findingId": None if judgment.finding is None else judgment.finding.id,
                "sensorsFailed": list(bundle.sensors_failed),
                "elapsedMs": elapsed,
                "observedAt": datetime.now(timezone.utc).isoformat(),
            }
        )
        return judgment

    def judge_all(self, observations: Iterable[InteractionObservation]) -> list[Judgment]:
        return [self.judge(observation) for observation in observations]

    @property
    def judgments(self) -> list[Judgment]:
        return list(self._judgments)

    @property
    def findings(self) -> list[Finding]:
        return [j.finding for j in self._judgments if j.finding is not None]

    # ── Artifacts ────────────────────────────────────────────────────

    def findings_artifact(self) -> dict[str, Any]:
        return normalize_artifact(
            {
                "executionMode": self.context.to_dict(),
                "findings": [f.to_dict() for f in self.findings],
                "detectedAt": datetime.now(timezone.utc).isoformat(),
            },
            "findings",
        )

    def judgments_artifact(self) -> list[Any]:
        return normalize_artifact([j.to_dict() for j in self._judgments], "judgments")

    def summary_artifact(self) -> dict[str, Any]:
        findings = self.findings
        return normalize_artifact(
            {
                "executionMode": self.context.mode.value,
                "ceiling": self.context.ceiling,
                "interactionsJudged": len(self._judgments),
                "findingCount": len(findings),
                "byStatus": dict(Counter(f.status.value for f in findings)),
                "byJudgment": dict(Counter(j.kind.value for j in self._judgments)),
                "byClassification": dict(
                    Counter(j.classification or "none" for j in self._judgments)
                ),
                "byLevel": dict(Counter(j.assessment.level.value for j in self._judgments)),
                "elapsedMs": self._elapsed_ms,
                "scannedAt": datetime.now(timezone.utc).isoformat(),
            },
            "summary",
        )

    def coverage_artifact(self) -> dict[str, Any]:
        failed: Counter[str] = Counter()
        available: Counter[str] = Counter()
        for bundle in self._bundles:
            failed.update(bundle.sensors_failed)
            available.update(bundle.sensors_available)
        degraded = sum(1 for b in self._bundles if b.scope is not None and b.scope.degraded)
        return normalize_artifact(
            {
                "interactionsJudged": len(self._bundles),
                "sensorsAvailable": dict(available),
                "sensorsFailed": dict(failed),
                "degradedClassifications": degraded,
                "evidenceInsufficient": sum(
                    1 for j in self._judgments if not j.assessment.evidence_sufficient
                ),
                "elapsedMs": self._elapsed_ms,
            },
            "coverage",
        )

    def trace_artifact(self) -> dict[str, Any]:
        return normalize_artifact({"traceLog": self._trace})

    def artifacts(self) -> dict[str, Any]:
        return {
            "findings": self.findings_artifact(),
            "judgments": self.judgments_artifact(),
            "summary": self.summary_artifact(),
            "coverage": self.coverage_artifact(),
            "trace": self.trace_artifact(),
        }

    def serialized_artifacts(self) -> dict[str, bytes]:
        """Canonical bytes per artifact name, ready for a findings writer."""
        return {name: serialize_artifact(data) for name, data in self.artifacts().items()}
