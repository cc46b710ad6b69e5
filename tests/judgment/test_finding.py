"""Tests for findings and interaction judgments."""

import pytest

from silent_judge.capture import success
from silent_judge.config import JudgeConfig
from silent_judge.evidence import build_evidence_bundle
from silent_judge.exceptions import MissingExecutionContextError
from silent_judge.judgment import (
    ConfidenceLevel,
    Finding,
    FindingStatus,
    JudgmentKind,
    Severity,
    compute_finding_id,
    judge_interaction,
)
from silent_judge.scope import classify_scope


def _unchanged():
    return classify_scope("<p>a</p>", "<p>a</p>")


class TestFindingGuard:
    """A Finding cannot be CONFIRMED without sufficient evidence."""

    def _finding(self, status, sufficient):
        return Finding(
            id="fnd_0",
            type="silent_failure",
            status=status,
            confidence=0.9,
            level=ConfidenceLevel.HIGH,
            evidence_sufficient=sufficient,
            promise_id="p1",
            interaction_index=0,
            summary="test",
        )

    def test_direct_construction_is_downgraded(self):
        finding = self._finding(FindingStatus.CONFIRMED, False)
        assert finding.status is FindingStatus.SUSPECTED
        assert finding.severity is Severity.MEDIUM
        assert finding.downgrade_reason

    def test_confirmed_with_evidence(self):
        finding = self._finding("CONFIRMED", True)
        assert finding.status is FindingStatus.CONFIRMED
        assert finding.severity is Severity.HIGH
        assert finding.downgrade_reason is None

    def test_informational_is_low(self):
        assert self._finding(FindingStatus.INFORMATIONAL, False).severity is Severity.LOW

    def test_to_dict_source(self):
        d = self._finding(FindingStatus.SUSPECTED, True).to_dict()
        assert d["source"] == {"file": None, "line": None, "col": None}
        assert d["status"] == "SUSPECTED"


class TestJudgeInteraction:
    """One judgment per interaction, never omitted."""

    def test_feedback_observed(self, promise, pong_pair, full_context):
        bundle = build_evidence_bundle(promise.promise_id, 0, classify_scope(*pong_pair))
        judgment = judge_interaction(promise, bundle, full_context)
        assert judgment.kind is JudgmentKind.FEEDBACK_OBSERVED
        assert judgment.finding is None
        assert judgment.classification == "in-scope"

    def test_out_of_scope_is_informational(self, promise, spinner_pair, full_context):
        bundle = build_evidence_bundle(promise.promise_id, 0, classify_scope(*spinner_pair))
        judgment = judge_interaction(promise, bundle, full_context)
        assert judgment.kind is JudgmentKind.OUT_OF_SCOPE_FEEDBACK
        assert judgment.finding.status is FindingStatus.INFORMATIONAL
        assert judgment.finding.severity is Severity.LOW
        assert "NOT a silent failure" in judgment.finding.summary

    def test_proven_without_evidence_is_downgraded(self, proven_promise, full_context):
        bundle = build_evidence_bundle(proven_promise.promise_id, 0, _unchanged())
        judgment = judge_interaction(proven_promise, bundle, full_context)
        assert judgment.kind is JudgmentKind.SILENT_FAILURE
        assert judgment.finding.status is FindingStatus.SUSPECTED
        assert judgment.finding.downgrade_reason
        assert judgment.assessment.level is ConfidenceLevel.UNKNOWN

    def test_proven_with_evidence_is_confirmed(self, proven_promise, full_context):
        capture = success("network", {"totalRequests": 1, "failedRequests": 1})
        bundle = build_evidence_bundle(proven_promise.promise_id, 0, _unchanged(), [capture])
        judgment = judge_interaction(proven_promise, bundle, full_context)
        finding = judgment.finding
        assert finding.status is FindingStatus.CONFIRMED
        assert finding.severity is Severity.HIGH
        assert finding.evidence_sufficient
        assert finding.ambiguities[0].startswith("network_only")

    def test_unproven_is_suspected(self, promise, full_context):
        capture = success("network", {"totalRequests": 1, "failedRequests": 1})
        bundle = build_evidence_bundle(promise.promise_id, 0, _unchanged(), [capture])
        finding = judge_interaction(promise, bundle, full_context).finding
        assert finding.status is FindingStatus.SUSPECTED
        assert finding.downgrade_reason is None

    def test_drop_policy_keeps_judgment(self, proven_promise, full_context):
        config = JudgeConfig(evidence_law_policy="drop")
        bundle = build_evidence_bundle(proven_promise.promise_id, 0, _unchanged())
        judgment = judge_interaction(proven_promise, bundle, full_context, config)
        assert judgment.kind is JudgmentKind.SILENT_FAILURE
        assert judgment.finding is None
        assert judgment.note

    def test_missing_context(self, promise):
        bundle = build_evidence_bundle(promise.promise_id, 0, _unchanged())
        with pytest.raises(MissingExecutionContextError):
            judge_interaction(promise, bundle, None)

    def test_judgments_are_hashable(self, proven_promise, full_context):
        capture = success("network", {"totalRequests": 1, "failedRequests": 1})
        bundle = build_evidence_bundle(proven_promise.promise_id, 0, _unchanged(), [capture])
        judgment = judge_interaction(proven_promise, bundle, full_context)
        assert judgment.finding.evidence
        assert len({judgment, judgment}) == 1
        assert hash(judgment.finding) == hash(judgment.finding)

    def test_judgment_to_dict(self, promise, pong_pair, limited_context):
        bundle = build_evidence_bundle(promise.promise_id, 2, classify_scope(*pong_pair))
        d = judge_interaction(promise, bundle, limited_context).to_dict()
        assert d["judgment"] == "FEEDBACK_OBSERVED"
        assert d["interactionIndex"] == 2
        assert d["confidence"]["executionMode"] == "WEB_SCAN_LIMITED"
        assert d["id"].startswith("jdg_")


class TestIdentifiers:
    """Content-hash ids."""

    def test_finding_id_is_stable(self, promise):
        first = compute_finding_id("silent_failure", promise, 0)
        second = compute_finding_id("silent_failure", promise, 0)
        assert first == second
        assert first.startswith("fnd_")
        assert len(first) == len("fnd_") + 16

    def test_finding_id_depends_on_identity(self, promise, proven_promise):
        assert compute_finding_id("silent_failure", promise, 0) != compute_finding_id(
            "silent_failure", promise, 1
        )
        assert compute_finding_id("silent_failure", promise, 0) != compute_finding_id(
            "silent_failure", proven_promise, 0
        )
