"""Tests for artifact diffs and determinism verification."""

import pytest

from silent_judge.determinism import (
    DeterminismVerdict,
    DiffReason,
    DiffSeverity,
    diff_artifacts,
    verify_determinism,
)


def _findings(*items):
    return {"findings": list(items)}


def _finding(fid, status="SUSPECTED", severity="MEDIUM", confidence=0.5):
    return {
        "id": fid,
        "status": status,
        "severity": severity,
        "confidence": confidence,
        "source": {"file": "a.js", "line": 1, "col": 0},
    }


class TestDiffArtifacts:
    """Differences are reported after normalization."""

    def test_equal_after_normalization(self):
        a = {"scannedAt": "t1", "findings": [_finding("f1"), _finding("f2")]}
        b = {"findings": [_finding("f2"), _finding("f1")], "scannedAt": "t2"}
        assert diff_artifacts(a, b) == []

    def test_missing_artifact(self):
        [diff] = diff_artifacts(None, {"a": 1}, name="summary")
        assert diff.reason is DiffReason.MISSING_ARTIFACT
        assert diff.severity is DiffSeverity.BLOCKER
        assert "first" in diff.message

    def test_both_missing(self):
        assert diff_artifacts(None, None) == []

    def test_finding_added(self):
        diffs = diff_artifacts(_findings(_finding("f1")), _findings(_finding("f1"), _finding("f2")))
        reasons = {d.reason for d in diffs}
        assert DiffReason.FINDING_ADDED in reasons
        assert DiffReason.COUNT_CHANGED in reasons

    def test_finding_removed(self):
        diffs = diff_artifacts(_findings(_finding("f1"), _finding("f2")), _findings(_finding("f1")))
        assert any(d.reason is DiffReason.FINDING_REMOVED for d in diffs)

    def test_status_change_is_blocker(self):
        diffs = diff_artifacts(
            _findings(_finding("f1")),
            _findings(_finding("f1", status="CONFIRMED", severity="HIGH")),
        )
        by_reason = {d.reason: d for d in diffs}
        assert by_reason[DiffReason.FINDING_STATUS_CHANGED].severity is DiffSeverity.BLOCKER
        assert by_reason[DiffReason.FINDING_SEVERITY_CHANGED].severity is DiffSeverity.WARN

    def test_confidence_change_is_warn(self):
        diffs = diff_artifacts(
            _findings(_finding("f1", confidence=0.5)), _findings(_finding("f1", confidence=0.6))
        )
        [diff] = diffs
        assert diff.reason is DiffReason.CONFIDENCE_CHANGED
        assert diff.severity is DiffSeverity.WARN

    def test_rounding_noise_is_not_a_difference(self):
        assert diff_artifacts({"confidence": 0.70001}, {"confidence": 0.7}) == []

    def test_decision_field_is_blocker(self):
        [diff] = diff_artifacts({"judgment": "SILENT_FAILURE"}, {"judgment": "FEEDBACK_OBSERVED"})
        assert diff.severity is DiffSeverity.BLOCKER
        assert diff.path == "judgment"

    def test_type_mismatch(self):
        [diff] = diff_artifacts({"count": 1}, {"count": "1"})
        assert diff.reason is DiffReason.SCHEMA_MISMATCH

    def test_to_dict(self):
        [diff] = diff_artifacts({"note": "a"}, {"note": "b"})
        d = diff.to_dict()
        assert d["reasonCode"] == "DET_DIFF_FIELD_VALUE_CHANGED"
        assert d["severity"] == "INFO"


class TestVerifyDeterminism:
    """Digests across repeated runs."""

    def test_identical_runs(self):
        runs = [
            {"findings": [_finding("f1")], "detectedAt": "t1"},
            {"findings": [_finding("f1")], "detectedAt": "t2"},
        ]
        report = verify_determinism(runs)
        assert report.verdict is DeterminismVerdict.DETERMINISTIC
        assert report.deterministic
        assert len(set(report.digests)) == 1

    def test_single_run(self):
        assert verify_determinism([{"a": 1}]).deterministic

    def test_differing_runs(self):
        runs = [_findings(_finding("f1")), _findings(_finding("f1")), _findings()]
        report = verify_determinism(runs)
        assert report.verdict is DeterminismVerdict.NON_DETERMINISTIC
        assert report.differences
        assert report.to_dict()["verdict"] == "NON_DETERMINISTIC"

    def test_no_runs(self):
        with pytest.raises(ValueError):
            verify_determinism([])
