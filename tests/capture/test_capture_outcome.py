"""Tests for the capture outcome model."""

import logging

from silent_judge.capture import CaptureOutcome, CaptureStatus, failure, outcome, success


class TestOutcomeConstruction:
    """outcome() coerces instead of raising."""

    def test_success_keeps_data(self):
        result = success("navigation", {"urlChanged": True}, stage="settle")
        assert result.status is CaptureStatus.SUCCESS
        assert result.data == {"urlChanged": True}
        assert result.error is None
        assert result.stage == "settle"
        assert result.usable

    def test_success_drops_error(self):
        """SUCCESS never carries an error."""
        result = outcome("network", "success", data={"totalRequests": 1}, error="stale")
        assert result.error is None

    def test_failed_drops_data(self):
        """FAILED never carries data."""
        result = outcome("network", CaptureStatus.FAILED, data={"totalRequests": 3}, error="boom")
        assert result.data is None
        assert result.error == "boom"
        assert not result.usable

    def test_failed_without_message_gets_default_error(self):
        result = outcome("console", "failed")
        assert result.error == "capture failed"

    def test_partial_keeps_both(self):
        result = outcome("state", "partial", data={"changedKeys": ["cart"]}, error="truncated")
        assert result.status is CaptureStatus.PARTIAL
        assert result.data == {"changedKeys": ["cart"]}
        assert result.error == "truncated"
        assert result.usable

    def test_status_is_case_insensitive(self):
        assert outcome("dom", " Success ").status is CaptureStatus.SUCCESS

    def test_unknown_status_degrades_to_failed(self):
        result = outcome("dom", "exploded", data="<html></html>")
        assert result.status is CaptureStatus.FAILED
        assert result.data is None
        assert "exploded" in result.error

    def test_unknown_status_is_logged_with_code(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="silent_judge.capture.outcome"):
            outcome("dom", "exploded")
        assert "SJ200" in caplog.text

    def test_failure_helper(self):
        result = failure("network", "timeout", stage="settle")
        assert result == CaptureOutcome("network", CaptureStatus.FAILED, None, "timeout", "settle")


class TestOutcomeSerialization:
    """to_dict shape."""

    def test_to_dict(self):
        d = success("console", {"errorCount": 0}).to_dict()
        assert d == {
            "sensor": "console",
            "status": "success",
            "data": {"errorCount": 0},
            "error": None,
            "stage": None,
        }
