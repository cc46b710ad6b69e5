"""Tests for the evidence bundle builder."""

from silent_judge.capture import NetworkSummary, failure, outcome, success
from silent_judge.evidence import build_evidence_bundle
from silent_judge.scope import classify_scope


# ── Fixtures ─────────────────────────────────────────────────────────


def _no_change():
    return classify_scope("<p>a</p>", "<p>a</p>")


class TestFeedbackSeen:
    """feedbackSeen is an OR over the independent signals."""

    def test_meaningful_dom_change(self, pong_pair):
        bundle = build_evidence_bundle("p1", 0, classify_scope(*pong_pair))
        assert bundle.signals.feedback_seen
        assert bundle.signals.meaningful_dom_change
        assert bundle.signals.dom_changed

    def test_url_change(self, url_change_capture):
        bundle = build_evidence_bundle("p1", 0, _no_change(), [url_change_capture])
        assert bundle.signals.feedback_seen
        assert bundle.signals.url_changed
        assert bundle.signals.history_length_delta == 1

    def test_successful_network_request(self):
        capture = success("network", {"totalRequests": 1, "successfulRequests": 1})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert bundle.signals.feedback_seen
        assert bundle.signals.network_activity

    def test_status_codes_only_network_summary(self):
        capture = success("network", {"totalRequests": 1, "statusCodes": [200]})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert bundle.signals.feedback_seen
        assert bundle.signals.network_activity

    def test_failed_network_request_is_not_feedback(self):
        capture = success("network", {"totalRequests": 1, "failedRequests": 1})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert not bundle.signals.feedback_seen
        assert bundle.signals.network_request_count == 1
        assert bundle.signals.network_failure_count == 1

    def test_state_change(self):
        capture = success("state", {"changedKeys": ["cart"]})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert bundle.signals.feedback_seen
        assert bundle.signals.state_changed

    def test_ui_state_flip(self):
        capture = success("ui_state", {"dialogChanged": True})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert bundle.signals.feedback_seen

    def test_console_errors_are_not_feedback(self):
        capture = success("console", {"errorCount": 2})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert not bundle.signals.feedback_seen
        assert bundle.signals.console_error_count == 2

    def test_out_of_scope_dom_is_not_feedback(self, spinner_pair):
        bundle = build_evidence_bundle("p1", 0, classify_scope(*spinner_pair))
        assert not bundle.signals.feedback_seen
        assert bundle.signals.dom_changed
        assert bundle.out_of_scope

    def test_noise_is_not_a_dom_change(self):
        scope = classify_scope("<p>2024-01-01T10:00:00Z</p>", "<p>2024-01-02T10:00:00Z</p>")
        bundle = build_evidence_bundle("p1", 0, scope)
        assert not bundle.signals.dom_changed


class TestSensorFailures:
    """Failed sensors contribute nothing and are listed."""

    def test_failed_sensor_listed(self, failed_network_capture):
        bundle = build_evidence_bundle("p1", 0, _no_change(), [failed_network_capture])
        assert bundle.sensors_failed == ("network",)
        assert bundle.sensors_available == ()
        assert bundle.signals.network_request_count == 0

    def test_absent_sensor_is_unavailable_not_failed(self):
        bundle = build_evidence_bundle("p1", 0, _no_change(), [])
        assert bundle.sensors_failed == ()
        assert bundle.sensors_available == ()

    def test_partial_capture_contributes_data(self):
        capture = outcome("network", "partial", data={"totalRequests": 2, "successfulRequests": 1})
        bundle = build_evidence_bundle("p1", 0, _no_change(), [capture])
        assert bundle.signals.network_activity
        assert bundle.sensors_available == ("network",)

    def test_later_success_supersedes_failure(self):
        captures = [
            failure("console", "detached"),
            success("console", {"errorCount": 1}),
        ]
        bundle = build_evidence_bundle("p1", 0, _no_change(), captures)
        assert bundle.sensors_failed == ()
        assert bundle.sensors_available == ("console",)

    def test_unknown_sensor_ignored(self):
        bundle = build_evidence_bundle("p1", 0, _no_change(), [success("telepathy", {"x": 1})])
        assert bundle.sensors_available == ()

    def test_malformed_summary_ignored(self):
        bundle = build_evidence_bundle("p1", 0, _no_change(), [success("network", "200 OK")])
        assert bundle.sensors_available == ()
        assert bundle.sensors_failed == ()

    def test_single_capture(self, url_change_capture):
        bundle = build_evidence_bundle("p1", 0, _no_change(), url_change_capture)
        assert bundle.sensors_available == ("navigation",)
        assert bundle.signals.url_changed

    def test_non_iterable_captures_ignored(self):
        bundle = build_evidence_bundle("p1", 0, _no_change(), 42)
        assert bundle.sensors_available == ()
        assert bundle.sensors_failed == ()

    def test_mapping_of_captures(self):
        captures = {"network": success("network", NetworkSummary(total_requests=1))}
        bundle = build_evidence_bundle("p1", 0, _no_change(), captures)
        assert bundle.signals.network_request_count == 1


class TestBundleSerialization:
    """to_dict shape."""

    def test_to_dict(self, url_change_capture, failed_network_capture):
        bundle = build_evidence_bundle(
            "p1", 3, _no_change(), [url_change_capture, failed_network_capture]
        )
        d = bundle.to_dict()
        assert d["promiseId"] == "p1"
        assert d["interactionIndex"] == 3
        assert d["sensorsAvailable"] == ["navigation"]
        assert d["sensorsFailed"] == ["network"]
        assert d["signals"]["urlChanged"] is True
        assert d["scope"]["classification"] == "no-change"
