"""Shared test fixtures for silent-judge tests."""

import pytest

from silent_judge.capture import failure, success
from silent_judge.config import JudgeConfig
from silent_judge.judgment import (
    ExecutionMode,
    ExecutionModeContext,
    InteractionPromise,
)


@pytest.fixture
def config():
    """Default configuration."""
    return JudgeConfig()


@pytest.fixture
def full_context():
    """FULL_PROJECT run: no ceiling."""
    return ExecutionModeContext(
        mode=ExecutionMode.FULL_PROJECT,
        ceiling=1.0,
        reason="source_and_url",
        explanation="test",
    )


@pytest.fixture
def limited_context():
    """WEB_SCAN_LIMITED run with the default 0.70 ceiling."""
    return ExecutionModeContext(
        mode=ExecutionMode.WEB_SCAN_LIMITED,
        ceiling=0.70,
        reason="no_source_path",
        explanation="test",
    )


@pytest.fixture
def promise():
    """Unproven click promise."""
    return InteractionPromise(
        promise_id="p-ping",
        kind="click",
        selector="#ping",
        file="src/App.jsx",
        line=12,
        column=4,
    )


@pytest.fixture
def proven_promise():
    """Promise backed by source analysis."""
    return InteractionPromise(
        promise_id="p-save",
        kind="submit",
        selector="form#settings",
        file="src/Settings.jsx",
        line=40,
        column=8,
        proven=True,
    )


@pytest.fixture
def pong_pair():
    """In-scope text change in an element with an id."""
    return '<div id="pong"></div>', '<div id="pong">Ping acknowledged</div>'


@pytest.fixture
def spinner_pair():
    """Out-of-scope style visibility toggle."""
    return (
        '<div id="spinner" style="display:none">Loading...</div>',
        '<div id="spinner" style="display:block">Loading...</div>',
    )


@pytest.fixture
def url_change_capture():
    """Navigation sensor reporting a URL change."""
    return success("navigation", {"urlChanged": True, "historyLengthDelta": 1})


@pytest.fixture
def failed_network_capture():
    """Network sensor that failed to capture."""
    return failure("network", "CDP session closed", stage="settle")
