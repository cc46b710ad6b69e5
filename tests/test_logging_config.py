"""Tests for logging setup."""

import logging

import pytest

from silent_judge.config import JudgeConfig, load_config
from silent_judge.logging_config import get_logger, level_for_verbosity, setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    """Leave the silent_judge logger as it was found."""
    logger = logging.getLogger("silent_judge")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


class TestGetLogger:
    def test_namespaced(self):
        assert get_logger("scope.classifier").name == "silent_judge.scope.classifier"
        assert get_logger("silent_judge.engine").name == "silent_judge.engine"

    def test_root(self):
        assert get_logger().name == "silent_judge"


class TestSetupLogging:
    """The configured verbosity sets the level."""

    @pytest.mark.parametrize(
        "verbosity, level",
        [("quiet", logging.ERROR), ("normal", logging.WARNING), ("verbose", logging.DEBUG)],
    )
    def test_verbosity_sets_level(self, verbosity, level):
        logger = setup_logging(JudgeConfig(verbosity=verbosity))
        assert logger.level == level
        assert level_for_verbosity(verbosity) == level

    def test_default_config_is_normal(self):
        assert setup_logging().level == logging.WARNING

    def test_loaded_config_flows_through(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SILENT_JUDGE_VERBOSITY", "verbose")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        logger = setup_logging(load_config())
        assert logger.isEnabledFor(logging.DEBUG)

    def test_repeated_setup_replaces_handlers(self):
        logger = setup_logging(JudgeConfig(verbosity="verbose"))
        count = len(logger.handlers)
        setup_logging(JudgeConfig(verbosity="quiet"))
        assert len(logger.handlers) == count

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "judge.log"
        logger = setup_logging(JudgeConfig(), log_file=str(log_file))
        get_logger("judgment.evidence_law").warning("[SJ402] Downgrading CONFIRMED to SUSPECTED")
        for handler in logger.handlers:
            handler.flush()
        assert "SJ402" in log_file.read_text(encoding="utf-8")
