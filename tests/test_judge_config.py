"""Tests for configuration loading and validation."""

import pytest

from silent_judge.config import ConfidenceThresholds, JudgeConfig, load_config
from silent_judge.exceptions import ConfigFileError, InvalidConfigError, SilentJudgeError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with no global or project config and no SILENT_JUDGE_* vars."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in ("MAX_HTML_CHARS", "WEB_SCAN_CEILING", "EVIDENCE_LAW_POLICY", "VERBOSITY"):
        monkeypatch.delenv(f"SILENT_JUDGE_{key}", raising=False)
    return tmp_path


class TestDefaults:
    def test_defaults(self):
        config = JudgeConfig()
        assert config.web_scan_ceiling == 0.70
        assert config.evidence_law_policy == "downgrade"
        assert config.confidence.high_threshold == 0.85

    def test_frozen(self):
        with pytest.raises(AttributeError):
            JudgeConfig().web_scan_ceiling = 0.9


class TestValidation:
    """Invalid values are rejected at construction."""

    def test_ceiling_must_be_below_one(self):
        with pytest.raises(InvalidConfigError):
            JudgeConfig(web_scan_ceiling=1.0)

    def test_policy(self):
        with pytest.raises(InvalidConfigError):
            JudgeConfig(evidence_law_policy="ignore")

    def test_max_html_chars(self):
        with pytest.raises(InvalidConfigError):
            JudgeConfig(max_html_chars=0)

    def test_thresholds_order(self):
        with pytest.raises(InvalidConfigError):
            ConfidenceThresholds(high_threshold=0.5, medium_threshold=0.6)

    def test_weight_range(self):
        with pytest.raises(InvalidConfigError):
            ConfidenceThresholds(signal_weight=1.5)


class TestLoadConfig:
    """Sources merge in priority order."""

    def test_defaults_when_nothing_found(self, isolated):
        assert load_config() == JudgeConfig()

    def test_project_file(self, isolated):
        (isolated / "silent-judge.toml").write_text(
            'web_scan_ceiling = 0.6\n\n[confidence]\nhigh_threshold = 0.9\n'
        )
        config = load_config()
        assert config.web_scan_ceiling == 0.6
        assert config.confidence.high_threshold == 0.9

    def test_env_overrides_file(self, isolated, monkeypatch):
        (isolated / "silent-judge.toml").write_text("web_scan_ceiling = 0.6\n")
        monkeypatch.setenv("SILENT_JUDGE_WEB_SCAN_CEILING", "0.5")
        assert load_config().web_scan_ceiling == 0.5

    def test_overrides_win(self, isolated, monkeypatch):
        monkeypatch.setenv("SILENT_JUDGE_EVIDENCE_LAW_POLICY", "drop")
        assert load_config(evidence_law_policy="downgrade").evidence_law_policy == "downgrade"

    def test_verbose_flag(self, isolated):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"

    def test_missing_explicit_file(self, isolated):
        with pytest.raises(ConfigFileError):
            load_config(isolated / "nope.toml")

    def test_malformed_file(self, isolated):
        path = isolated / "bad.toml"
        path.write_text("web_scan_ceiling = = 1\n")
        with pytest.raises(ConfigFileError):
            load_config(path)

    def test_bad_env_value(self, isolated, monkeypatch):
        monkeypatch.setenv("SILENT_JUDGE_MAX_HTML_CHARS", "lots")
        with pytest.raises(SilentJudgeError):
            load_config()

    def test_unknown_key(self, isolated):
        with pytest.raises(SilentJudgeError):
            load_config(not_a_field=1)
