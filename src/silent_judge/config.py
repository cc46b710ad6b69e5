"""Configuration loading and management for silent-judge.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in JudgeConfig)
    2. Global config (~/.silent-judge.toml)
    3. Project config (./silent-judge.toml)
    4. Explicit config file
    5. Environment variables (SILENT_JUDGE_* prefix)
    6. Keyword overrides

Example:
    >>> config = load_config(web_scan_ceiling=0.6)
    >>> config.web_scan_ceiling
    0.6
    >>> config.confidence.high_threshold
    0.85
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigFileError, InvalidConfigError, SilentJudgeError

Verbosity = Literal["quiet", "normal", "verbose"]
EvidenceLawPolicy = Literal["downgrade", "drop"]

_ENV_PREFIX = "SILENT_JUDGE_"


@dataclass(frozen=True)
class ConfidenceThresholds:
    """Scoring weights and level thresholds for confidence assessment.

    Attributes:
        Levels:
            high_threshold: finalScore at or above this is HIGH
            medium_threshold: finalScore at or above this is MEDIUM (else LOW)

        Raw score weights:
            feedback_weight: Added when the bundle has feedbackSeen
            signal_weight: Added per distinct contributing signal
            max_counted_signals: Signals beyond this count add nothing
            multi_sensor_bonus: Added when signals span 2+ independent sensors

        Truth locks:
            non_deterministic_max_confidence: Cap applied when the run was
                judged non-deterministic
    """

    # === Levels ===
    high_threshold: float = 0.85
    medium_threshold: float = 0.60

    # === Raw score weights ===
    # DOM + URL change: 0.35 + 2 x 0.15 + 0.20 = 0.85 (HIGH in a full project run)
    feedback_weight: float = 0.35
    signal_weight: float = 0.15
    max_counted_signals: int = 3
    multi_sensor_bonus: float = 0.20

    # === Truth locks ===
    non_deterministic_max_confidence: float = 0.50

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        for field_name in (
            "high_threshold",
            "medium_threshold",
            "feedback_weight",
            "signal_weight",
            "multi_sensor_bonus",
            "non_deterministic_max_confidence",
        ):
            value = getattr(self, field_name)
            if not 0.0 <= value <= 1.0:
                raise InvalidConfigError(field_name, value, "must be between 0.0 and 1.0")

        if self.medium_threshold > self.high_threshold:
            raise InvalidConfigError(
                "medium_threshold", self.medium_threshold, "must not exceed high_threshold"
            )
        if self.max_counted_signals < 1:
            raise InvalidConfigError(
                "max_counted_signals", self.max_counted_signals, "must be at least 1"
            )


DEFAULT_THRESHOLDS = ConfidenceThresholds()


@dataclass(frozen=True)
class JudgeConfig:
    """Configuration for the judgment core.

    All fields have defaults. Callers typically override only the ceiling
    or the evidence law policy.

    Attributes:
        max_html_chars: Documents longer than this skip the detector passes
            and are compared as opaque strings
        web_scan_ceiling: Confidence ceiling for URL-only runs
        evidence_law_policy: What happens to a CONFIRMED finding without
            sufficient evidence ("downgrade" to SUSPECTED, or "drop")
        verbosity: Logging verbosity level
        confidence: Nested scoring weights and level thresholds
    """

    max_html_chars: int = 2_000_000
    web_scan_ceiling: float = 0.70
    evidence_law_policy: EvidenceLawPolicy = "downgrade"
    verbosity: Verbosity = "normal"

    confidence: ConfidenceThresholds = field(default_factory=ConfidenceThresholds)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_html_chars < 1:
            raise InvalidConfigError("max_html_chars", self.max_html_chars, "must be at least 1")
        # A limited run must be strictly capped below a full project run.
        if not 0.0 <= self.web_scan_ceiling < 1.0:
            raise InvalidConfigError(
                "web_scan_ceiling", self.web_scan_ceiling, "must be in [0.0, 1.0)"
            )
        if self.evidence_law_policy not in ("downgrade", "drop"):
            raise InvalidConfigError(
                "evidence_law_policy", self.evidence_law_policy, "expected 'downgrade' or 'drop'"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )


DEFAULT_CONFIG = JudgeConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> JudgeConfig:
    """Load configuration with auto-discovery and merging.

    Configuration sources are merged in priority order (lowest to highest):
        1. Defaults (JudgeConfig field defaults)
        2. Global config (~/.silent-judge.toml)
        3. Project config (./silent-judge.toml)
        4. Explicit config file (if config_file provided)
        5. Environment variables (SILENT_JUDGE_* prefix)
        6. Keyword overrides

    A ``[confidence]`` table in any TOML source builds the nested
    ConfidenceThresholds.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides

    Returns:
        Validated JudgeConfig instance

    Raises:
        SilentJudgeError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".silent-judge.toml"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path.cwd() / "silent-judge.toml"
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigFileError(config_file, "file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    confidence = merged.pop("confidence", None)
    if confidence is not None:
        if isinstance(confidence, dict):
            try:
                merged["confidence"] = ConfidenceThresholds(**confidence)
            except TypeError as e:
                raise SilentJudgeError(f"Invalid [confidence] config: {e}")
        elif isinstance(confidence, ConfidenceThresholds):
            merged["confidence"] = confidence
        else:
            raise InvalidConfigError("confidence", confidence, "expected a table")

    try:
        return JudgeConfig(**merged)
    except TypeError as e:
        raise SilentJudgeError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from SILENT_JUDGE_* environment variables.

    Supported environment variables:
        SILENT_JUDGE_MAX_HTML_CHARS: int
        SILENT_JUDGE_WEB_SCAN_CEILING: float
        SILENT_JUDGE_EVIDENCE_LAW_POLICY: downgrade/drop
        SILENT_JUDGE_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any SILENT_JUDGE_* vars found.
    """
    type_hints = get_type_hints(JudgeConfig)

    result: dict[str, Any] = {}

    for field_name in JudgeConfig.__dataclass_fields__:
        env_key = f"{_ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise SilentJudgeError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be set from the environment (the
    nested confidence table).

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigFileError: If the file cannot be read or parsed
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, str(e))
