"""Determinism normalizer, canonical serialization and artifact diffs."""

from .canonical import artifact_digest, canonical_json, serialize_artifact, stable_id, to_jsonable
from .diff import (
    ArtifactDifference,
    DeterminismReport,
    DeterminismVerdict,
    DiffReason,
    DiffSeverity,
    diff_artifacts,
    verify_determinism,
)
from .normalizer import (
    normalize_artifact,
    normalize_coverage,
    normalize_findings,
    normalize_judgments,
    normalize_summary,
    quantize_elapsed,
    remove_timestamps,
    round_confidence,
    sort_findings,
    sort_judgments,
    sort_keys,
)

__all__ = [
    "artifact_digest",
    "canonical_json",
    "serialize_artifact",
    "stable_id",
    "to_jsonable",
    "ArtifactDifference",
    "DeterminismReport",
    "DeterminismVerdict",
    "DiffReason",
    "DiffSeverity",
    "diff_artifacts",
    "verify_determinism",
    "normalize_artifact",
    "normalize_coverage",
    "normalize_findings",
    "normalize_judgments",
    "normalize_summary",
    "quantize_elapsed",
    "remove_timestamps",
    "round_confidence",
    "sort_findings",
    "sort_judgments",
    "sort_keys",
]
