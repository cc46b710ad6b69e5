"""Determinism normalizer.

Produces the canonical structural form of a decision-relevant artifact, so
that two runs over logically identical input serialize to identical bytes.

Rules, applied in a single walk at every depth:
    - timestamp fields are removed
    - millisecond fields are quantized to coarse buckets
    - confidence/score fields are rounded to 3 decimals in [0, 1]
    - keys are emitted in lexicographic order
    - findings, judgments and reference-id arrays are sorted; trace arrays
      keep their chronological order

normalize_artifact is idempotent and never mutates its input.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Optional

from ..logging_config import get_logger
from .canonical import canonical_json, to_jsonable

logger = get_logger(__name__)

TIMESTAMP_FIELDS = frozenset(
    {
        "timestamp",
        "observedAt",
        "scannedAt",
        "detectedAt",
        "createdAt",
        "updatedAt",
        "scanTime",
        "scanDate",
        "observed_at",
        "scanned_at",
        "detected_at",
        "created_at",
        "updated_at",
        "scan_time",
        "scan_date",
    }
)

# (exclusive upper bound in ms, label)
ELAPSED_BUCKETS: tuple[tuple[int, str], ...] = (
    (1_000, "<1s"),
    (5_000, "<5s"),
    (10_000, "<10s"),
    (30_000, "<30s"),
    (60_000, "<1min"),
    (300_000, "<5min"),
)
OVERFLOW_BUCKET = "≥5min"
UNKNOWN_BUCKET = "unknown"
BUCKET_LABELS = frozenset([label for _, label in ELAPSED_BUCKETS] + [OVERFLOW_BUCKET, UNKNOWN_BUCKET])

CONFIDENCE_PRECISION = Decimal("0.001")

TRACE_FIELDS = frozenset({"trace", "traces", "traceLog", "interactions", "timeline"})

ARTIFACT_KINDS = ("findings", "judgments", "judgment", "summary", "coverage")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def quantize_elapsed(ms: Any) -> str:
    """Map elapsed milliseconds to a bucket label.

    Existing labels pass through unchanged. Negative or non-numeric
    values (booleans and NaN included) are "unknown".
    """
    if isinstance(ms, str) and ms in BUCKET_LABELS:
        return ms
    if not _is_number(ms) or ms < 0:
        return UNKNOWN_BUCKET
    for limit, label in ELAPSED_BUCKETS:
        if ms < limit:
            return label
    return OVERFLOW_BUCKET


def round_confidence(value: Any) -> float:
    """Normalize a confidence to [0, 1] with 3 decimals, rounding half up.

    Values above 1 are read as percentages. Non-numeric values give 0.0.
    """
    if not _is_number(value):
        return 0.0
    if isinstance(value, float) and math.isinf(value):
        return 0.0 if value < 0 else 1.0
    # Exact for integers of any size.
    number = Decimal(value) if isinstance(value, int) else Decimal(repr(value))
    if number > 1:
        number = number / 100
    number = min(max(number, Decimal(0)), Decimal(1))
    return float(number.quantize(CONFIDENCE_PRECISION, rounding=ROUND_HALF_UP))


def is_elapsed_field(key: str) -> bool:
    return (
        key in ("elapsed", "elapsedMs")
        or key.endswith(("Ms", "Duration", "_ms", "_duration"))
    )


def is_confidence_field(key: str) -> bool:
    lowered = key.lower()
    return "confidence" in lowered or "score" in lowered


def is_reference_field(key: str) -> bool:
    return key == "evidenceRefs" or key.endswith(("Refs", "Ids"))


# ── Array ordering ───────────────────────────────────────────────────


def _as_int(value: Any) -> int:
    if _is_number(value) and math.isfinite(value):
        return int(value)
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return 0


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _finding_key(item: Any) -> tuple:
    if not isinstance(item, dict):
        return (1, "", 0, 0, "", "", "", canonical_json(item))
    source = item.get("source")
    if not isinstance(source, dict):
        source = {}
    column = source.get("col", source.get("column"))
    return (
        0,
        _text(source.get("file")),
        _as_int(source.get("line")),
        _as_int(column),
        _text(item.get("type")),
        _text(item.get("severity")),
        _text(item.get("id")),
        canonical_json(item),
    )


def _judgment_key(item: Any) -> tuple:
    if not isinstance(item, dict):
        return (1, "", "", "", canonical_json(item))
    return (
        0,
        _text(item.get("promiseId")),
        _text(item.get("judgment")),
        _text(item.get("id")),
        canonical_json(item),
    )


def _reference_key(item: Any) -> tuple:
    if isinstance(item, str):
        return (0, item)
    return (1, canonical_json(item))


def sort_findings(findings: list) -> list:
    """Sort by (file, line, column, type, severity, id)."""
    return sorted(findings, key=_finding_key)


def sort_judgments(judgments: list) -> list:
    """Sort by (promiseId, judgment kind, id)."""
    return sorted(judgments, key=_judgment_key)


def sort_references(refs: list) -> list:
    return sorted(refs, key=_reference_key)


def _sorter_for(key: Optional[str]) -> Optional[Callable[[list], list]]:
    if key is None or key in TRACE_FIELDS:
        return None
    if key == "findings":
        return sort_findings
    if key == "judgments":
        return sort_judgments
    if is_reference_field(key):
        return sort_references
    return None


# ── Walk ─────────────────────────────────────────────────────────────


def remove_timestamps(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: remove_timestamps(v) for k, v in value.items() if k not in TIMESTAMP_FIELDS}
    if isinstance(value, list):
        return [remove_timestamps(v) for v in value]
    return value


def sort_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: sort_keys(value[k]) for k in sorted(value)}
    if isinstance(value, list):
        return [sort_keys(v) for v in value]
    return value


def _normalize_value(value: Any, key: Optional[str]) -> Any:
    if isinstance(value, dict):
        return {
            k: _normalize_value(value[k], k) for k in sorted(value) if k not in TIMESTAMP_FIELDS
        }
    if isinstance(value, list):
        items = [_normalize_value(v, None) for v in value]
        sorter = _sorter_for(key)
        return sorter(items) if sorter else items
    if key is None:
        return value
    if is_elapsed_field(key):
        return quantize_elapsed(value)
    if is_confidence_field(key) and _is_number(value):
        return round_confidence(value)
    return value


def normalize_artifact(artifact: Any, kind: Optional[str] = None) -> Any:
    """Return the canonical form of an artifact.

    Args:
        artifact: Nested dicts/lists/scalars, or records with to_dict
        kind: Artifact kind; a top-level findings or judgments list is
            sorted accordingly

    Returns:
        A new nested structure of plain JSON types
    """
    if kind is not None and kind not in ARTIFACT_KINDS:
        raise ValueError(f"Unknown artifact kind: {kind!r} (expected one of {ARTIFACT_KINDS})")
    data = to_jsonable(artifact)
    top_key = kind if isinstance(data, list) and kind in ("findings", "judgments") else None
    return _normalize_value(data, top_key)


def normalize_findings(artifact: Any) -> Any:
    return normalize_artifact(artifact, "findings")


def normalize_judgments(artifact: Any) -> Any:
    return normalize_artifact(artifact, "judgments")


def normalize_summary(artifact: Any) -> Any:
    return normalize_artifact(artifact, "summary")


def normalize_coverage(artifact: Any) -> Any:
    return normalize_artifact(artifact, "coverage")
