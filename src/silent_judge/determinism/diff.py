"""Structured diffs between normalized artifacts from different runs.

Used to check the determinism contract: normalize the same artifact from
repeated runs, compare digests, and when they differ explain where.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence

from ..logging_config import get_logger
from .canonical import artifact_digest
from .normalizer import is_confidence_field, normalize_artifact

logger = get_logger(__name__)


class DiffReason(str, Enum):
    MISSING_ARTIFACT = "DET_DIFF_MISSING_ARTIFACT"
    SCHEMA_MISMATCH = "DET_DIFF_SCHEMA_MISMATCH"
    FINDING_ADDED = "DET_DIFF_FINDING_ADDED"
    FINDING_REMOVED = "DET_DIFF_FINDING_REMOVED"
    FINDING_STATUS_CHANGED = "DET_DIFF_FINDING_STATUS_CHANGED"
    FINDING_SEVERITY_CHANGED = "DET_DIFF_FINDING_SEVERITY_CHANGED"
    CONFIDENCE_CHANGED = "DET_DIFF_CONFIDENCE_CHANGED"
    COUNT_CHANGED = "DET_DIFF_OBSERVATION_COUNT_CHANGED"
    FIELD_VALUE_CHANGED = "DET_DIFF_FIELD_VALUE_CHANGED"


class DiffSeverity(str, Enum):
    BLOCKER = "BLOCKER"
    WARN = "WARN"
    INFO = "INFO"


class DeterminismVerdict(str, Enum):
    DETERMINISTIC = "DETERMINISTIC"
    NON_DETERMINISTIC = "NON_DETERMINISTIC"


# Fields whose change alters a decision, not just its presentation.
DECISION_FIELDS = frozenset(
    {"status", "judgment", "classification", "level", "evidenceSufficient", "mode", "type"}
)


@dataclass(frozen=True)
class ArtifactDifference:
    path: str
    reason: DiffReason
    severity: DiffSeverity
    message: str
    before: Any = None
    after: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "reasonCode": self.reason.value,
            "severity": self.severity.value,
            "message": self.message,
            "before": self.before,
            "after": self.after,
        }


@dataclass(frozen=True)
class DeterminismReport:
    verdict: DeterminismVerdict
    digests: tuple[str, ...]
    differences: tuple[ArtifactDifference, ...] = ()

    @property
    def deterministic(self) -> bool:
        return self.verdict is DeterminismVerdict.DETERMINISTIC

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict.value,
            "digests": list(self.digests),
            "differences": [d.to_dict() for d in self.differences],
        }


def _join(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else str(key)


def _leaf_key(path: str) -> str:
    return path.rsplit(".", 1)[-1].split("[", 1)[0]


def _value_difference(path: str, before: Any, after: Any) -> ArtifactDifference:
    key = _leaf_key(path)
    if is_confidence_field(key):
        reason, severity = DiffReason.CONFIDENCE_CHANGED, DiffSeverity.WARN
    elif key in DECISION_FIELDS:
        reason, severity = DiffReason.FIELD_VALUE_CHANGED, DiffSeverity.BLOCKER
    else:
        reason, severity = DiffReason.FIELD_VALUE_CHANGED, DiffSeverity.INFO
    return ArtifactDifference(path, reason, severity, f"{path}: {before!r} -> {after!r}", before, after)


def _diff_values(path: str, a: Any, b: Any, out: list[ArtifactDifference]) -> None:
    if type(a) is not type(b) and not (
        isinstance(a, (int, float)) and isinstance(b, (int, float))
        and not isinstance(a, bool) and not isinstance(b, bool)
    ):
        out.append(
            ArtifactDifference(
                path or "<root>",
                DiffReason.SCHEMA_MISMATCH,
                DiffSeverity.BLOCKER,
                f"{path or '<root>'}: {type(a).__name__} vs {type(b).__name__}",
                a,
                b,
            )
        )
        return

    if isinstance(a, dict):
        for key in sorted(set(a) | set(b)):
            sub = _join(path, key)
            if key not in a or key not in b:
                out.append(
                    ArtifactDifference(
                        sub,
                        DiffReason.SCHEMA_MISMATCH,
                        DiffSeverity.WARN,
                        f"{sub}: present in only one run",
                        a.get(key),
                        b.get(key),
                    )
                )
                continue
            if _leaf_key(sub) == "findings" and isinstance(a[key], list) and isinstance(b[key], list):
                _diff_findings(sub, a[key], b[key], out)
            else:
                _diff_values(sub, a[key], b[key], out)
        return

    if isinstance(a, list):
        if len(a) != len(b):
            out.append(
                ArtifactDifference(
                    path,
                    DiffReason.COUNT_CHANGED,
                    DiffSeverity.WARN,
                    f"{path}: length {len(a)} -> {len(b)}",
                    len(a),
                    len(b),
                )
            )
        for index, (item_a, item_b) in enumerate(zip(a, b)):
            _diff_values(_join(path, index), item_a, item_b, out)
        return

    if a != b:
        out.append(_value_difference(path, a, b))


def _finding_identity(finding: Any, index: int) -> str:
    if isinstance(finding, dict) and finding.get("id"):
        return str(finding["id"])
    return f"#{index}"


def _diff_findings(path: str, a: list, b: list, out: list[ArtifactDifference]) -> None:
    if len(a) != len(b):
        out.append(
            ArtifactDifference(
                path,
                DiffReason.COUNT_CHANGED,
                DiffSeverity.BLOCKER,
                f"Finding count changed: {len(a)} -> {len(b)}",
                len(a),
                len(b),
            )
        )

    by_id_a = {_finding_identity(f, i): f for i, f in enumerate(a)}
    by_id_b = {_finding_identity(f, i): f for i, f in enumerate(b)}

    for identity in sorted(set(by_id_b) - set(by_id_a)):
        out.append(
            ArtifactDifference(
                _join(path, identity),
                DiffReason.FINDING_ADDED,
                DiffSeverity.BLOCKER,
                f"Finding added: {identity}",
                None,
                by_id_b[identity],
            )
        )
    for identity in sorted(set(by_id_a) - set(by_id_b)):
        out.append(
            ArtifactDifference(
                _join(path, identity),
                DiffReason.FINDING_REMOVED,
                DiffSeverity.BLOCKER,
                f"Finding removed: {identity}",
                by_id_a[identity],
                None,
            )
        )

    for identity in sorted(set(by_id_a) & set(by_id_b)):
        fa, fb = by_id_a[identity], by_id_b[identity]
        sub = _join(path, identity)
        if isinstance(fa, dict) and isinstance(fb, dict):
            if fa.get("status") != fb.get("status"):
                out.append(
                    ArtifactDifference(
                        _join(sub, "status"),
                        DiffReason.FINDING_STATUS_CHANGED,
                        DiffSeverity.BLOCKER,
                        f"Finding {identity} status: {fa.get('status')} -> {fb.get('status')}",
                        fa.get("status"),
                        fb.get("status"),
                    )
                )
            if fa.get("severity") != fb.get("severity"):
                out.append(
                    ArtifactDifference(
                        _join(sub, "severity"),
                        DiffReason.FINDING_SEVERITY_CHANGED,
                        DiffSeverity.WARN,
                        f"Finding {identity} severity: {fa.get('severity')} -> {fb.get('severity')}",
                        fa.get("severity"),
                        fb.get("severity"),
                    )
                )
            rest_a = {k: v for k, v in fa.items() if k not in ("status", "severity")}
            rest_b = {k: v for k, v in fb.items() if k not in ("status", "severity")}
            _diff_values(sub, rest_a, rest_b, out)
        else:
            _diff_values(sub, fa, fb, out)


def diff_artifacts(
    artifact_a: Any, artifact_b: Any, name: str = "artifact", kind: Optional[str] = None
) -> list[ArtifactDifference]:
    """List the differences between two artifacts after normalization.

    An empty list means the two serialize identically.
    """
    if artifact_a is None or artifact_b is None:
        if artifact_a is None and artifact_b is None:
            return []
        missing_in = "first" if artifact_a is None else "second"
        return [
            ArtifactDifference(
                name,
                DiffReason.MISSING_ARTIFACT,
                DiffSeverity.BLOCKER,
                f"Artifact {name} missing in {missing_in} run",
            )
        ]

    a = normalize_artifact(artifact_a, kind)
    b = normalize_artifact(artifact_b, kind)
    differences: list[ArtifactDifference] = []
    if kind == "findings" and isinstance(a, list) and isinstance(b, list):
        _diff_findings("findings", a, b, differences)
    else:
        _diff_values("", a, b, differences)
    return differences


def verify_determinism(runs: Sequence[Any], kind: Optional[str] = None) -> DeterminismReport:
    """Compare the same artifact across repeated runs.

    Every run is normalized and digested; any digest that differs from the
    first run's makes the verdict NON_DETERMINISTIC, with the differences
    against the first differing run attached.

    Raises:
        ValueError: If no runs are given
    """
    if not runs:
        raise ValueError("verify_determinism needs at least one run")

    normalized = [normalize_artifact(run, kind) for run in runs]
    digests = tuple(artifact_digest(n) for n in normalized)

    for index, digest in enumerate(digests[1:], start=1):
        if digest != digests[0]:
            differences = diff_artifacts(normalized[0], normalized[index], kind=kind)
            logger.warning(
                "Run %d differs from run 0 after normalization (%d differences)",
                index,
                len(differences),
            )
            return DeterminismReport(
                DeterminismVerdict.NON_DETERMINISTIC, digests, tuple(differences)
            )

    return DeterminismReport(DeterminismVerdict.DETERMINISTIC, digests)
