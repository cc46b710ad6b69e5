"""The Evidence Law: a CONFIRMED finding must rest on substantive evidence.

Without it the finding is downgraded to SUSPECTED (or dropped, under the
"drop" policy). Downgrades are logged, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..evidence import EvidenceSignals
from ..exceptions import ErrorCode
from ..logging_config import get_logger
from .confidence import ConfidenceAssessment

logger = get_logger(__name__)


class FindingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    SUSPECTED = "SUSPECTED"
    INFORMATIONAL = "INFORMATIONAL"


DOWNGRADE_REASON = "Evidence Law: CONFIRMED requires sufficient evidence; downgraded to SUSPECTED"


@dataclass(frozen=True)
class EvidenceLawResult:
    """Outcome of enforcement. status is None when the finding is dropped."""

    status: Optional[FindingStatus]
    downgraded: bool = False
    reason: Optional[str] = None

    @property
    def dropped(self) -> bool:
        return self.status is None


def apply_evidence_law(
    status: Union[FindingStatus, str],
    evidence_sufficient: bool,
    policy: str = "downgrade",
    subject: Optional[str] = None,
) -> EvidenceLawResult:
    """Enforce the law for a bare evidence_sufficient flag."""
    status = FindingStatus(status)
    if status is not FindingStatus.CONFIRMED or evidence_sufficient:
        return EvidenceLawResult(status)

    if policy == "drop":
        logger.warning(
            "[%s] Dropping CONFIRMED finding%s: insufficient evidence",
            ErrorCode.SJ402.value,
            f" for {subject}" if subject else "",
        )
        return EvidenceLawResult(None, reason="Evidence Law: CONFIRMED without sufficient evidence dropped")

    logger.warning(
        "[%s] Downgrading CONFIRMED to SUSPECTED%s: insufficient evidence",
        ErrorCode.SJ402.value,
        f" for {subject}" if subject else "",
    )
    return EvidenceLawResult(FindingStatus.SUSPECTED, downgraded=True, reason=DOWNGRADE_REASON)


def enforce_evidence_law(
    status: Union[FindingStatus, str],
    assessment: ConfidenceAssessment,
    policy: str = "downgrade",
    subject: Optional[str] = None,
) -> EvidenceLawResult:
    return apply_evidence_law(status, assessment.evidence_sufficient, policy, subject)


# ── Ambiguity ────────────────────────────────────────────────────────

AMBIGUITY_BLOCKED_WRITE = (
    "blocked_write: browser protection or sandboxing may have masked the real behavior"
)
AMBIGUITY_CONSOLE_ONLY = "console_only: errors may be external or transient, not app-generated"
AMBIGUITY_NETWORK_ONLY = (
    "network_only: backend activity without UI confirmation (possibly a pending operation)"
)


def detect_ambiguities(signals: EvidenceSignals) -> tuple[str, ...]:
    """Reasons a finding's evidence should be read with caution."""
    strong = (
        signals.url_changed
        or signals.meaningful_dom_change
        or signals.feedback_seen
        or signals.network_request_count > 0
    )
    ambiguities = []
    if signals.blocked_writes > 0:
        ambiguities.append(AMBIGUITY_BLOCKED_WRITE)
    if signals.console_error_count > 0 and not strong:
        ambiguities.append(AMBIGUITY_CONSOLE_ONLY)
    if (
        signals.network_request_count > 0
        and not signals.url_changed
        and not signals.meaningful_dom_change
        and not signals.feedback_seen
    ):
        ambiguities.append(AMBIGUITY_NETWORK_ONLY)
    return tuple(ambiguities)
