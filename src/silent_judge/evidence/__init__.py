"""Evidence bundle builder."""

from .bundle import (
    EvidenceBundle,
    EvidenceSignals,
    build_evidence_bundle,
    collect_summaries,
    derive_signals,
)

__all__ = [
    "EvidenceBundle",
    "EvidenceSignals",
    "build_evidence_bundle",
    "collect_summaries",
    "derive_signals",
]
