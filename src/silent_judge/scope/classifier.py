"""Scope classification of a before/after DOM snapshot pair.

The classifier answers "did this interaction produce feedback we can see?"
with one of four classifications:

    no-change      the snapshots are byte-identical
    noise-only     they differ only in timestamps, ids, hashes, tracking
    in-scope       a catalogued feedback pattern changed, or nothing
                   catalogued matched at all (see below)
    out-of-scope   only styling/state attributes changed; feedback may exist
                   but cannot be observed, so this is never a silent failure

In-scope always wins over out-of-scope. When neither catalog matches, the
pair is classified in-scope but not meaningful, so downstream judgment
treats it as "changed, no observable feedback". This keeps unknown changes
eligible for judgment instead of quietly excusing them.

classify_scope never raises: malformed or non-text input is coerced, and
oversized input is compared as opaque strings.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..config import DEFAULT_CONFIG
from ..exceptions import ErrorCode
from ..logging_config import get_logger
from .detectors import (
    detect_attribute_changes,
    detect_feedback_markers,
    detect_form_changes,
    detect_out_of_scope,
    detect_text_changes,
    iter_tags,
    strip_noise,
)
from .models import Classification, OutOfScopeExplanation, OutOfScopeMatch, ScopeClassification
from .patterns import CATEGORY_NEXT_STEPS, CATEGORY_SUMMARIES, ScopeCategory

logger = get_logger(__name__)


def _coerce_html(value: Any, side: str) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    logger.debug(
        "[%s] %s snapshot is %s, coercing to text", ErrorCode.SJ101.value, side, type(value).__name__
    )
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - a broken __str__ must not break classification
        return ""


def explain_out_of_scope(matches: Sequence[OutOfScopeMatch]) -> OutOfScopeExplanation:
    """Build the explanation from the first matched category."""
    category = ScopeCategory(matches[0].category)
    return OutOfScopeExplanation(
        category=category.value,
        summary=CATEGORY_SUMMARIES[category],
        patterns=tuple(m.pattern for m in matches),
        what_to_do_next=CATEGORY_NEXT_STEPS[category],
    )


def classify_scope(
    html_before: Any, html_after: Any, max_chars: Optional[int] = None
) -> ScopeClassification:
    """Classify the change between two DOM snapshots.

    Args:
        html_before: Serialized DOM before the interaction
        html_after: Serialized DOM after the interaction
        max_chars: Documents longer than this skip the detector passes
            (defaults to JudgeConfig.max_html_chars)

    Returns:
        ScopeClassification
    """
    before = _coerce_html(html_before, "before")
    after = _coerce_html(html_after, "after")
    limit = DEFAULT_CONFIG.max_html_chars if max_chars is None else max_chars
    lengths = {"html_length_before": len(before), "html_length_after": len(after)}

    if before == after:
        return ScopeClassification(
            changed=False, is_meaningful=False, classification=Classification.NO_CHANGE, **lengths
        )

    clean_before = strip_noise(before)
    clean_after = strip_noise(after)
    if clean_before == clean_after:
        return ScopeClassification(
            changed=True, is_meaningful=False, classification=Classification.NOISE_ONLY, **lengths
        )

    if len(before) > limit or len(after) > limit:
        logger.warning(
            "[%s] Snapshot exceeds %d chars (%d/%d); compared as opaque text",
            ErrorCode.SJ100.value,
            limit,
            len(before),
            len(after),
        )
        return ScopeClassification(
            changed=True,
            is_meaningful=False,
            classification=Classification.IN_SCOPE,
            degraded=True,
            **lengths,
        )

    tags_before = list(iter_tags(clean_before))
    tags_after = list(iter_tags(clean_after))

    added, removed = detect_feedback_markers(tags_before, tags_after)
    attributes = detect_attribute_changes(tags_before, tags_after)
    attributes += detect_form_changes(tags_before, tags_after)
    content = detect_text_changes(clean_before, clean_after, tags_before, tags_after)

    if added or removed or attributes or content:
        logger.debug(
            "In-scope change: +%d -%d attrs=%d text=%d",
            len(added),
            len(removed),
            len(attributes),
            len(content),
        )
        return ScopeClassification(
            changed=True,
            is_meaningful=True,
            classification=Classification.IN_SCOPE,
            elements_added=tuple(added),
            elements_removed=tuple(removed),
            attributes_changed=tuple(attributes),
            content_changed=tuple(content),
            **lengths,
        )

    matches = detect_out_of_scope(tags_before, tags_after)
    if matches:
        logger.debug("Out-of-scope change: %s", ", ".join(m.pattern for m in matches))
        return ScopeClassification(
            changed=True,
            is_meaningful=False,
            classification=Classification.OUT_OF_SCOPE,
            out_of_scope_explanation=explain_out_of_scope(matches),
            matched_out_of_scope=tuple(matches),
            **lengths,
        )

    logger.debug("Unclassified change, defaulting to in-scope without feedback")
    return ScopeClassification(
        changed=True, is_meaningful=False, classification=Classification.IN_SCOPE, **lengths
    )
