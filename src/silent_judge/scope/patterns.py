"""Scope catalogs.

Everything the classifier knows about "what counts as feedback" lives here as
ordered data. The detectors interpret these tables; adding a pattern means
adding a row, not a branch.

Three tables drive classification:
    NOISE_PATTERNS        stripped before any comparison
    FEEDBACK_MARKERS      elements whose appearance or disappearance is feedback
    WATCHED_ATTRIBUTES    attributes whose changes are feedback

A fourth, OUT_OF_SCOPE_CATALOG, names changes that may well be feedback but
that the classifier cannot observe reliably (CSS-driven visibility, free-form
state attributes). They are reported as such, never as silent failures.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, NamedTuple, Optional, Union


class InScopeKind(str, Enum):
    FEEDBACK_ROLE = "feedback-role"
    LIVE_REGION = "live-region"
    FEEDBACK_CLASS = "feedback-class"
    FEEDBACK_DATA = "feedback-data"
    ATTRIBUTE_PRESENCE = "attribute-presence"
    ATTRIBUTE_VALUE = "attribute-value"
    FORM_VALUE = "form-value"
    STABLE_TEXT = "stable-text"


class OutOfScopeKind(str, Enum):
    STYLE_VISIBILITY = "style-visibility"
    CLASS_CHANGE = "class-change"
    ATTRIBUTE_TOGGLE = "attribute-toggle"
    DATA_ATTRIBUTE = "data-attribute"


class ScopeCategory(str, Enum):
    VISUAL = "visual"
    ACCESSIBILITY = "accessibility"
    CUSTOM_DATA = "customData"


class NoisePattern(NamedTuple):
    name: str
    regex: re.Pattern
    replacement: str


class FeedbackMarker(NamedTuple):
    label: str
    kind: InScopeKind
    argument: str


class WatchedAttribute(NamedTuple):
    attribute: str
    kind: InScopeKind


class OutOfScopePattern(NamedTuple):
    label: str
    category: ScopeCategory
    kind: OutOfScopeKind
    argument: Union[str, tuple[str, ...]]


# ── Noise ────────────────────────────────────────────────────────────

TEST_ID_ATTRIBUTES: tuple[str, ...] = (
    "data-testid",
    "data-test-id",
    "data-test",
    "data-cy",
    "data-qa",
)

# Order matters: timestamps and UUIDs go before the generic hex run.
NOISE_PATTERNS: tuple[NoisePattern, ...] = (
    NoisePattern(
        "timestamp",
        re.compile(
            r"\b\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?"
        ),
        "[TIMESTAMP]",
    ),
    NoisePattern(
        "uuid",
        re.compile(
            r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b"
        ),
        "[UUID]",
    ),
    NoisePattern("hash", re.compile(r"\b[0-9a-fA-F]{32,}\b"), "[HASH]"),
    NoisePattern(
        "tracking",
        re.compile(
            r"([?&])(?:utm_[a-z_]+|gclid|fbclid|msclkid|_ga|_gl|ga_[a-z_]+)=[^&\"'\s<>]*",
            re.IGNORECASE,
        ),
        r"\1[TRACKING]",
    ),
    NoisePattern(
        "test-id",
        re.compile(
            r"\s(?:" + "|".join(re.escape(a) for a in TEST_ID_ATTRIBUTES) + r")"
            r"\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>]+)",
            re.IGNORECASE,
        ),
        "",
    ),
)


# ── In scope ─────────────────────────────────────────────────────────

# Class tokens carrying these words are feedback, not styling.
FEEDBACK_CLASS_KEYWORDS: tuple[str, ...] = ("toast", "error", "success", "modal", "dialog", "alert")

FEEDBACK_MARKERS: tuple[FeedbackMarker, ...] = (
    FeedbackMarker('role="alert"', InScopeKind.FEEDBACK_ROLE, "alert"),
    FeedbackMarker('role="status"', InScopeKind.FEEDBACK_ROLE, "status"),
    FeedbackMarker("aria-live", InScopeKind.LIVE_REGION, "aria-live"),
    FeedbackMarker('class="toast"', InScopeKind.FEEDBACK_CLASS, "toast"),
    FeedbackMarker('class="error"', InScopeKind.FEEDBACK_CLASS, "error"),
    FeedbackMarker('class="success"', InScopeKind.FEEDBACK_CLASS, "success"),
    FeedbackMarker('class="modal"', InScopeKind.FEEDBACK_CLASS, "modal"),
    FeedbackMarker('class="dialog"', InScopeKind.FEEDBACK_CLASS, "dialog"),
    FeedbackMarker("[data-error]", InScopeKind.FEEDBACK_DATA, "data-error"),
    FeedbackMarker("[data-success]", InScopeKind.FEEDBACK_DATA, "data-success"),
)

WATCHED_ATTRIBUTES: tuple[WatchedAttribute, ...] = (
    WatchedAttribute("disabled", InScopeKind.ATTRIBUTE_PRESENCE),
    WatchedAttribute("aria-invalid", InScopeKind.ATTRIBUTE_VALUE),
    WatchedAttribute("aria-disabled", InScopeKind.ATTRIBUTE_VALUE),
    WatchedAttribute("data-loading", InScopeKind.ATTRIBUTE_VALUE),
)

# Attributes that make an element's text content worth tracking.
STABLE_TEXT_ROLES: tuple[str, ...] = ("status", "alert")

# No text content of their own.
VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)


# ── Out of scope ─────────────────────────────────────────────────────

VISIBILITY_PROPERTIES: tuple[str, ...] = ("display", "visibility", "opacity")

OUT_OF_SCOPE_CATALOG: tuple[OutOfScopePattern, ...] = (
    OutOfScopePattern(
        "style attribute changes (display, visibility, opacity)",
        ScopeCategory.VISUAL,
        OutOfScopeKind.STYLE_VISIBILITY,
        VISIBILITY_PROPERTIES,
    ),
    OutOfScopePattern(
        "class changes (non-feedback)",
        ScopeCategory.VISUAL,
        OutOfScopeKind.CLASS_CHANGE,
        FEEDBACK_CLASS_KEYWORDS,
    ),
    OutOfScopePattern(
        "aria-hidden changes", ScopeCategory.ACCESSIBILITY, OutOfScopeKind.ATTRIBUTE_TOGGLE, "aria-hidden"
    ),
    OutOfScopePattern(
        "aria-expanded changes",
        ScopeCategory.ACCESSIBILITY,
        OutOfScopeKind.ATTRIBUTE_TOGGLE,
        "aria-expanded",
    ),
    OutOfScopePattern(
        "aria-selected changes",
        ScopeCategory.ACCESSIBILITY,
        OutOfScopeKind.ATTRIBUTE_TOGGLE,
        "aria-selected",
    ),
    OutOfScopePattern(
        "aria-busy changes", ScopeCategory.ACCESSIBILITY, OutOfScopeKind.ATTRIBUTE_TOGGLE, "aria-busy"
    ),
    OutOfScopePattern(
        "aria-pressed changes",
        ScopeCategory.ACCESSIBILITY,
        OutOfScopeKind.ATTRIBUTE_TOGGLE,
        "aria-pressed",
    ),
    OutOfScopePattern(
        "aria-checked changes",
        ScopeCategory.ACCESSIBILITY,
        OutOfScopeKind.ATTRIBUTE_TOGGLE,
        "aria-checked",
    ),
    OutOfScopePattern(
        "aria-current changes",
        ScopeCategory.ACCESSIBILITY,
        OutOfScopeKind.ATTRIBUTE_TOGGLE,
        "aria-current",
    ),
    OutOfScopePattern(
        "custom data-* attribute changes",
        ScopeCategory.CUSTOM_DATA,
        OutOfScopeKind.DATA_ATTRIBUTE,
        # Tracked elsewhere: data-loading is watched, test ids are noise.
        ("data-loading",) + TEST_ID_ATTRIBUTES,
    ),
)

# Recognized by users as feedback but not observable from two snapshots.
UNOBSERVABLE_FEEDBACK: dict[str, tuple[str, ...]] = {
    "timing": ("CSS transitions", "animation completion", "delayed visibility changes"),
    "viewport": ("scroll position changes", "element scrolled into view"),
}


# ── Explanations ─────────────────────────────────────────────────────

CATEGORY_SUMMARIES: dict[ScopeCategory, str] = {
    ScopeCategory.VISUAL: (
        "This interaction changed styling only (style or class attributes). "
        "Visual feedback driven by CSS cannot be observed from DOM snapshots. "
        "This is NOT a silent failure: feedback may exist but is outside the "
        "detectable scope."
    ),
    ScopeCategory.ACCESSIBILITY: (
        "This interaction changed accessibility state attributes that are not "
        "tracked (such as aria-hidden or aria-expanded). "
        "This is NOT a silent failure: feedback may exist but is outside the "
        "detectable scope."
    ),
    ScopeCategory.CUSTOM_DATA: (
        "This interaction changed custom data-* attributes whose meaning is "
        "application specific. "
        "This is NOT a silent failure: feedback may exist but is outside the "
        "detectable scope."
    ),
}

CATEGORY_NEXT_STEPS: dict[ScopeCategory, str] = {
    ScopeCategory.VISUAL: (
        "Verify this interaction manually, or render feedback as text in an "
        'aria-live region or a role="status" element so it can be observed.'
    ),
    ScopeCategory.ACCESSIBILITY: (
        "Verify this interaction manually, or pair the state change with an "
        "announcement in an aria-live region."
    ),
    ScopeCategory.CUSTOM_DATA: (
        "Verify this interaction manually, or expose the state through "
        "data-loading, aria-invalid or visible text."
    ),
}


def category_for(label: str) -> Optional[ScopeCategory]:
    for entry in OUT_OF_SCOPE_CATALOG:
        if entry.label == label:
            return entry.category
    return None


def scope_documentation() -> dict[str, Any]:
    """Describe what the classifier can and cannot observe.

    Built from the catalogs so the documentation cannot drift from the
    behavior.
    """
    out_of_scope: dict[str, list[str]] = {}
    for entry in OUT_OF_SCOPE_CATALOG:
        out_of_scope.setdefault(entry.category.value, []).append(entry.label)
    unobservable = {name: list(items) for name, items in UNOBSERVABLE_FEEDBACK.items()}

    return {
        "inScope": {
            "structure": [m.label for m in FEEDBACK_MARKERS],
            "attributes": [w.attribute for w in WATCHED_ATTRIBUTES],
            "formState": ["input value changes", "inputs added or removed"],
            "textContent": [
                "elements with an id",
                "aria-live regions",
            ]
            + [f'role="{role}" elements' for role in STABLE_TEXT_ROLES],
        },
        "outOfScope": out_of_scope,
        "unobservable": unobservable,
        "noise": [p.name for p in NOISE_PATTERNS],
    }
