"""Detectors over HTML snapshots.

HTML is read with a tolerant regex tokenizer rather than a parser: the
snapshots are serialized DOMs, often truncated or malformed, and the
detectors only need start tags, their attributes, and the text that
immediately follows them.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterator, Sequence

from ..logging_config import get_logger
from .models import AttributeChange, ContentChange, OutOfScopeMatch
from .patterns import (
    FEEDBACK_MARKERS,
    NOISE_PATTERNS,
    OUT_OF_SCOPE_CATALOG,
    STABLE_TEXT_ROLES,
    VOID_ELEMENTS,
    WATCHED_ATTRIBUTES,
    FeedbackMarker,
    InScopeKind,
    OutOfScopeKind,
    OutOfScopePattern,
)

logger = get_logger(__name__)

_TAG_RE = re.compile(r"<([a-zA-Z][a-zA-Z0-9:-]*)(\s[^<>]*)?/?>")
_ATTR_RE = re.compile(
    r"([^\s=\"'/<>]+)(?:\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s\"'<>]+)))?"
)
_WS_RE = re.compile(r"\s+")

# Detail strings are for humans; keep them short.
_DETAIL_LIMIT = 50


@dataclass(frozen=True)
class Tag:
    name: str
    attrs: dict[str, str]
    start: int
    end: int

    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()


def parse_attributes(source: str) -> dict[str, str]:
    """Parse an attribute string. First occurrence of a name wins."""
    attrs: dict[str, str] = {}
    for m in _ATTR_RE.finditer(source):
        name = m.group(1).lower()
        if name in attrs:
            continue
        value = next((g for g in m.group(2, 3, 4) if g is not None), "")
        attrs[name] = value
    return attrs


def iter_tags(html: str) -> Iterator[Tag]:
    """Yield start tags in document order."""
    for m in _TAG_RE.finditer(html):
        raw_attrs = m.group(2) or ""
        yield Tag(
            name=m.group(1).lower(),
            attrs=parse_attributes(raw_attrs.rstrip("/")),
            start=m.start(),
            end=m.end(),
        )


def strip_noise(html: str) -> str:
    for pattern in NOISE_PATTERNS:
        html = pattern.regex.sub(pattern.replacement, html)
    return html


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _truncate(text: str) -> str:
    return text if len(text) <= _DETAIL_LIMIT else text[:_DETAIL_LIMIT]


# ── In-scope detectors ───────────────────────────────────────────────


def class_has_keyword(classes: Sequence[str], keyword: str) -> bool:
    """True if a class token is the keyword or a dashed/underscored form of it."""
    pattern = re.compile(r"(?:^|[-_])" + re.escape(keyword) + r"(?:$|[-_])")
    return any(pattern.search(token.lower()) for token in classes)


def _matches_marker(tag: Tag, marker: FeedbackMarker) -> bool:
    if marker.kind is InScopeKind.FEEDBACK_ROLE:
        return tag.attrs.get("role", "").strip().lower() == marker.argument
    if marker.kind is InScopeKind.FEEDBACK_CLASS:
        return class_has_keyword(tag.classes(), marker.argument)
    # Live regions and data-error/data-success: presence of the attribute.
    return marker.argument in tag.attrs


def count_marker(tags: Sequence[Tag], marker: FeedbackMarker) -> int:
    return sum(1 for tag in tags if _matches_marker(tag, marker))


def detect_feedback_markers(
    before: Sequence[Tag], after: Sequence[Tag]
) -> tuple[list[str], list[str]]:
    """Markers whose element count grew (added) or shrank (removed)."""
    added: list[str] = []
    removed: list[str] = []
    for marker in FEEDBACK_MARKERS:
        n_before = count_marker(before, marker)
        n_after = count_marker(after, marker)
        if n_after > n_before:
            added.append(marker.label)
        elif n_after < n_before:
            removed.append(marker.label)
    return added, removed


def _attribute_values(tags: Sequence[Tag], attribute: str) -> list[str]:
    return [tag.attrs[attribute] for tag in tags if attribute in tag.attrs]


def detect_attribute_changes(before: Sequence[Tag], after: Sequence[Tag]) -> list[AttributeChange]:
    """Whitelisted attributes. Presence attributes are counted per element."""
    changes: list[AttributeChange] = []
    for watched in WATCHED_ATTRIBUTES:
        values_before = _attribute_values(before, watched.attribute)
        values_after = _attribute_values(after, watched.attribute)
        if watched.kind is InScopeKind.ATTRIBUTE_PRESENCE:
            if len(values_before) != len(values_after):
                changes.append(
                    AttributeChange(watched.attribute, len(values_before), len(values_after))
                )
        elif values_before != values_after:
            changes.append(
                AttributeChange(
                    watched.attribute,
                    ", ".join(values_before) or "none",
                    ", ".join(values_after) or "none",
                )
            )
    return changes


def extract_input_values(tags: Sequence[Tag]) -> dict[str, str]:
    values: dict[str, str] = {}
    for tag in tags:
        if tag.name == "input" and tag.attrs.get("name"):
            values.setdefault(tag.attrs["name"], tag.attrs.get("value", ""))
    return values


def detect_form_changes(before: Sequence[Tag], after: Sequence[Tag]) -> list[AttributeChange]:
    """Named inputs whose value changed, appeared or disappeared."""
    inputs_before = extract_input_values(before)
    inputs_after = extract_input_values(after)
    changes: list[AttributeChange] = []
    for name in sorted(set(inputs_before) | set(inputs_after)):
        old = inputs_before.get(name)
        new = inputs_after.get(name)
        if old != new:
            changes.append(AttributeChange("value", old, new, element=f'input[name="{name}"]'))
    return changes


def _stable_key(tag: Tag) -> str | None:
    if tag.name in VOID_ELEMENTS:
        return None
    element_id = tag.attrs.get("id", "").strip()
    if element_id:
        return f"{tag.name}#{element_id}"
    if "aria-live" in tag.attrs:
        return f"{tag.name}[aria-live]"
    role = tag.attrs.get("role", "").strip().lower()
    if role in STABLE_TEXT_ROLES:
        return f"{tag.name}[role={role}]"
    return None


def extract_stable_text(html: str, tags: Sequence[Tag] | None = None) -> dict[str, str]:
    """Map each stably identified element to its leading text.

    Elements sharing a key (repeated live regions, duplicate ids) get an
    ordinal suffix so each is compared once.
    """
    if tags is None:
        tags = list(iter_tags(html))
    texts: dict[str, str] = {}
    seen: Counter[str] = Counter()
    for tag in tags:
        base = _stable_key(tag)
        if base is None:
            continue
        key = base if seen[base] == 0 else f"{base}:{seen[base]}"
        seen[base] += 1
        next_tag = html.find("<", tag.end)
        raw = html[tag.end :] if next_tag == -1 else html[tag.end : next_tag]
        texts[key] = normalize_whitespace(raw)
    return texts


def detect_text_changes(
    html_before: str,
    html_after: str,
    before: Sequence[Tag] | None = None,
    after: Sequence[Tag] | None = None,
) -> list[ContentChange]:
    texts_before = extract_stable_text(html_before, before)
    texts_after = extract_stable_text(html_after, after)
    changes: list[ContentChange] = []
    for key in sorted(set(texts_before) | set(texts_after)):
        old = texts_before.get(key, "")
        new = texts_after.get(key, "")
        if old != new:
            changes.append(ContentChange(key, old, new))
    return changes


# ── Out-of-scope detectors ───────────────────────────────────────────


def _counter_diff(before: Counter[str], after: Counter[str]) -> list[str]:
    return sorted(value for value in set(before) | set(after) if before[value] != after[value])


def detect_style_visibility(
    before: Sequence[Tag], after: Sequence[Tag], properties: Sequence[str]
) -> list[str]:
    prop_re = re.compile(r"(?:^|;)\s*(?:" + "|".join(map(re.escape, properties)) + r")\s*:", re.I)

    def visible_styles(tags: Sequence[Tag]) -> Counter[str]:
        return Counter(
            normalize_whitespace(s) for s in _attribute_values(tags, "style") if prop_re.search(s)
        )

    return [_truncate(s) for s in _counter_diff(visible_styles(before), visible_styles(after))]


def detect_class_changes(
    before: Sequence[Tag], after: Sequence[Tag], feedback_keywords: Sequence[str]
) -> list[str]:
    def styling_classes(tags: Sequence[Tag]) -> Counter[str]:
        values = (normalize_whitespace(v) for v in _attribute_values(tags, "class"))
        return Counter(
            v for v in values if not any(kw in v.lower() for kw in feedback_keywords)
        )

    return [_truncate(c) for c in _counter_diff(styling_classes(before), styling_classes(after))]


def detect_attribute_toggle(before: Sequence[Tag], after: Sequence[Tag], attribute: str) -> list[str]:
    values_before = _attribute_values(before, attribute)
    values_after = _attribute_values(after, attribute)
    if values_before == values_after:
        return []
    return [f"{attribute}: [{', '.join(values_before)}] -> [{', '.join(values_after)}]"]


def detect_data_attribute_changes(
    before: Sequence[Tag], after: Sequence[Tag], excluded: Sequence[str]
) -> list[str]:
    def data_values(tags: Sequence[Tag]) -> dict[str, list[str]]:
        found: dict[str, list[str]] = {}
        for tag in tags:
            for name, value in tag.attrs.items():
                if name.startswith("data-") and name not in excluded:
                    found.setdefault(name, []).append(value)
        return found

    values_before = data_values(before)
    values_after = data_values(after)
    details = []
    for name in sorted(set(values_before) | set(values_after)):
        old = values_before.get(name, [])
        new = values_after.get(name, [])
        if old != new:
            details.append(_truncate(f"{name}: [{', '.join(old)}] -> [{', '.join(new)}]"))
    return details


def _run_out_of_scope(entry: OutOfScopePattern, before: Sequence[Tag], after: Sequence[Tag]) -> list[str]:
    if entry.kind is OutOfScopeKind.STYLE_VISIBILITY:
        return detect_style_visibility(before, after, entry.argument)
    if entry.kind is OutOfScopeKind.CLASS_CHANGE:
        return detect_class_changes(before, after, entry.argument)
    if entry.kind is OutOfScopeKind.ATTRIBUTE_TOGGLE:
        return detect_attribute_toggle(before, after, entry.argument)
    return detect_data_attribute_changes(before, after, entry.argument)


def detect_out_of_scope(before: Sequence[Tag], after: Sequence[Tag]) -> list[OutOfScopeMatch]:
    """Catalog entries that match, in catalog order."""
    matches = []
    for entry in OUT_OF_SCOPE_CATALOG:
        details = _run_out_of_scope(entry, before, after)
        if details:
            matches.append(OutOfScopeMatch(entry.label, entry.category.value, tuple(details)))
    return matches


# ── Page heuristics ──────────────────────────────────────────────────

_FEEDBACK_INDICATORS = (
    'role="alert"',
    'role="status"',
    'aria-live="polite"',
    'aria-live="assertive"',
    "toast",
    "error",
    "success",
    "validation",
)

_VALIDATION_INDICATORS = ('aria-invalid="true"', "aria-invalid='true'", "invalid", "error", "required")


def has_feedback_elements(html: str) -> bool:
    """Whether the page appears to contain feedback elements at all."""
    if not isinstance(html, str):
        return False
    lowered = html.lower()
    return any(indicator in lowered for indicator in _FEEDBACK_INDICATORS)


def has_validation_errors(html: str) -> bool:
    if not isinstance(html, str):
        return False
    lowered = html.lower()
    return any(indicator in lowered for indicator in _VALIDATION_INDICATORS)
