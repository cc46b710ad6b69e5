"""Scope classification result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Classification(str, Enum):
    NO_CHANGE = "no-change"
    NOISE_ONLY = "noise-only"
    IN_SCOPE = "in-scope"
    OUT_OF_SCOPE = "out-of-scope"


@dataclass(frozen=True)
class AttributeChange:
    """A watched attribute or form value that differs between snapshots."""

    attribute: str
    before: Union[int, str, None]
    after: Union[int, str, None]
    element: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "attribute": self.attribute,
            "before": self.before,
            "after": self.after,
        }
        if self.element is not None:
            d["element"] = self.element
        return d


@dataclass(frozen=True)
class ContentChange:
    """Text change inside an element with a stable identifier."""

    element: str
    before: str
    after: str

    def to_dict(self) -> dict[str, Any]:
        return {"element": self.element, "before": self.before, "after": self.after}


@dataclass(frozen=True)
class OutOfScopeMatch:
    """One out-of-scope catalog entry that matched, with what it saw."""

    pattern: str
    category: str
    details: tuple[str, ...] = ()


@dataclass(frozen=True)
class OutOfScopeExplanation:
    category: str
    summary: str
    patterns: tuple[str, ...]
    what_to_do_next: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "summary": self.summary,
            "patterns": list(self.patterns),
            "whatToDoNext": self.what_to_do_next,
        }


@dataclass(frozen=True)
class ScopeClassification:
    """Result of comparing two DOM snapshots.

    Invariants:
        out_of_scope_explanation is set iff classification is OUT_OF_SCOPE
        is_meaningful implies IN_SCOPE and at least one non-empty change list
        NO_CHANGE implies changed is False
    """

    changed: bool
    is_meaningful: bool
    classification: Classification
    elements_added: tuple[str, ...] = ()
    elements_removed: tuple[str, ...] = ()
    attributes_changed: tuple[AttributeChange, ...] = ()
    content_changed: tuple[ContentChange, ...] = ()
    out_of_scope_explanation: Optional[OutOfScopeExplanation] = None
    html_length_before: int = 0
    html_length_after: int = 0
    degraded: bool = False
    matched_out_of_scope: tuple[OutOfScopeMatch, ...] = field(default=(), compare=False)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.elements_added
            or self.elements_removed
            or self.attributes_changed
            or self.content_changed
        )

    @property
    def is_out_of_scope(self) -> bool:
        return self.classification is Classification.OUT_OF_SCOPE

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "changed": self.changed,
            "isMeaningful": self.is_meaningful,
            "classification": self.classification.value,
            "elementsAdded": list(self.elements_added),
            "elementsRemoved": list(self.elements_removed),
            "attributesChanged": [a.to_dict() for a in self.attributes_changed],
            "contentChanged": [c.to_dict() for c in self.content_changed],
            "htmlLengthBefore": self.html_length_before,
            "htmlLengthAfter": self.html_length_after,
            "degraded": self.degraded,
        }
        if self.out_of_scope_explanation is not None:
            d["outOfScopeExplanation"] = self.out_of_scope_explanation.to_dict()
        return d
