"""Scope classifier: which DOM changes count as observable feedback."""

from .classifier import classify_scope, explain_out_of_scope
from .detectors import has_feedback_elements, has_validation_errors, iter_tags, strip_noise
from .models import (
    AttributeChange,
    Classification,
    ContentChange,
    OutOfScopeExplanation,
    OutOfScopeMatch,
    ScopeClassification,
)
from .patterns import (
    FEEDBACK_MARKERS,
    NOISE_PATTERNS,
    OUT_OF_SCOPE_CATALOG,
    WATCHED_ATTRIBUTES,
    InScopeKind,
    OutOfScopeKind,
    ScopeCategory,
    scope_documentation,
)

__all__ = [
    "classify_scope",
    "explain_out_of_scope",
    "has_feedback_elements",
    "has_validation_errors",
    "iter_tags",
    "strip_noise",
    "AttributeChange",
    "Classification",
    "ContentChange",
    "OutOfScopeExplanation",
    "OutOfScopeMatch",
    "ScopeClassification",
    "FEEDBACK_MARKERS",
    "NOISE_PATTERNS",
    "OUT_OF_SCOPE_CATALOG",
    "WATCHED_ATTRIBUTES",
    "InScopeKind",
    "OutOfScopeKind",
    "ScopeCategory",
    "scope_documentation",
]
