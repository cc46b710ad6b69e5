"""Tests for the scope catalogs and detectors."""

from silent_judge.scope import (
    FEEDBACK_MARKERS,
    NOISE_PATTERNS,
    OUT_OF_SCOPE_CATALOG,
    WATCHED_ATTRIBUTES,
    ScopeCategory,
    has_feedback_elements,
    has_validation_errors,
    iter_tags,
    scope_documentation,
    strip_noise,
)
from silent_judge.scope.detectors import class_has_keyword, extract_stable_text
from silent_judge.scope.patterns import CATEGORY_NEXT_STEPS, CATEGORY_SUMMARIES


class TestCatalogs:
    """Catalogs are ordered data."""

    def test_catalog_labels_unique(self):
        labels = [entry.label for entry in OUT_OF_SCOPE_CATALOG]
        assert len(labels) == len(set(labels))

    def test_every_category_is_explained(self):
        for category in ScopeCategory:
            assert "NOT a silent failure" in CATEGORY_SUMMARIES[category]
            assert CATEGORY_NEXT_STEPS[category]

    def test_watched_attributes(self):
        assert [w.attribute for w in WATCHED_ATTRIBUTES] == [
            "disabled",
            "aria-invalid",
            "aria-disabled",
            "data-loading",
        ]

    def test_feedback_markers_include_roles(self):
        labels = [m.label for m in FEEDBACK_MARKERS]
        assert 'role="alert"' in labels
        assert 'role="status"' in labels
        assert "aria-live" in labels

    def test_noise_order_puts_timestamps_first(self):
        assert NOISE_PATTERNS[0].name == "timestamp"


class TestTokenizer:
    """Tolerant start-tag tokenizer."""

    def test_attribute_quoting_styles(self):
        tag = next(iter_tags("<input type=text name='q' value=\"a b\" disabled/>"))
        assert tag.name == "input"
        assert tag.attrs == {"type": "text", "name": "q", "value": "a b", "disabled": ""}

    def test_names_are_lowercased(self):
        tag = next(iter_tags('<DIV ID="Main">x</DIV>'))
        assert tag.name == "div"
        assert tag.attrs["id"] == "Main"

    def test_closing_tags_and_comments_skipped(self):
        tags = list(iter_tags("<!-- note --><p>a</p><br>"))
        assert [t.name for t in tags] == ["p", "br"]

    def test_first_duplicate_attribute_wins(self):
        tag = next(iter_tags('<p id="a" id="b">'))
        assert tag.attrs["id"] == "a"


class TestStripNoise:
    """Noise replacement."""

    def test_date_without_time_is_kept(self):
        assert strip_noise("<p>Due 2024-01-01</p>") == "<p>Due 2024-01-01</p>"

    def test_timestamp_with_offset(self):
        assert strip_noise("at 2024-01-01 10:00+02:00") == "at [TIMESTAMP]"

    def test_long_hex_hash(self):
        assert strip_noise("v=" + "ab12" * 10) == "v=[HASH]"

    def test_short_hex_is_kept(self):
        assert strip_noise("#ff0000") == "#ff0000"


class TestDetectorHelpers:
    """Small helpers used by the detectors."""

    def test_class_keyword_forms(self):
        assert class_has_keyword(["toast"], "toast")
        assert class_has_keyword(["form-error"], "error")
        assert class_has_keyword(["Alert_box"], "alert")
        assert not class_has_keyword(["errorless"], "error")

    def test_repeated_live_regions_get_ordinals(self):
        html = '<p aria-live="polite">a</p><p aria-live="polite">b</p>'
        assert extract_stable_text(html) == {"p[aria-live]": "a", "p[aria-live]:1": "b"}

    def test_whitespace_is_normalized(self):
        assert extract_stable_text('<p id="x">\n  Saved \n ok </p>') == {"p#x": "Saved ok"}


class TestPageHeuristics:
    """has_feedback_elements / has_validation_errors."""

    def test_feedback_elements(self):
        assert has_feedback_elements('<div role="alert">x</div>')
        assert has_feedback_elements('<div class="Toast">x</div>')
        assert not has_feedback_elements("<div>plain</div>")

    def test_validation_errors(self):
        assert has_validation_errors('<input aria-invalid="true">')
        assert not has_validation_errors("<input>")

    def test_non_text_input(self):
        assert has_feedback_elements(None) is False
        assert has_validation_errors(42) is False


class TestScopeDocumentation:
    """Documentation is derived from the catalogs."""

    def test_sections(self):
        doc = scope_documentation()
        assert set(doc) == {"inScope", "outOfScope", "unobservable", "noise"}
        assert set(doc["outOfScope"]) == {"visual", "accessibility", "customData"}
        assert 'role="alert"' in doc["inScope"]["structure"]
        assert "timestamp" in doc["noise"]
