"""
Content Model Tests

Validation is shallow: only query.text and result.data are required.
Everything nested parses leniently.
"""

import re

import pytest

from tutor_report.content import (
    ContentBlock,
    ReportInput,
    extract_topic,
    build_filename,
    validate_report,
)
from tutor_report.errors import SchemaError


# =============================================================================
# VALIDATION TESTS
# =============================================================================

class TestValidation:
    """Tests for required-field validation."""

    @pytest.mark.parametrize("raw", [
        {},
        {"query": {}},
        {"query": {"text": "x"}},
        {"query": {"text": 5}, "result": {"data": {}}},
        {"query": "x", "result": {"data": {}}},
        {"query": {"text": "x"}, "result": {}},
        {"query": {"text": "x"}, "result": {"data": None}},
        None,
        [],
        "report",
    ])
    def test_rejects_missing_required_fields(self, raw):
        """Test that inputs without query.text or result.data are rejected."""
        with pytest.raises(SchemaError) as exc_info:
            validate_report(raw)
        assert exc_info.value.status_code == 400

    def test_accepts_minimal_report(self, minimal_report):
        """Test that query.text plus an empty result.data is enough."""
        report = validate_report(minimal_report)

        assert isinstance(report, ReportInput)
        assert report.query_text == "x"
        assert report.blocks == ()
        assert report.resources == ()

    def test_accepts_empty_query_text(self):
        """An empty string is still a string."""
        report = validate_report({"query": {"text": ""}, "result": {"data": {}}})
        assert report.query_text == ""

    def test_metadata_defaults_to_absent(self, minimal_report):
        report = validate_report(minimal_report)
        assert report.metadata.timestamp is None
        assert report.metadata.logo is None

    def test_metadata_is_read(self, full_report):
        report = validate_report(full_report)
        assert report.metadata.timestamp == "2026-10-19T10:15:00Z"
        assert report.metadata.logo == "https://example.com/logo.svg"


# =============================================================================
# LENIENT PARSING TESTS
# =============================================================================

class TestLenientParsing:
    """Malformed nested content never fails validation."""

    def test_non_list_script_is_ignored(self, minimal_report):
        minimal_report["reasoning"] = {"general_script": "not a list"}
        assert validate_report(minimal_report).blocks == ()

    def test_non_dict_block_becomes_empty(self, minimal_report):
        minimal_report["reasoning"] = {"general_script": ["oops", {"heading": "H"}]}
        report = validate_report(minimal_report)

        assert report.blocks[0] == ContentBlock()
        assert report.blocks[1].heading == "H"

    def test_block_fields_are_additive(self):
        """Test that every field on a block is kept, not just the first."""
        block = ContentBlock.from_dict({
            "heading": "H",
            "paragraph": "P",
            "bullet": ["a", "b"],
            "quote": {"content": "Q", "author": "A"},
        })

        assert block.heading == "H"
        assert block.paragraph == "P"
        assert block.bullet == ("a", "b")
        assert block.quote.content == "Q"
        assert block.quote.author == "A"

    def test_wrong_typed_fields_are_absent(self):
        block = ContentBlock.from_dict({
            "heading": {"nested": True},
            "bullet": "not a list",
            "callout": "not an object",
            "quote": ["x"],
        })

        assert block.heading is None
        assert block.bullet is None
        assert block.callout is None
        assert block.quote is None

    def test_numeric_bullets_are_stringified(self):
        block = ContentBlock.from_dict({"bullet": [1, 2.5, None, "three"]})
        assert block.bullet == ("1", "2.5", "three")

    def test_only_first_resource_is_kept(self, full_report):
        report = validate_report(full_report)
        concept = report.resource("concept")

        assert concept.title == "Laws of Motion"
        assert concept.link == "https://example.com/c1"
        assert concept.script == "Review the concept"

    def test_empty_category_has_no_card(self, full_report):
        full_report["result"]["data"]["practiceTest"] = []
        report = validate_report(full_report)

        assert report.resource("practiceTest") is None
        assert [card.category.key for card in report.resources] == [
            "concept", "practiceAssignment", "formula",
        ]

    def test_categories_keep_fixed_order(self, full_report):
        data = full_report["result"]["data"]
        full_report["result"]["data"] = {key: data[key] for key in reversed(list(data))}
        report = validate_report(full_report)

        assert [card.category.label for card in report.resources] == [
            "Concept", "Assignment", "Test", "Formula Sheet",
        ]

    def test_malformed_card_is_empty(self, minimal_report):
        minimal_report["result"]["data"] = {"formula": ["not a card"]}
        card = validate_report(minimal_report).resource("formula")

        assert card is not None
        assert card.script is None
        assert card.title is None
        assert card.link is None


# =============================================================================
# TOPIC & FILENAME TESTS
# =============================================================================

class TestTopic:
    """Tests for topic extraction used in output filenames."""

    @pytest.mark.parametrize("query", ["", None, "a an if", "   "])
    def test_fallback_topic(self, query):
        assert extract_topic(query) == "report"

    def test_first_long_word(self):
        assert extract_topic("Explain Newton's laws") == "explain"

    def test_skips_short_words(self):
        assert extract_topic("why is the Doppler effect") == "doppler"

    def test_four_letter_word_counts(self):
        assert extract_topic("what is the Doppler effect") == "what"

    def test_non_ascii_words_are_skipped(self):
        """Test that words with no ASCII filename characters fall through."""
        assert extract_topic("ऊर्जा क्या है") == "report"
        assert extract_topic("ऊर्जा क्या है energy") == "energy"

    def test_quotes_are_stripped(self):
        assert extract_topic('"inertia" explained') == "inertia"

    def test_path_separators_are_stripped(self):
        assert extract_topic("what/why causes inertia") == "whatwhy"

    def test_topic_is_filename_safe(self):
        for query in ["Ünïcödé force", "C:\\temp\\x", "a..b/../c?*<>|", "naïve"]:
            topic = extract_topic(query)
            assert re.fullmatch(r"[a-z0-9_-]+", topic), topic

    def test_splits_on_any_whitespace(self):
        assert extract_topic("why\tis\nVelocity") == "velocity"

    def test_filename_format(self, fixed_now):
        """Test that ':' and '.' in the export timestamp become '-'."""
        assert build_filename("explain", fixed_now) == "explain_report_2026-10-19T03-45-12-345Z.pdf"

    def test_filename_converts_to_utc(self):
        from datetime import datetime, timedelta, timezone

        ist = timezone(timedelta(hours=5, minutes=30))
        moment = datetime(2026, 10, 19, 9, 15, 12, 7000, tzinfo=ist)
        assert build_filename("report", moment) == "report_report_2026-10-19T03-45-12-007Z.pdf"
