"""
Tests for formatters.py: text report, JSON document and file output.
"""
import json
from datetime import datetime, timezone

import pytest

from design_feedback import __version__
from design_feedback.errors import OutputWriteError
from design_feedback.formatters import (
    format_json,
    format_text,
    split_sections,
    write_output,
)
from design_feedback.models import RawAnalysis


CRITIQUE = """PAGE DESCRIPTION: An online store product page.
Critical Issues - Layout:
- Add to cart button is off screen
Minor Issues:
- Footer spacing is uneven
Overall Assessment:
Usable after fixing the cart button."""


def make_analysis(**kwargs) -> RawAnalysis:
    defaults = dict(
        text=CRITIQUE,
        model="gpt-4o",
        produced_at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        viewport="mobile",
        url="https://shop.example.com",
        screenshot_path="shots/mobile.png",
        analysis_time_ms=1234,
    )
    defaults.update(kwargs)
    return RawAnalysis(**defaults)


# ── Sections ───────────────────────────────────────────────────────────────────

class TestSplitSections:
    def test_split_at_headers(self):
        sections = split_sections(CRITIQUE)

        assert [header for header, _ in sections] == [
            "",
            "Critical Issues - Layout:",
            "Minor Issues:",
            "Overall Assessment:",
        ]
        assert sections[1][1] == ["- Add to cart button is off screen"]

    def test_plain_text_is_one_untitled_section(self):
        assert split_sections("Looks good.\nNice colours.") == [("", ["Looks good.", "Nice colours."])]

    def test_empty_text_becomes_feedback_section(self):
        assert split_sections("") == [("Feedback", [])]


# ── Text report ────────────────────────────────────────────────────────────────

class TestFormatText:
    def test_report_layout(self):
        text = format_text(make_analysis())

        assert text.startswith("✓ Design Analysis Complete")
        assert "URL: https://shop.example.com" in text
        assert "Viewport: mobile" in text
        assert "Timestamp: " in text
        assert "🔴 Critical Issues - Layout:" in text
        assert "🔵 Minor Issues:" in text
        assert "─" * 40 in text
        assert "  - Add to cart button is off screen" in text
        assert "Usable after fixing the cart button." in text
        assert "Analysis completed in 1234ms" in text
        assert "Screenshot: shots/mobile.png" in text
        assert "Model: gpt-4o" in text

    def test_plain_output_has_no_escape_codes(self):
        assert "\x1b[" not in format_text(make_analysis())

    def test_unknown_url_and_missing_footer_fields(self):
        text = format_text(make_analysis(url=None, screenshot_path=None, analysis_time_ms=None))

        assert "URL: Unknown" in text
        assert "Screenshot:" not in text
        assert "Analysis completed in" not in text
        assert "Model: gpt-4o" in text

    def test_markup_in_critique_is_printed_literally(self):
        text = format_text(make_analysis(text="- The [bold] tag shows up in the heading"))

        assert "The [bold] tag shows up in the heading" in text

    def test_long_lines_are_not_wrapped(self):
        line = "- " + "word " * 60
        text = format_text(make_analysis(text=line))

        assert line.strip() in text


# ── JSON ───────────────────────────────────────────────────────────────────────

class TestFormatJson:
    def test_document(self):
        document = json.loads(format_json(make_analysis()))

        assert document["url"] == "https://shop.example.com"
        assert document["timestamp"] == "2024-05-01T12:30:00+00:00"
        assert document["viewport"] == "mobile"
        assert document["model"] == "gpt-4o"
        assert document["analysis_time_ms"] == 1234
        assert document["screenshot_path"] == "shots/mobile.png"
        assert document["page_description"] == "An online store product page."
        assert document["summary"] == "Usable after fixing the cart button."
        assert document["issues"] == [
            {"severity": "critical", "category": "Layout", "description": "Add to cart button is off screen"},
            {"severity": "minor", "category": "General", "description": "Footer spacing is uneven"},
        ]
        assert document["metadata"] == {"version": __version__, "cli": "design-feedback"}

    def test_indented_by_two(self):
        assert format_json(make_analysis()).startswith('{\n  "url"')

    def test_missing_url(self):
        assert json.loads(format_json(make_analysis(url=None)))["url"] == "Unknown"


# ── File output ────────────────────────────────────────────────────────────────

class TestWriteOutput:
    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "reports" / "2024" / "review.txt"

        written = write_output("report body", target)

        assert written == target
        assert target.read_text(encoding="utf-8") == "report body"

    def test_unwritable_target(self, tmp_path):
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory")

        with pytest.raises(OutputWriteError) as exc:
            write_output("report", blocker / "review.txt")
        assert exc.value.path == str(blocker / "review.txt")
