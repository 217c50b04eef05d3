"""Tests for text_cleaner.py: site chrome removal and idempotence."""
from __future__ import annotations

import pytest

from agents.evidence_finder.text_cleaner import clean_extracted_text, html_to_text


class TestCleanExtractedText:
    def test_empty_input_returns_empty_string(self):
        assert clean_extracted_text("") == ""
        assert clean_extracted_text(None) == ""

    def test_collapses_whitespace_and_joins_lines(self):
        raw = "The court   held\n\n  that the photos\twere admissible.  "
        assert clean_extracted_text(raw) == "The court held that the photos were admissible."

    def test_removes_courtlistener_notes_widget(self):
        raw = "### Your Notes( edit ) (none) ### Summaries (9) The court excluded the exhibit."
        assert clean_extracted_text(raw) == "The court excluded the exhibit."

    def test_removes_edit_and_none_markers(self):
        raw = "Opinion text (edit) continues (none) here."
        assert clean_extracted_text(raw) == "Opinion text continues here."

    def test_drops_navigation_lines(self):
        raw = "\n".join([
            "Skip to main content",
            "[Search Cornell]",
            "Cornell Law School",
            "Rule 403 permits exclusion of relevant evidence.",
            "Please help us improve our site!",
        ])
        assert clean_extracted_text(raw) == "Rule 403 permits exclusion of relevant evidence."

    def test_removes_trailing_section_header_only_on_its_line(self):
        raw = "First paragraph of the opinion.\n### Related Cases\nSecond paragraph."
        assert clean_extracted_text(raw) == "First paragraph of the opinion. Second paragraph."

    def test_strips_code_fences(self):
        assert clean_extracted_text("```The jury saw the photos.```") == "The jury saw the photos."

    def test_strips_html_tags(self):
        raw = "<p>The photographs were <mark>unduly</mark> prejudicial.</p>"
        assert clean_extracted_text(raw) == "The photographs were unduly prejudicial."

    def test_marker_exposed_by_first_removal_is_also_removed(self):
        assert clean_extracted_text("Text ( ed(edit)it ) more") == "Text more"

    def test_malformed_declaration_does_not_raise(self):
        assert clean_extracted_text("x <![(> y") == "x y"

    def test_malformed_declaration_beside_real_tags(self):
        assert clean_extracted_text("<p>The <b>photos</b><![(> were cumulative.</p>") == \
            "The photos were cumulative."

    @pytest.mark.parametrize("raw", [
        "plain text",
        "### Your Notes( edit ) (none) ### Summaries (2) body",
        "( ed(edit)it ) nested",
        "<p>&lt;b&gt;escaped&lt;/b&gt; tags</p>",
        "line one\n\n[Nav]\nline two\t\t(none)",
        "```\n### Heading\n```",
        "",
        "x <![(> y",
        "<![CDATA[raw]]> tail <!DOCTYPE html>",
        "<!-- note --> kept <! broken",
        "<div><p>nested <b>bold <i>deep</i></b></p></div>",
        "&amp;lt;p&amp;gt;double escaped&amp;lt;/p&amp;gt;",
        "&lt;![(&gt; escaped declaration",
        "<<b>b>> a < b > c <a href=\"x\">link</a>",
        "<p>unclosed <span>tags",
    ])
    def test_is_idempotent(self, raw):
        once = clean_extracted_text(raw)
        assert clean_extracted_text(once) == once


class TestHtmlToText:
    def test_plain_text_is_returned_unchanged(self):
        assert html_to_text("no tags\n\nhere") == "no tags\n\nhere"

    def test_block_elements_become_blank_line_separated(self):
        text = html_to_text("<p>First.</p><p>Second.</p>")
        assert "First." in text and "Second." in text
        assert "\n\n" in text

    def test_malformed_declaration_is_stripped(self):
        text = html_to_text("<p>First.</p><![(><p>Second.</p>")
        assert "<![" not in text
        assert "First." in text and "Second." in text
