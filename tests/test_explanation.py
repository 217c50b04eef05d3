"""Tests for explanation.py: why-it-fits bullets and commentary context."""
from __future__ import annotations

from agents.evidence_finder.explanation import MAX_BULLETS, build_why_fits, context_from_results
from agents.evidence_finder.models import SecondaryContext
from common.models import CaseResult, CaseSnippet
from conftest import make_form

PATTERN = "Courts often admit autopsy photographs when they corroborate contested medical testimony."


def _case(snippet_texts=("The photographs were probative of intent.",), court_label="9th Cir.", year=2019):
    return CaseResult(
        id="c1",
        name="United States v. Example",
        court_label=court_label,
        year=year,
        authority="binding",
        issue_tags=["Rule 403"],
        snippets=[CaseSnippet(label="Key paragraph", text=t) for t in snippet_texts],
    )


class TestBuildWhyFits:
    def test_summary_names_court_year_and_framing(self):
        bullets = build_why_fits(_case(), make_form(), "403")
        assert bullets[0].startswith(
            "This 9th Cir. decision from 2019 applies Rule 403 by balancing probative value "
            "against unfair prejudice to a fact pattern similar to yours.")

    def test_summary_lists_matching_fact_concepts(self):
        bullets = build_why_fits(_case(), make_form(), "403")
        assert "graphic or disturbing images and offered stipulations" in bullets[0]

    def test_unknown_rule_has_no_framing_and_blank_court_says_court(self):
        form = make_form(fact_pattern="A business record was offered without a custodian.")
        bullets = build_why_fits(_case(court_label=""), form, "FRE 901")
        assert bullets[0] == "This court decision from 2019 applies Rule FRE 901 to a fact pattern similar to yours."

    def test_snippet_bullet_quotes_unique_texts_with_frames(self):
        case = _case(snippet_texts=("First passage.", "First passage.", "Second passage."))
        bullets = build_why_fits(case, make_form(), "403")
        assert bullets[1] == ('The court\'s application: "First passage." '
                              'Its reasoning: "Second passage."')

    def test_context_pattern_bullet(self):
        context = SecondaryContext(phrases=["too short", PATTERN])
        bullets = build_why_fits(_case(), make_form(), "403", context)
        assert bullets[-1] == f"Courts commonly emphasize in similar opinions that {PATTERN}"

    def test_context_without_usable_phrase_adds_nothing(self):
        context = SecondaryContext(phrases=["short", "x" * 300])
        assert len(build_why_fits(_case(), make_form(), "403", context)) == 2

    def test_bullet_count_is_bounded(self):
        context = SecondaryContext(phrases=[PATTERN])
        bullets = build_why_fits(_case(), make_form(), "403", context)
        assert 1 <= len(bullets) <= MAX_BULLETS


class TestContextFromResults:
    def test_first_sentence_of_each_result(self):
        results = [
            {"text": f"{PATTERN} Later sentences are ignored."},
            {"highlights": ["Too short.", "Ignored."]},
        ]
        context = context_from_results(results)
        assert context.phrases == [PATTERN]

    def test_nothing_usable_returns_none(self):
        assert context_from_results([]) is None
        assert context_from_results([{"text": ""}, {"highlights": ["Tiny."]}]) is None
