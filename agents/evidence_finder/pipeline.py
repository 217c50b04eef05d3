"""
Evidence search pipeline.

querying providers -> normalizing/deduplicating -> empty-check ->
time-filtering -> ranking/truncating -> enriching -> explaining -> done

Provider calls and per-case enrichment run concurrently. A provider that
fails or times out contributes nothing; it never aborts the search.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple

from common.config import Config
from common.courtlistener_api import CourtListenerAPI, courtlistener_api
from common.exa_api import ExaAPI, exa_api, highlight_spec
from common.logging import logger
from common.models import (
    CaseResult,
    CaseSnippet,
    RuleExplainer,
    SearchDebug,
    SearchForm,
    SearchResults,
)
from agents.evidence_finder.authority import classify_authority, issue_tags_for
from agents.evidence_finder.candidates import (
    candidates_from_courtlistener,
    candidates_from_exa,
    dedupe_candidates,
    filter_by_time_window,
)
from agents.evidence_finder.explanation import build_why_fits, context_from_results
from agents.evidence_finder.models import Candidate
from agents.evidence_finder.ranking import RankingConfig, rank_candidates
from agents.evidence_finder.snippets import (
    ExtractionConfig,
    extract_snippets,
    fact_keywords,
    unable_to_extract,
)
from agents.evidence_finder.text_cleaner import clean_extracted_text
from agents.evidence_finder.utils import (
    current_year,
    iso_date_years_ago,
    normalize_rule_token,
    reference_date,
)

CASE_LAW_DOMAIN = "courtlistener.com"
COMMENTARY_DOMAIN = "justia.com"
RULE_TEXT_DOMAIN = "law.cornell.edu"

NO_RESULTS_ID = "no-results"


def no_results(rule_token: str, now_year: Optional[int] = None,
               debug: Optional[SearchDebug] = None) -> SearchResults:
    """Fixed payload for a search that found nothing to show."""
    best = CaseResult(
        id=NO_RESULTS_ID,
        name="No cases found",
        court_label="",
        year=now_year or current_year(),
        authority="persuasive",
        issue_tags=[f"Rule {rule_token}"],
        snippets=[CaseSnippet(
            label="Summary",
            text="No matching cases were found. Try broadening the time window or relaxing filters.",
        )],
    )
    return SearchResults(
        best_fit=best,
        cases=[],
        why_fits=[
            "No results matched the current filters.",
            "Try broadening the jurisdiction or time window.",
        ],
        debug=debug,
    )


def case_search_query(form: SearchForm, rule_token: str) -> str:
    return (
        f"Find judicial opinions that apply Federal Rule of Evidence {rule_token} "
        f"to a fact pattern like this: {form.fact_pattern}. "
        "Prefer opinions analyzing admissibility (including motions in limine) "
        "and explaining the court's reasoning."
    )


def courtlistener_query(form: SearchForm, rule_token: str) -> str:
    keywords = fact_keywords(form.fact_pattern)[:8]
    query = f'"rule {rule_token}"'
    if keywords:
        query += f" ({' OR '.join(keywords)})"
    return query


class EvidenceSearchPipeline:
    def __init__(self, exa: Optional[ExaAPI] = None, courtlistener: Optional[CourtListenerAPI] = None,
                 ranking: Optional[RankingConfig] = None, extraction: Optional[ExtractionConfig] = None,
                 snippet_strategy: Optional[str] = None, enrichment_budget: Optional[float] = None,
                 max_results: Optional[int] = None, include_debug: Optional[bool] = None):
        self.exa = exa or exa_api
        self.courtlistener = courtlistener or courtlistener_api
        self.ranking = ranking or RankingConfig.from_mode(Config.RANKING_MODE)
        self.extraction = extraction or ExtractionConfig()
        self.snippet_strategy = snippet_strategy or Config.SNIPPET_STRATEGY
        self.enrichment_budget = (Config.ENRICHMENT_BUDGET_SECONDS if enrichment_budget is None
                                  else enrichment_budget)
        self.max_results = Config.MAX_RESULTS if max_results is None else max_results
        self.include_debug = (not Config.is_production()) if include_debug is None else include_debug

    # -----------------------------------------------------------
    # PROVIDERS
    # -----------------------------------------------------------

    async def _query_providers(self, form: SearchForm, rule_token: str,
                               now_year: int) -> Tuple[List[Any], ...]:
        fact = form.fact_pattern
        calls = [
            self.exa.search(
                case_search_query(form, rule_token),
                num_results=7,
                include_domains=[CASE_LAW_DOMAIN],
                text=False,
                highlights=highlight_spec(
                    f"Extract the passage where the court applies Rule {rule_token} "
                    f"to facts like: {fact}. Prefer the court's reasoning, "
                    "balancing/test, and what evidence was admitted/excluded and why."),
            ),
            self.exa.search(
                f"Across similar fact patterns ({fact}), summarize how courts typically apply "
                f"FRE {rule_token}. Extract recurring factors and common reasoning used to admit "
                "or exclude evidence. Do not focus on defining the rule; focus on application.",
                num_results=3,
                include_domains=[COMMENTARY_DOMAIN],
                text=False,
                highlights=highlight_spec(
                    "Extract 1–2 sentences capturing recurring reasoning/factors for applying "
                    f"FRE {rule_token} to fact patterns like: {fact}."),
            ),
            self.exa.search(
                f"Federal Rule of Evidence {rule_token}: provide the rule text and a short "
                "explanation of the test/elements.",
                num_results=1,
                include_domains=[RULE_TEXT_DOMAIN],
                text=False,
                highlights=highlight_spec(
                    f"Extract the rule text and the core test/elements for FRE {rule_token} "
                    "(keep it concise)."),
            ),
            self.courtlistener.search_opinions(
                courtlistener_query(form, rule_token),
                court_id=form.court_id or None,
                date_min=iso_date_years_ago(form.time_window_years, today=reference_date(now_year)),
                only_published=form.only_published,
                page_size=10,
            ),
        ]
        names = ("exa-caselaw", "exa-commentary", "exa-rule-text", "courtlistener")
        results = await asyncio.gather(*calls, return_exceptions=True)

        joined = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.error(f"Provider {name} failed: {str(result)}")
                joined.append([])
            else:
                if not result:
                    logger.warning(f"Provider {name} returned no results")
                joined.append(result or [])
        return tuple(joined)

    def _rule_explainer(self, form: SearchForm, results: Sequence[Dict[str, Any]]) -> Optional[RuleExplainer]:
        if not results:
            return None
        top = results[0]
        text = clean_extracted_text(" ".join(h for h in (top.get("highlights") or []) if h))
        if not text:
            return None
        title = top.get("title") or f"{form.rule} - Federal Rules of Evidence"
        return RuleExplainer(title=title, text=text)

    # -----------------------------------------------------------
    # ENRICHMENT
    # -----------------------------------------------------------

    def _case_result(self, candidate: Candidate, form: SearchForm, rule_token: str,
                     snippets: List[CaseSnippet], now_year: int) -> CaseResult:
        return CaseResult(
            id=candidate.id,
            name=candidate.name,
            court_label=candidate.court_label,
            year=candidate.year,
            authority=classify_authority(candidate, form, now_year),
            issue_tags=issue_tags_for(form, candidate, rule_token),
            url=candidate.url,
            snippets=snippets or unable_to_extract(),
        )

    async def _enrich(self, candidate: Candidate, form: SearchForm, rule_token: str, now_year: int) -> CaseResult:
        snippets = await extract_snippets(
            candidate, form, rule_token, self.exa,
            strategy=self.snippet_strategy, config=self.extraction)
        return self._case_result(candidate, form, rule_token, snippets, now_year)

    async def _enrich_all(self, top: List[Candidate], form: SearchForm, rule_token: str,
                          now_year: int) -> List[CaseResult]:
        """Enrich concurrently; results come back in ranking order.

        Whatever is still running when the budget runs out is cancelled and
        gets the placeholder snippet instead.
        """
        tasks = [asyncio.create_task(self._enrich(c, form, rule_token, now_year)) for c in top]
        done, pending = await asyncio.wait(tasks, timeout=self.enrichment_budget)
        if pending:
            logger.warning(
                f"Enrichment budget of {self.enrichment_budget}s exceeded; "
                f"cancelling {len(pending)} of {len(tasks)} lookups")
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        results = []
        for candidate, task in zip(top, tasks):
            if task in done and not task.cancelled() and task.exception() is None:
                results.append(task.result())
            else:
                if task in done and not task.cancelled():
                    logger.error(f"Enrichment failed for {candidate.url}: {task.exception()}")
                results.append(self._case_result(
                    candidate, form, rule_token, unable_to_extract(), now_year))
        return results

    # -----------------------------------------------------------
    # RUN
    # -----------------------------------------------------------

    async def run(self, form: SearchForm, now_year: Optional[int] = None) -> SearchResults:
        now_year = now_year or current_year()
        rule_token = normalize_rule_token(form.rule)
        logger.info(
            f"Evidence search: rule={rule_token} court={form.court_id} "
            f"window={form.time_window_years}y")

        case_law, commentary, rule_text, opinions = await self._query_providers(form, rule_token, now_year)

        exa_candidates = candidates_from_exa(case_law, now_year)
        cl_candidates = candidates_from_courtlistener(
            opinions, self.courtlistener.absolute_url, now_year)
        candidates = dedupe_candidates(exa_candidates + cl_candidates)

        debug = None
        if self.include_debug:
            debug = SearchDebug(
                exa_count=len(exa_candidates),
                courtlistener_count=len(cl_candidates),
                merged_count=len(candidates),
            )
        logger.info(
            f"Candidates: exa={len(exa_candidates)} courtlistener={len(cl_candidates)} "
            f"merged={len(candidates)}")

        if not candidates:
            return no_results(rule_token, now_year, debug)

        filtered = filter_by_time_window(candidates, form.time_window_years, now_year)
        ranked = rank_candidates(filtered, form, rule_token, self.ranking, now_year)
        top = ranked[:self.max_results]
        if not top:
            logger.info("No candidates left after time window and authority filters")
            return no_results(rule_token, now_year, debug)

        case_results = await self._enrich_all(top, form, rule_token, now_year)
        best_fit = case_results[0]
        why_fits = build_why_fits(best_fit, form, rule_token, context_from_results(commentary))

        logger.info(f"Returning {len(case_results)} cases; best fit {best_fit.id}")
        return SearchResults(
            best_fit=best_fit,
            cases=case_results,
            why_fits=why_fits,
            rule_explainer=self._rule_explainer(form, rule_text),
            debug=debug,
        )


async def run_search_pipeline(form: SearchForm) -> SearchResults:
    return await EvidenceSearchPipeline().run(form)
