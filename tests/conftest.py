"""Shared pytest fixtures and provider fakes for the evidence finder tests."""
from __future__ import annotations

import asyncio
import os

import pytest

os.environ.setdefault("LOG_DIR", "./logs/")

from agents.evidence_finder.models import Candidate
from common.courtlistener_api import CourtListenerAPI
from common.models import SearchForm

NOW_YEAR = 2024


def make_candidate(
    cid: str = "c-1",
    name: str = "United States v. Example",
    url: str | None = None,
    year: int = 2020,
    court_id: str | None = None,
    court_label: str = "CourtListener",
    source: str = "exa",
    summary_text: str | None = None,
) -> Candidate:
    return Candidate(
        id=cid,
        name=name,
        url=url or f"https://www.courtlistener.com/opinion/{cid}/example/",
        year=year,
        court_id=court_id,
        court_label=court_label,
        source=source,
        summary_text=summary_text,
    )


def make_form(**overrides) -> SearchForm:
    values = dict(
        rule="FRE 403",
        court_id="ca9",
        fact_pattern="Prosecution wants to admit graphic photos of the victim despite a stipulation.",
        prefer_binding=True,
        include_persuasive=True,
        only_published=False,
        time_window_years=10,
    )
    values.update(overrides)
    return SearchForm(**values)


def run(coro):
    return asyncio.run(coro)


class FakeExa:
    """Exa stand-in: search results keyed by domain, contents keyed by url."""

    supports_highlights = True

    def __init__(self, by_domain=None, contents_by_url=None, fail_domains=(), delay_urls=()):
        self.by_domain = by_domain or {}
        self.contents_by_url = contents_by_url or {}
        self.fail_domains = set(fail_domains)
        self.delay_urls = set(delay_urls)
        self.search_calls = []
        self.contents_calls = []

    async def search(self, query, num_results=10, include_domains=None, exclude_domains=None,
                     text=True, highlights=None):
        domain = (include_domains or [""])[0]
        self.search_calls.append({"query": query, "domain": domain, "num_results": num_results})
        if domain in self.fail_domains:
            raise RuntimeError(f"{domain} unavailable")
        return list(self.by_domain.get(domain, []))

    async def contents(self, urls, text=True, highlights=None):
        self.contents_calls.append({"urls": urls, "text": text, "highlights": highlights})
        url = urls[0]
        if url in self.delay_urls:
            await asyncio.sleep(5)
        doc = self.contents_by_url.get(url)
        return [doc] if doc else []


class FakeFullTextExa(FakeExa):
    supports_highlights = False


class FakeCourtListener:
    base_url = "https://www.courtlistener.com"

    def __init__(self, results=None, fail=False):
        self._client = CourtListenerAPI(api_token="", base_url=self.base_url)
        self.results = results or []
        self.fail = fail
        self.calls = []

    async def search_opinions(self, query, court_id=None, date_min=None, only_published=False,
                              page_size=25):
        self.calls.append({
            "query": query,
            "court_id": court_id,
            "date_min": date_min,
            "only_published": only_published,
            "page_size": page_size,
        })
        if self.fail:
            raise RuntimeError("courtlistener unavailable")
        return list(self.results)

    def absolute_url(self, path):
        return self._client.absolute_url(path)


@pytest.fixture()
def form() -> SearchForm:
    return make_form()


@pytest.fixture()
def binding_candidate() -> Candidate:
    return make_candidate("bind", court_id="ca9", court_label="9th Cir.", year=2019)


@pytest.fixture()
def district_candidate() -> Candidate:
    return make_candidate("dist", court_id="cand", court_label="N.D. Cal.", year=2019)


@pytest.fixture()
def persuasive_candidate() -> Candidate:
    return make_candidate("pers", court_id="ca2", court_label="2d Cir.", year=2019)
