"""
Turn raw provider results into Candidate records, then dedupe and
time-filter them. Normalization never raises: missing fields degrade to
placeholders.
"""

import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from agents.evidence_finder.models import Candidate
from agents.evidence_finder.text_cleaner import clean_extracted_text
from agents.evidence_finder.utils import (
    current_year,
    normalize_text,
    parse_year_from_date,
    parse_year_from_text,
)

UNKNOWN_CASE_NAME = "Unknown case"
DEFAULT_COURT_LABEL = "CourtListener"

COURT_LABELS = {
    "scotus": "U.S.",
    "cadc": "D.C. Cir.",
    "cafc": "Fed. Cir.",
    "cand": "N.D. Cal.",
    "cacd": "C.D. Cal.",
    "casd": "S.D. Cal.",
    "caed": "E.D. Cal.",
    "nysd": "S.D.N.Y.",
    "nyed": "E.D.N.Y.",
    "nynd": "N.D.N.Y.",
    "nywd": "W.D.N.Y.",
    "dcd": "D.D.C.",
    "ilnd": "N.D. Ill.",
}
_ORDINALS = {1: "1st", 2: "2d", 3: "3d"}
COURT_LABELS.update({
    f"ca{n}": f"{_ORDINALS.get(n, f'{n}th')} Cir." for n in range(1, 12)
})

CIRCUIT_RE = re.compile(r'\b(\d{1,2})(?:st|nd|rd|d|th)\s+Cir\.')
# Longest labels first so "S.D.N.Y." is tried before any shorter overlap
_LABEL_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(re.escape(label).replace(r"\ ", r"\s*")), court_id)
    for court_id, label in sorted(COURT_LABELS.items(), key=lambda kv: -len(kv[1]))
    if court_id != "scotus" and not (court_id.startswith("ca") and court_id[2:].isdigit())
]
SUPREME_RE = re.compile(r'\b\d+\s+U\.\s?S\.\s+\d+')


def normalize_case_name(name: Optional[str]) -> str:
    return re.sub(r'\s+', ' ', normalize_text(name or "")) or UNKNOWN_CASE_NAME


def infer_court(text: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Best-effort (court_id, label) from a citation parenthetical."""
    if not text:
        return None, None
    m = CIRCUIT_RE.search(text)
    if m:
        n = int(m.group(1))
        if 1 <= n <= 11:
            return f"ca{n}", COURT_LABELS[f"ca{n}"]
    for pattern, court_id in _LABEL_PATTERNS:
        if pattern.search(text):
            return court_id, COURT_LABELS[court_id]
    if SUPREME_RE.search(text):
        return "scotus", COURT_LABELS["scotus"]
    return None, None


def candidates_from_exa(results: Iterable[Dict[str, Any]], now_year: Optional[int] = None) -> List[Candidate]:
    """Exa results restricted to CourtListener opinion pages.

    Exa has already ranked these semantically, so the order is kept.
    """
    now_year = now_year or current_year()
    candidates = []
    for r in results or []:
        url = r.get("url") or ""
        title = r.get("title")
        if not url or not title or "/opinion/" not in url:
            continue
        highlight_text = " ".join(h for h in (r.get("highlights") or []) if h)
        summary = highlight_text or r.get("text") or None
        year = (parse_year_from_date(r.get("publishedDate"))
                or parse_year_from_text(highlight_text)
                or parse_year_from_text(title)
                or parse_year_from_text(r.get("text"))
                or now_year)
        court_id, court_label = infer_court(f"{title} {summary or ''}")
        candidates.append(Candidate(
            id=f"exa-cl-{r.get('id') or url}",
            name=normalize_case_name(title),
            url=url,
            year=year,
            court_id=court_id,
            court_label=court_label or DEFAULT_COURT_LABEL,
            source="exa",
            summary_text=summary,
        ))
    return candidates


def candidates_from_courtlistener(results: Iterable[Dict[str, Any]], absolute_url: Callable[[str], str],
                                  now_year: Optional[int] = None) -> List[Candidate]:
    """CourtListener search hits; `absolute_url` resolves their relative opinion paths."""
    now_year = now_year or current_year()
    candidates = []
    for r in results or []:
        path = r.get("absolute_url") or ""
        if not path:
            continue
        url = absolute_url(path)
        name = normalize_case_name(r.get("caseName") or r.get("case_name"))
        snippet = _opinion_snippet(r)
        court_id = r.get("court_id") or None
        court_label = COURT_LABELS.get(court_id or "") or r.get("court") or DEFAULT_COURT_LABEL
        year = (parse_year_from_date(r.get("dateFiled") or r.get("date_filed"))
                or parse_year_from_text(name)
                or parse_year_from_text(snippet)
                or now_year)
        candidates.append(Candidate(
            id=f"cl-{r.get('cluster_id') or r.get('id') or path}",
            name=name,
            url=url,
            year=year,
            court_id=court_id,
            court_label=court_label,
            source="courtlistener",
            summary_text=snippet,
        ))
    return candidates


def _opinion_snippet(result: Dict[str, Any]) -> Optional[str]:
    snippet = result.get("snippet")
    if not snippet:
        opinions = result.get("opinions") or []
        snippet = next((o.get("snippet") for o in opinions if o.get("snippet")), None)
    if not snippet:
        return None
    return clean_extracted_text(snippet) or None


def dedupe_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    """Keep the first candidate per case-insensitive url, in input order."""
    seen = set()
    unique = []
    for c in candidates:
        key = c.url.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(c)
    return unique


def filter_by_time_window(candidates: Iterable[Candidate], time_window_years: int,
                          now_year: Optional[int] = None) -> List[Candidate]:
    """Drop candidates older than the window; the boundary year is kept."""
    now_year = now_year or current_year()
    return [c for c in candidates if now_year - c.year <= time_window_years]
