"""
Score-based ranking of candidates against a query.

Every contribution is independent and additive; the weights come from a
RankingConfig so they can be tuned or pinned in tests without touching the
ranking logic.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from common.models import SearchForm
from agents.evidence_finder.authority import classify_authority
from agents.evidence_finder.models import Candidate
from agents.evidence_finder.utils import current_year

DEFAULT_KEYWORD_WEIGHTS = {
    "unfair prejudice": 3.0,
    "daubert": 3.0,
    "photo": 2.0,
    "stipulation": 2.0,
    "probative": 2.0,
    "hearsay": 2.0,
    "prior bad act": 2.0,
    "expert": 1.0,
}

DEFAULT_DOMAIN_PHRASES = (
    "rule of evidence",
    "rules of evidence",
    "admissib",
    "motion in limine",
)


@dataclass(frozen=True)
class RankingConfig:
    rule_match: float = 3.0
    domain_phrase: float = 1.0
    jurisdiction_match: float = 4.0
    binding_preference: float = 2.0
    in_window: float = 2.0
    out_of_window: float = -1.0
    published: float = 1.0
    published_source: str = "courtlistener"
    keyword_weights: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_KEYWORD_WEIGHTS))
    domain_phrases: Tuple[str, ...] = DEFAULT_DOMAIN_PHRASES
    # Keep the provider's order; binding pin and persuasive filter still apply
    trust_provider_order: bool = False

    @classmethod
    def from_mode(cls, mode: str, **overrides) -> "RankingConfig":
        return cls(trust_provider_order=(mode or "").lower() == "provider", **overrides)


def candidate_text(candidate: Candidate) -> str:
    return f"{candidate.name} {candidate.summary_text or ''}".lower()


def score_candidate(candidate: Candidate, form: SearchForm, rule_token: str,
                    config: Optional[RankingConfig] = None, now_year: Optional[int] = None) -> float:
    config = config or RankingConfig()
    now_year = now_year or current_year()
    text = candidate_text(candidate)
    fact_lower = form.fact_pattern.lower()
    score = 0.0

    if rule_token and rule_token.lower() in text:
        score += config.rule_match
    if any(p in text for p in config.domain_phrases):
        score += config.domain_phrase

    court_id = (candidate.court_id or "").lower()
    if court_id and court_id == form.court_id.strip().lower():
        score += config.jurisdiction_match
        if form.prefer_binding:
            score += config.binding_preference

    age = max(now_year - candidate.year, 0)
    if age <= form.time_window_years:
        score += config.in_window + 1.0 / (1 + age)
    else:
        score += config.out_of_window

    if form.only_published and candidate.source == config.published_source:
        score += config.published

    for keyword, weight in config.keyword_weights.items():
        k = keyword.lower()
        if k in text and k in fact_lower:
            score += weight

    return score


def rank_candidates(candidates: Sequence[Candidate], form: SearchForm, rule_token: str,
                    config: Optional[RankingConfig] = None, now_year: Optional[int] = None) -> List[Candidate]:
    """Order candidates best-first.

    Ties keep their input order. With prefer_binding, the best binding
    candidate is pinned first whatever its score. Persuasive candidates are
    dropped when include_persuasive is off.
    """
    config = config or RankingConfig()
    now_year = now_year or current_year()

    if config.trust_provider_order:
        ordered = list(candidates)
    else:
        scored = [(score_candidate(c, form, rule_token, config, now_year), c) for c in candidates]
        # sorted() is stable, so equal scores keep provider order
        ordered = [c for _, c in sorted(scored, key=lambda pair: pair[0], reverse=True)]

    authority = {id(c): classify_authority(c, form, now_year) for c in ordered}

    ranked: List[Candidate] = []
    if form.prefer_binding:
        pinned = next((c for c in ordered if authority[id(c)] == "binding"), None)
        if pinned is not None:
            ranked.append(pinned)

    for c in ordered:
        if any(c is r for r in ranked):
            continue
        if not form.include_persuasive and authority[id(c)] == "persuasive":
            continue
        ranked.append(c)
    return ranked
