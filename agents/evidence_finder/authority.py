from typing import List, Optional

from common.models import CaseAuthority, SearchForm
from agents.evidence_finder.models import Candidate
from agents.evidence_finder.utils import current_year

# CourtListener ids for trial courts end in "d" (cand, nysd, dcd, ...)
DISTRICT_MARKER = "d"
OLDER_AFTER_YEARS = 20

# (tag, fact-pattern needles)
FACT_TAGS = [
    ("graphic photos", ("photo", "graphic")),
    ("stipulation", ("stipulation", "stipulated")),
    ("expert testimony", ("expert",)),
    ("hearsay", ("hearsay",)),
]


def classify_authority(candidate: Candidate, form: SearchForm, now_year: Optional[int] = None) -> CaseAuthority:
    """Precedential weight of a candidate relative to the querying court."""
    now_year = now_year or current_year()
    court_id = (candidate.court_id or "").strip().lower()
    if court_id and court_id == form.court_id.strip().lower():
        return "binding"
    if court_id.endswith(DISTRICT_MARKER):
        return "district"
    if now_year - candidate.year > OLDER_AFTER_YEARS:
        return "older"
    return "persuasive"


def issue_tags_for(form: SearchForm, candidate: Candidate, rule_token: str) -> List[str]:
    """Keyword-derived labels shown beside a case."""
    tags = [f"Rule {rule_token}"]
    fact_lower = form.fact_pattern.lower()
    for tag, needles in FACT_TAGS:
        if any(n in fact_lower for n in needles):
            tags.append(tag)
    if "unfair prejudice" in candidate.name.lower() or "prejudice" in fact_lower:
        tags.append("unfair prejudice")
    return list(dict.fromkeys(tags))
