import re
import unicodedata
from datetime import date
from typing import Optional

YEAR_RE = re.compile(r'\b(?:19|20)\d{2}\b')

# Canonical rule tokens, checked in order
RULE_TOKENS = [
    ("403", ("403",)),
    ("404", ("404",)),
    ("401", ("401",)),
    ("402", ("402",)),
    ("702", ("702",)),
    ("801", ("801", "807", "hearsay")),
]


def normalize_text(text: str) -> str:
    text = unicodedata.normalize("NFKC", text).strip()
    return text


def current_year() -> int:
    return date.today().year


def normalize_rule_token(rule: str) -> str:
    """Map a rule selection like "FRE 404(b)" to its canonical token ("404")."""
    lower = (rule or "").lower()
    for token, needles in RULE_TOKENS:
        if any(n in lower for n in needles):
            return token
    return rule


def parse_year_from_date(value: Optional[str]) -> Optional[int]:
    """Year from an ISO-ish date string ("2018-03-15" -> 2018)."""
    if not value:
        return None
    head = str(value).strip()[:4]
    return int(head) if head.isdigit() else None


def parse_year_from_text(text: Optional[str]) -> Optional[int]:
    """First 19xx/20xx token in free text."""
    if not text:
        return None
    m = YEAR_RE.search(text)
    return int(m.group(0)) if m else None


def _with_year(d: date, year: int) -> date:
    try:
        return d.replace(year=year)
    except ValueError:
        # Feb 29 in a non-leap year
        return d.replace(year=year, day=28)


def reference_date(now_year: Optional[int] = None) -> date:
    """Today's month and day, moved into `now_year` when one is given."""
    today = date.today()
    if now_year is None or now_year == today.year:
        return today
    return _with_year(today, now_year)


def iso_date_years_ago(years: int, today: Optional[date] = None) -> str:
    """ISO date `years` before today, clamping Feb 29 to Feb 28."""
    today = today or date.today()
    return _with_year(today, today.year - years).isoformat()
