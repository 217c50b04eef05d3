"""Internal records the evidence finder pipeline passes between its stages."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Candidate:
    """A retrieved opinion before ranking and enrichment."""
    id: str
    name: str
    url: str
    year: int
    court_id: Optional[str] = None
    court_label: str = "CourtListener"
    source: str = "exa"
    summary_text: Optional[str] = None


@dataclass
class SecondaryContext:
    """Doctrinal phrases pulled from commentary pages, never shown as cases."""
    phrases: List[str] = field(default_factory=list)
