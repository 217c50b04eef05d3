from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Literal

CaseAuthority = Literal["binding", "persuasive", "district", "older"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True)


class SearchForm(_CamelModel):
    """Structured evidentiary question submitted by the user."""
    rule: str
    court_id: str
    fact_pattern: str
    prefer_binding: bool = True
    include_persuasive: bool = True
    only_published: bool = False
    time_window_years: int = Field(10, ge=0)


class CaseSnippet(_CamelModel):
    label: str
    text: str
    highlight: Optional[str] = None


class CaseResult(_CamelModel):
    id: str
    name: str
    court_label: str
    year: int
    authority: CaseAuthority
    issue_tags: List[str]
    url: Optional[str] = None
    snippets: List[CaseSnippet] = Field(min_length=1)


class RuleExplainer(_CamelModel):
    title: str
    text: str


class SearchDebug(_CamelModel):
    exa_count: int = 0
    courtlistener_count: int = 0
    merged_count: int = 0


class SearchResults(_CamelModel):
    best_fit: CaseResult
    cases: List[CaseResult]
    why_fits: List[str]
    rule_explainer: Optional[RuleExplainer] = None
    debug: Optional[SearchDebug] = None
