"""
Quotable excerpts for a case.

Two strategies are supported. When the content provider can return
query-guided highlights, those are cleaned and used directly. Otherwise the
full opinion text is split into paragraphs that are scored against the
query, and one sentence in each chosen paragraph is marked as the highlight.

Paragraph and sentence splitting is a punctuation heuristic: abbreviations
and reporter citations ("F.3d", "U.S.") can split a sentence in the wrong
place. Both boundary regexes are configurable for that reason.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import nltk
from nltk.corpus import stopwords

from common.exa_api import highlight_spec
from common.logging import logger
from common.models import CaseSnippet, SearchForm
from agents.evidence_finder.models import Candidate
from agents.evidence_finder.text_cleaner import clean_extracted_text, html_to_text

RELEVANT_EXCERPT = "Relevant excerpt"
KEY_EXCERPT = "Key excerpt"
NO_EXCERPT_TEXT = "No excerpt available for this opinion."
UNABLE_TEXT = "Unable to extract an excerpt from this opinion."

LABEL_TEST = "The test"
LABEL_DISPOSITION = "Why admitted/excluded"
LABEL_LIMITING = "Limiting principle"
LABEL_KEY = "Key paragraph"

TEST_MARKERS = (
    "substantially outweigh", "the test", "standard", "permits exclusion",
    "may exclude", "must consider", "balancing", "requires that", "factors",
)
DISPOSITION_MARKERS = (
    "we hold", "we conclude", "did not abuse", "abused its discretion",
    "properly admitted", "properly excluded", "was admissible", "was inadmissible",
    "we affirm", "we reverse", "admitted", "excluded",
)
LIMITING_MARKERS = (
    "however", "unless", "only where", "only if", "especially where",
    "limiting instruction", "least prejudicial", "does not mean", "need not",
)

DEFAULT_DISPOSITIVE_PHRASES = {
    "we hold": 3.0,
    "we conclude": 3.0,
    "substantially outweigh": 3.0,
    "unfair prejudice": 2.0,
    "probative value": 2.0,
    "abuse of discretion": 1.0,
    "stipulat": 1.0,
}

# Download required NLTK data
try:
    nltk.data.find('corpora/stopwords')
except LookupError:
    nltk.download('stopwords', quiet=True)

# Words too common in evidence questions to say anything about the facts
LEGAL_STOPWORDS = {
    "would", "could", "also", "whether", "case", "court", "evidence", "rule",
    "trial", "wants", "want", "offered",
}

STOPWORDS = set(stopwords.words('english')) | LEGAL_STOPWORDS


@dataclass(frozen=True)
class ExtractionConfig:
    paragraph_split: str = r'\n\s*\n'
    sentence_split: str = r'(?<=[.?!])\s+(?=["“(\[]?[A-Z])'
    min_highlight_chars: int = 40
    min_paragraph_chars: int = 120
    max_snippets: int = 3
    summary_chars: int = 280
    sentence_min_chars: int = 40
    sentence_max_chars: int = 280
    highlight_sentences: int = 2
    dispositive_phrases: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_DISPOSITIVE_PHRASES))


def highlight_query(form: SearchForm, rule_token: str) -> str:
    return (
        f"Extract 1–2 sentences where the court applies FRE {rule_token} "
        f"to facts like: {form.fact_pattern}. "
        "Prefer application + reasoning; avoid rule recitations and procedural history."
    )


def unable_to_extract() -> List[CaseSnippet]:
    return [CaseSnippet(label="Summary", text=UNABLE_TEXT)]


def fact_keywords(fact_pattern: str) -> List[str]:
    words = re.findall(r"[a-z]{4,}", (fact_pattern or "").lower())
    return list(dict.fromkeys(w for w in words if w not in STOPWORDS))


# ---------------------------------------------------------------------------
# Highlight strategy
# ---------------------------------------------------------------------------

def summary_fallback(candidate: Candidate, config: Optional[ExtractionConfig] = None) -> List[CaseSnippet]:
    config = config or ExtractionConfig()
    fallback = clean_extracted_text(candidate.summary_text or "")
    if len(fallback) >= config.min_highlight_chars:
        if len(fallback) > config.summary_chars:
            fallback = fallback[:config.summary_chars].rstrip() + "…"
        return [CaseSnippet(label=KEY_EXCERPT, text=fallback, highlight=fallback)]
    return [CaseSnippet(label=KEY_EXCERPT, text=NO_EXCERPT_TEXT)]


def snippets_from_highlights(highlights: Sequence[str], candidate: Candidate,
                             config: Optional[ExtractionConfig] = None) -> List[CaseSnippet]:
    config = config or ExtractionConfig()
    cleaned = [clean_extracted_text(h or "") for h in highlights]
    kept = [h for h in cleaned if len(h) >= config.min_highlight_chars]
    if not kept:
        return summary_fallback(candidate, config)
    return [
        CaseSnippet(label=RELEVANT_EXCERPT, text=h, highlight=h)
        for h in kept[:config.max_snippets]
    ]


# ---------------------------------------------------------------------------
# Paragraph-scoring strategy
# ---------------------------------------------------------------------------

def split_paragraphs(text: str, config: Optional[ExtractionConfig] = None) -> List[str]:
    config = config or ExtractionConfig()
    paragraphs = []
    for block in re.split(config.paragraph_split, html_to_text(text)):
        cleaned = clean_extracted_text(block)
        if len(cleaned) >= config.min_paragraph_chars:
            paragraphs.append(cleaned)
    return paragraphs


def split_sentences(paragraph: str, config: Optional[ExtractionConfig] = None) -> List[str]:
    config = config or ExtractionConfig()
    return [s.strip() for s in re.split(config.sentence_split, paragraph) if s.strip()]


def score_paragraph(paragraph: str, rule_token: str, keywords: Sequence[str]) -> float:
    p = paragraph.lower()
    score = 0.0
    if rule_token and rule_token.lower() in p:
        score += 3.0
    has_probative = "probative" in p
    has_prejudice = "prejudic" in p
    if has_probative and has_prejudice:
        score += 3.0
    elif has_probative or has_prejudice:
        score += 1.0
    score += min(sum(1 for k in keywords if k in p), 5)
    return score


def score_sentence(sentence: str, rule_token: str, keywords: Sequence[str],
                   config: Optional[ExtractionConfig] = None) -> float:
    config = config or ExtractionConfig()
    s = sentence.lower()
    score = sum(w for phrase, w in config.dispositive_phrases.items() if phrase in s)
    if rule_token and rule_token.lower() in s:
        score += 1.0
    score += 0.5 * min(sum(1 for k in keywords if k in s), 4)
    if config.sentence_min_chars <= len(sentence) <= config.sentence_max_chars:
        score += 1.0
    else:
        score -= 1.0
    return score


def best_sentence(paragraph: str, rule_token: str, keywords: Sequence[str],
                  config: Optional[ExtractionConfig] = None) -> str:
    sentences = split_sentences(paragraph, config) or [paragraph]
    # max() keeps the earliest sentence on ties
    return max(sentences, key=lambda s: score_sentence(s, rule_token, keywords, config))


def label_paragraph(paragraph: str) -> str:
    p = paragraph.lower()
    if any(m in p for m in TEST_MARKERS):
        return LABEL_TEST
    if any(m in p for m in DISPOSITION_MARKERS):
        return LABEL_DISPOSITION
    if any(m in p for m in LIMITING_MARKERS):
        return LABEL_LIMITING
    return LABEL_KEY


def snippets_from_full_text(text: Optional[str], form: SearchForm, rule_token: str,
                            candidate: Candidate,
                            config: Optional[ExtractionConfig] = None) -> List[CaseSnippet]:
    config = config or ExtractionConfig()
    if not text or not text.strip():
        return unable_to_extract()

    paragraphs = split_paragraphs(text, config)
    if not paragraphs:
        return summary_fallback(candidate, config)

    keywords = fact_keywords(form.fact_pattern)
    scored: List[Tuple[float, str]] = [
        (score_paragraph(p, rule_token, keywords), p) for p in paragraphs]
    top = [p for _, p in sorted(scored, key=lambda pair: pair[0], reverse=True)][:config.max_snippets]

    return [
        CaseSnippet(label=label_paragraph(p), text=p,
                    highlight=best_sentence(p, rule_token, keywords, config))
        for p in top
    ]


# ---------------------------------------------------------------------------
# Provider-backed extraction
# ---------------------------------------------------------------------------

def resolve_strategy(provider: Any, strategy: str = "auto") -> str:
    strategy = (strategy or "auto").lower()
    if strategy in ("highlights", "paragraphs"):
        return strategy
    return "highlights" if getattr(provider, "supports_highlights", False) else "paragraphs"


async def extract_snippets(candidate: Candidate, form: SearchForm, rule_token: str, provider: Any,
                           strategy: str = "auto",
                           config: Optional[ExtractionConfig] = None) -> List[CaseSnippet]:
    """Fetch content for one candidate and turn it into 1-3 snippets. Never raises."""
    config = config or ExtractionConfig()
    strategy = resolve_strategy(provider, strategy)
    try:
        if strategy == "highlights":
            contents = await provider.contents(
                urls=[candidate.url],
                text=False,
                highlights=highlight_spec(
                    highlight_query(form, rule_token),
                    num_sentences=config.highlight_sentences,
                    per_url=config.max_snippets),
            )
            doc = contents[0] if contents else {}
            return snippets_from_highlights(doc.get("highlights") or [], candidate, config)

        contents = await provider.contents(urls=[candidate.url], text=True)
        doc = contents[0] if contents else {}
        return snippets_from_full_text(doc.get("text"), form, rule_token, candidate, config)
    except Exception as e:
        logger.error(f"Snippet extraction failed for {candidate.url}: {str(e)}")
        return unable_to_extract()
