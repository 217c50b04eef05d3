from typing import Any, Dict, Iterable, List, Optional

from common.models import CaseResult, SearchForm
from agents.evidence_finder.models import SecondaryContext
from agents.evidence_finder.snippets import split_sentences

MAX_BULLETS = 4
PATTERN_MIN_CHARS = 60
PATTERN_MAX_CHARS = 260
PHRASE_MIN_CHARS = 40

RULE_FRAMING = {
    "403": " by balancing probative value against unfair prejudice",
    "404": " regarding character evidence and prior bad acts",
    "702": " in evaluating expert testimony and scientific evidence",
    "801": " in determining hearsay admissibility",
}

# (concept, fact-pattern needles)
FACT_CONNECTIONS = [
    ("graphic or disturbing images", ("photo", "graphic")),
    ("offered stipulations", ("stipulation", "stipulated")),
    ("expert testimony", ("expert",)),
    ("hearsay statements", ("hearsay",)),
]

SNIPPET_FRAMES = ("The court's application", "Its reasoning", "A limiting principle")


def context_from_results(results: Iterable[Dict[str, Any]]) -> Optional[SecondaryContext]:
    """First sentence of each commentary result, when it says something."""
    phrases = []
    for r in results or []:
        text = r.get("text") or " ".join(r.get("highlights") or [])
        if not text:
            continue
        sentences = split_sentences(" ".join(text.split()))
        first = sentences[0].strip() if sentences else ""
        if len(first) > PHRASE_MIN_CHARS:
            phrases.append(first)
    return SecondaryContext(phrases=phrases) if phrases else None


def build_why_fits(best: CaseResult, form: SearchForm, rule_token: str,
                   context: Optional[SecondaryContext] = None) -> List[str]:
    """Short narrative for why the best-fit case matches the user's facts."""
    fact_lower = form.fact_pattern.lower()
    bullets = []

    summary = f"This {best.court_label or 'court'} decision from {best.year} applies Rule {rule_token}"
    summary += RULE_FRAMING.get(rule_token, "")
    summary += " to a fact pattern similar to yours."

    connections = [concept for concept, needles in FACT_CONNECTIONS
                   if any(n in fact_lower for n in needles)]
    if connections:
        summary += (f" The case addresses {' and '.join(connections)}, "
                    "key elements that match your situation.")
    bullets.append(summary)

    unique_texts = list(dict.fromkeys(s.text for s in best.snippets))
    parts = [f'{frame}: "{text}"' for frame, text in zip(SNIPPET_FRAMES, unique_texts)]
    if parts:
        bullets.append(" ".join(parts))

    if context and context.phrases:
        pattern = next((p for p in context.phrases
                        if PATTERN_MIN_CHARS < len(p) < PATTERN_MAX_CHARS), None)
        if pattern:
            bullets.append(
                f"Courts commonly emphasize in similar opinions that {pattern}")

    return bullets[:MAX_BULLETS]
