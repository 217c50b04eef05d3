"""
Strip site chrome from text pulled out of opinion pages.

CourtListener pages carry note/summary widgets and Cornell LII pages carry
navigation; both leak into extracted text and highlights.
"""

import re
import warnings
from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, ParserRejectedMarkup

warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)

TAG_RE = re.compile(r'<[A-Za-z/!][^<>]*>')

# Applied to the raw text before it is split into lines
INLINE_PATTERNS = [
    re.compile(r'###\s*Your Notes\s*\(?\s*edit\s*\)?\s*\(?\s*none\s*\)?\s*###\s*Summaries\s*\(\d+\)', re.I),
    re.compile(r'###\s*Your Notes[^#]*', re.I),
    re.compile(r'###\s*Summaries\s*\(\d+\)', re.I),
    re.compile(r'\(\s*edit\s*\)', re.I),
    re.compile(r'\(\s*none\s*\)', re.I),
    re.compile(r'###\s*[A-Z][^#\n]*$', re.M),
    re.compile(r'```'),
]

# A line matching any of these is dropped entirely
UNWANTED_LINE_PATTERNS = [
    re.compile(r'please help us improve', re.I),
    re.compile(r'skip to main content', re.I),
    re.compile(r'search cornell', re.I),
    re.compile(r'cornell law school', re.I),
    re.compile(r'legal information institute', re.I),
    re.compile(r'^\[[^\]]+\]$'),
    re.compile(r'^###\s*Your Notes', re.I),
    re.compile(r'^###\s*Summaries', re.I),
    re.compile(r'^\s*\(?\s*edit\s*\)?\s*$', re.I),
    re.compile(r'^\s*\(?\s*none\s*\)?\s*$', re.I),
]


def html_to_text(raw: str, separator: str = "\n\n") -> str:
    """Flatten an HTML opinion body, keeping block boundaries as blank lines."""
    if not raw or not TAG_RE.search(raw):
        return raw or ""
    try:
        soup = BeautifulSoup(raw, "html.parser")
    except ParserRejectedMarkup:
        # Broken declarations such as "<![(>" are dropped rather than parsed
        return TAG_RE.sub(" ", raw)
    return soup.get_text(separator)


def _strip_tags(text: str) -> str:
    while TAG_RE.search(text):
        try:
            text = BeautifulSoup(text, "html.parser").get_text(" ")
        except ParserRejectedMarkup:
            # The regex pass below still removes every tag-shaped span
            text = TAG_RE.sub(" ", text)
            continue
        text = TAG_RE.sub(" ", text)
    return text


def _clean_once(text: str) -> str:
    text = _strip_tags(text)
    for pattern in INLINE_PATTERNS:
        text = pattern.sub("", text)

    lines = [line.strip() for line in text.split("\n")]
    kept = [
        line for line in lines
        if line and not any(p.search(line) for p in UNWANTED_LINE_PATTERNS)
    ]
    return re.sub(r'\s+', ' ', " ".join(kept)).strip()


def clean_extracted_text(raw: str) -> str:
    """Remove navigation cruft and collapse whitespace.

    Each pass can expose a new match (e.g. "( ed(edit)it )"), so passes
    repeat until the text stops changing. Every pass either shortens the text
    or leaves it unchanged, so the loop terminates.
    """
    if not raw:
        return ""
    text = raw
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned
