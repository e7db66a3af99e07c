# services/translation/classifier.py
"""
Cheap heuristics deciding whether a text fragment should be sent to a
translation provider at all.

These are best-effort filters, not guarantees: short or mixed-language
strings can be misclassified either way.  The thresholds below are kept as
named constants so they can be tuned without touching callers.
"""

import re
from dataclasses import dataclass

CYRILLIC_RE = re.compile(r"[А-Яа-яЁё]")
LATIN_RE = re.compile(r"[A-Za-z]")
CODE_MARKERS_RE = re.compile(r"[{};<>]|=>|::|->|===|!==")
WHITESPACE_RE = re.compile(r"\s+")

# A whitespace-free run this long is almost always an identifier, a URL or
# minified code rather than prose.
COMPACT_TOKEN_MIN_LEN = 20


def normalize(text: str) -> str:
    """Collapse runs of whitespace and trim."""
    return WHITESPACE_RE.sub(" ", text or "").strip()


def has_cyrillic(text: str) -> bool:
    return bool(CYRILLIC_RE.search(text or ""))


def looks_english(text: str) -> bool:
    t = (text or "").strip()
    if not t or has_cyrillic(t):
        return False
    return bool(LATIN_RE.search(t))


def looks_codey(text: str, strict: bool = False) -> bool:
    t = text or ""
    if CODE_MARKERS_RE.search(t):
        return True
    if strict:
        compact = WHITESPACE_RE.sub("", t)
        if len(compact) >= COMPACT_TOKEN_MIN_LEN and compact == t:
            return True
    return False


@dataclass(frozen=True)
class TextClassifier:
    """Bundles the predicates used to gate translation of a segment."""

    min_length: int = 3
    strict_code_check: bool = True

    def is_english(self, text: str) -> bool:
        return looks_english(text)

    def is_code(self, text: str) -> bool:
        return looks_codey(text, strict=self.strict_code_check)

    def needs_translation(self, text: str) -> bool:
        if not text or len(text) < self.min_length:
            return False
        if not self.is_english(text):
            return False
        return not self.is_code(text)
