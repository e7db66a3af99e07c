# services/catalog/dictionary.py
"""Tiny EN⇄RU word dictionary backed by ``configs/dictionary.yaml``."""

import re
from enum import Enum
from typing import Dict, Optional

from services.catalog.config_loader import get_dictionary_entries


class Direction(str, Enum):
    EN_RU = "en-ru"
    RU_EN = "ru-en"


_LETTER_RE = re.compile(r"[A-Za-zА-Яа-яЁё]")


def preserve_case(source_word: str, translated: str) -> str:
    """Copy the casing pattern of ``source_word`` onto ``translated``.

    ``HELLO`` -> ``ПРИВЕТ``, ``Hello`` -> ``Привет``, anything else untouched.
    """
    if not translated or not source_word:
        return translated
    if source_word.upper() == source_word and _LETTER_RE.search(source_word):
        return translated.upper()
    first = source_word[0]
    if first.upper() == first and first.lower() != first:
        return translated[0].upper() + translated[1:]
    return translated


def build_reverse_map(entries: Dict[str, str]) -> Dict[str, str]:
    return {ru.lower(): en for en, ru in entries.items()}


class BilingualDictionary:
    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self.forward = {k.lower(): v for k, v in (entries if entries is not None else get_dictionary_entries()).items()}
        self.reverse = build_reverse_map(self.forward)

    def _table(self, direction: Direction) -> Dict[str, str]:
        return self.reverse if Direction(direction) is Direction.RU_EN else self.forward

    def translate_word(self, word: str, direction: Direction = Direction.EN_RU) -> Optional[str]:
        """Return the translation of a single word, or ``None`` when it is unknown."""
        w = (word or "").strip()
        if not w:
            return None
        found = self._table(direction).get(w.lower())
        return preserve_case(w, found) if found else None

    def translate_text(self, text: str, direction: Direction = Direction.EN_RU) -> str:
        """Replace every known whole word in ``text``; unknown words pass through."""
        if not text or not text.strip():
            return text
        table = self._table(direction)
        if not table:
            return text
        # longest keys first so multi-letter overlaps resolve to the longer word
        keys = sorted(table, key=len, reverse=True)
        pattern = re.compile(r"\b(" + "|".join(re.escape(k) for k in keys) + r")\b", re.IGNORECASE)

        def _sub(match: re.Match) -> str:
            found = table.get(match.group(0).lower())
            return preserve_case(match.group(0), found) if found else match.group(0)

        return pattern.sub(_sub, text)
