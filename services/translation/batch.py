# services/translation/batch.py
"""
Batch many short segments into a few provider calls.

Segments are joined with a delimiter line, packed greedily under a character
budget and sent as one text per batch.  The provider must hand back exactly
as many delimiter-separated parts as were sent; when it does not (the
delimiter was translated, merged or dropped) the batch is retranslated one
segment at a time.
"""

import re
from dataclasses import dataclass, field
from typing import List, Sequence

from loguru import logger
from prometheus_client import Counter

from .client import TranslationClient
from .token_protector import Replacements, protect, restore

BATCH_CALLS = Counter("translation_batches_total", "Joined batches sent to the provider chain")
BATCH_FALLBACKS = Counter(
    "translation_batch_fallbacks_total", "Batches retranslated per segment after a part-count mismatch"
)

SEPARATOR_MARKER = "@@SEP@@"
SEPARATOR = f"\n{SEPARATOR_MARKER}\n"
_SPLIT_RE = re.compile(rf"\s*{re.escape(SEPARATOR_MARKER)}\s*")


def joined_length(texts: Sequence[str], separator: str = SEPARATOR) -> int:
    if not texts:
        return 0
    return sum(len(t) for t in texts) + len(separator) * (len(texts) - 1)


def pack_batches(texts: Sequence[str], budget: int, separator: str = SEPARATOR) -> List[List[str]]:
    """
    Greedily group ``texts`` so each group's joined length stays within
    ``budget``.  A text that alone exceeds the budget gets a group of its
    own.  Order is preserved and nothing is dropped.
    """
    batches: List[List[str]] = []
    current: List[str] = []
    current_len = 0

    for text in texts:
        added = len(text) if not current else len(separator) + len(text)
        if current and current_len + added > budget:
            batches.append(current)
            current, current_len = [], 0
            added = len(text)
        current.append(text)
        current_len += added

    if current:
        batches.append(current)
    return batches


def split_translated(text: str) -> List[str]:
    return [part.strip() for part in _SPLIT_RE.split(text or "")]


@dataclass
class PlannedBatch:
    """Masked segments of one provider call plus what is needed to unmask them."""

    masked: List[str]
    replacements: List[Replacements] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.masked)


class BatchTranslator:
    def __init__(self, client: TranslationClient, max_chars: int = 1700):
        self.client = client
        limit = client.max_query_chars
        self.max_chars = min(max_chars, limit) if limit else max_chars

    def plan(self, segments: Sequence[str]) -> List[PlannedBatch]:
        protected = [protect(s) for s in segments]
        masked = [m for m, _ in protected]

        planned: List[PlannedBatch] = []
        offset = 0
        for group in pack_batches(masked, self.max_chars):
            reps = [r for _, r in protected[offset : offset + len(group)]]
            planned.append(PlannedBatch(masked=list(group), replacements=reps))
            offset += len(group)
        return planned

    async def _one_by_one(self, batch: PlannedBatch) -> List[str]:
        return [await self.client.translate_long(m) for m in batch.masked]

    async def translate_planned(self, batch: PlannedBatch) -> List[str]:
        BATCH_CALLS.inc()
        if len(batch) == 1:
            parts = await self._one_by_one(batch)
        else:
            joined = SEPARATOR.join(batch.masked)
            translated = await self.client.translate_short(joined)
            parts = split_translated(translated)

            if translated == joined.strip():
                # The whole chain failed and handed the input back.
                BATCH_FALLBACKS.inc()
                logger.debug(f"Batch of {len(batch)} segments came back untranslated; retrying one by one")
                parts = await self._one_by_one(batch)
            elif len(parts) != len(batch):
                BATCH_FALLBACKS.inc()
                logger.debug(
                    f"Batch split mismatch ({len(parts)} parts for {len(batch)} segments); "
                    "translating segments one by one"
                )
                parts = await self._one_by_one(batch)

        return [restore(part, reps) for part, reps in zip(parts, batch.replacements)]

    async def translate_batch(self, segments: Sequence[str]) -> List[str]:
        out: List[str] = []
        for batch in self.plan(segments):
            out.extend(await self.translate_planned(batch))
        return out
