# services/translation/client.py
"""
Best-effort translation of short texts.

``TranslationClient.translate_short`` never raises.  It consults the cache,
then walks the provider chain (each provider gets a few rate-limited,
backed-off attempts) and, if every provider fails, hands back the original
text.  Untranslated text is an acceptable degraded result; a broken page
is not.
"""

from typing import List, Optional, Sequence

from loguru import logger
from prometheus_client import Counter
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
    wait_none,
    wait_random,
)

from core.exceptions import ProviderError
from .cache import TranslationCache
from .classifier import looks_english
from .providers import TranslationProvider
from .rate_limiter import RateLimiter
from .token_protector import protect, restore

TRANSLATION_DEGRADED = Counter(
    "translation_degraded_total", "Texts returned untranslated after every provider failed"
)

# Chunks are cut at the last space after this offset, so a chunk never
# shrinks to a sliver just to land on a word boundary.
MIN_CHUNK_BREAK = 220


def split_text(text: str, max_len: int = 480) -> List[str]:
    """Cut ``text`` into chunks of at most ``max_len`` characters."""
    s = text or ""
    if len(s) <= max_len:
        return [s]

    parts: List[str] = []
    i = 0
    while i < len(s):
        end = min(i + max_len, len(s))
        if end < len(s):
            last_space = s.rfind(" ", i, end)
            if last_space - i > MIN_CHUNK_BREAK:
                end = last_space
        parts.append(s[i:end])
        i = end
    return parts


class TranslationClient:
    def __init__(
        self,
        providers: Sequence[TranslationProvider],
        cache: TranslationCache,
        limiter: RateLimiter,
        source: str = "en",
        target: str = "ru",
        attempts: int = 3,
        retry_delays: Sequence[float] = (0.3, 0.8, 1.5),
        retry_jitter: float = 0.25,
        long_text_chunk: int = 480,
    ):
        self.providers = list(providers)
        self.cache = cache
        self.limiter = limiter
        self.source = source
        self.target = target
        self.attempts = max(1, attempts)
        self.retry_delays = tuple(retry_delays)
        self.retry_jitter = max(0.0, retry_jitter)
        self.long_text_chunk = long_text_chunk

    @property
    def max_query_chars(self) -> Optional[int]:
        """Largest single request every provider in the chain accepts, if any limit is known."""
        limits = [n for n in (getattr(p, "max_query_chars", None) for p in self.providers) if n]
        return min(limits) if limits else None

    # ------------------------------------------------------------------
    # Provider chain
    # ------------------------------------------------------------------
    def _retrying(self) -> AsyncRetrying:
        if self.retry_delays:
            wait = wait_chain(*[wait_fixed(d) for d in self.retry_delays])
        else:
            wait = wait_none()
        if self.retry_jitter:
            wait = wait + wait_random(0, self.retry_jitter)
        return AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait,
            retry=retry_if_exception_type(ProviderError),
            before_sleep=lambda state: logger.debug(
                f"Provider attempt {state.attempt_number}/{self.attempts} failed: "
                f"{state.outcome.exception()}"
            ),
            reraise=True,
        )

    async def _call_provider(
        self, provider: TranslationProvider, text: str, source: str, target: str
    ) -> str:
        translated = ""
        async for attempt in self._retrying():
            with attempt:
                translated = await self.limiter.schedule(
                    lambda: provider.translate(text, source, target)
                )
        return translated

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def translate_short(
        self, text: str, source: Optional[str] = None, target: Optional[str] = None
    ) -> str:
        clean = (text or "").strip()
        if not clean:
            return ""

        source = source or self.source
        target = target or self.target
        key = TranslationCache.make_key(source, target, clean)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        result = clean
        for provider in self.providers:
            try:
                result = await self._call_provider(provider, clean, source, target)
                break
            except Exception as exc:
                logger.warning(f"Provider {provider.name} gave up after {self.attempts} attempts: {exc}")
        else:
            TRANSLATION_DEGRADED.inc()
            logger.info(f"Returning untranslated text ({len(clean)} chars)")

        self.cache.put(key, result)
        return result

    async def translate_long(
        self, text: str, source: Optional[str] = None, target: Optional[str] = None
    ) -> str:
        limit = self.max_query_chars
        size = min(self.long_text_chunk, limit) if limit else self.long_text_chunk
        chunks = split_text((text or "").strip(), size)
        out: List[str] = []
        for chunk in chunks:
            translated = await self.translate_short(chunk, source, target)
            if translated:
                out.append(translated)
        return " ".join(out)

    async def translate_text(
        self, text: str, source: Optional[str] = None, target: Optional[str] = None
    ) -> str:
        """Single-segment path: protect code tokens, translate, restore."""
        t = (text or "").strip()
        if not t:
            return t
        if (source or self.source) == "en" and not looks_english(t):
            return t

        masked, replacements = protect(t)
        translated = await self.translate_long(masked, source, target)
        return restore(translated, replacements)
