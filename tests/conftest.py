# tests/conftest.py
"""Shared fakes: scripted providers and a zero-delay translation stack."""

from typing import Dict, List, Optional

import pytest

from core.exceptions import ProviderError
from services.translation.batch import BatchTranslator
from services.translation.cache import TranslationCache
from services.translation.client import TranslationClient
from services.translation.dom_translator import DomTranslator
from services.translation.rate_limiter import RateLimiter

PHRASES = {
    "Hello World": "Привет мир",
    "This is a test paragraph with more than twenty characters.": (
        "Это тестовый абзац длиной более двадцати символов."
    ),
    "Hello": "Привет",
    "Sunny": "Солнечно",
    "Read the docs": "Читайте документацию",
    "A cat on a mat": "Кошка на коврике",
    "Call": "Вызовите",
}


class DictionaryProvider:
    """Replaces every known phrase in the payload (longest first); records calls."""

    def __init__(self, phrases: Optional[Dict[str, str]] = None, name: str = "fake"):
        self.name = name
        self.phrases = dict(PHRASES if phrases is None else phrases)
        self.calls: List[str] = []

    async def translate(self, text: str, source: str, target: str) -> str:
        self.calls.append(text)
        out = text
        for src in sorted(self.phrases, key=len, reverse=True):
            out = out.replace(src, self.phrases[src])
        return out


class FailingProvider:
    def __init__(self, name: str = "broken"):
        self.name = name
        self.calls = 0

    async def translate(self, text: str, source: str, target: str) -> str:
        self.calls += 1
        raise ProviderError(self.name, "simulated outage")


def make_client(providers, attempts: int = 2, cache: Optional[TranslationCache] = None) -> TranslationClient:
    return TranslationClient(
        providers,
        cache if cache is not None else TranslationCache(max_size=100),
        RateLimiter(concurrency=2, min_interval=0.0),
        attempts=attempts,
        retry_delays=(),
        retry_jitter=0.0,
    )


@pytest.fixture
def provider() -> DictionaryProvider:
    return DictionaryProvider()


@pytest.fixture
def client(provider) -> TranslationClient:
    return make_client([provider])


@pytest.fixture
def dom_translator(client) -> DomTranslator:
    return DomTranslator(BatchTranslator(client, max_chars=1700))
