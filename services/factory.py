# services/factory.py
"""Wires the shared per-application services from ``Settings``."""

from dataclasses import dataclass

import httpx

from core.config import Settings
from services.catalog.dictionary import BilingualDictionary
from services.extraction.content_extractor import ExtractionLimits
from services.fetcher.page_fetcher import PageFetcher
from services.orchestrator import TranslateUrlOrchestrator
from services.translation.batch import BatchTranslator
from services.translation.cache import TranslationCache
from services.translation.classifier import TextClassifier
from services.translation.client import TranslationClient
from services.translation.dom_translator import DomTranslator
from services.translation.providers import build_providers
from services.translation.rate_limiter import RateLimiter
from services.weather.weather_service import WeatherService


@dataclass
class TranslatorServices:
    http_client: httpx.AsyncClient
    cache: TranslationCache
    limiter: RateLimiter
    translation_client: TranslationClient
    fetcher: PageFetcher
    orchestrator: TranslateUrlOrchestrator
    weather: WeatherService
    dictionary: BilingualDictionary

    async def aclose(self) -> None:
        await self.http_client.aclose()


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": settings.DEFAULT_USER_AGENT},
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
        timeout=settings.FETCH_TIMEOUT,
    )


def build_services(settings: Settings, http_client: httpx.AsyncClient | None = None) -> TranslatorServices:
    http_client = http_client or build_http_client(settings)

    cache = TranslationCache(max_size=settings.TRANSLATION_CACHE_SIZE)
    limiter = RateLimiter(
        concurrency=settings.TRANSLATION_CONCURRENCY,
        min_interval=settings.TRANSLATION_MIN_INTERVAL,
    )
    client = TranslationClient(
        build_providers(settings, http_client),
        cache,
        limiter,
        source=settings.SOURCE_LANG,
        target=settings.TARGET_LANG,
        attempts=settings.PROVIDER_ATTEMPTS,
        retry_delays=settings.PROVIDER_RETRY_DELAYS,
        retry_jitter=settings.PROVIDER_RETRY_JITTER,
        long_text_chunk=settings.LONG_TEXT_CHUNK,
    )
    dom_translator = DomTranslator(
        BatchTranslator(client, max_chars=settings.BATCH_MAX_CHARS),
        classifier=TextClassifier(min_length=settings.MIN_SEGMENT_CHARS),
        max_segments=settings.MAX_SEGMENTS,
        skip_interactive=settings.TRANSLATE_SKIP_INTERACTIVE,
    )
    fetcher = PageFetcher(
        http_client,
        user_agent=settings.DEFAULT_USER_AGENT,
        accept_language=settings.ACCEPT_LANGUAGE,
        timeout=settings.FETCH_TIMEOUT,
        max_bytes=settings.FETCH_MAX_BYTES,
        image_timeout=settings.IMAGE_TIMEOUT,
        image_max_bytes=settings.IMAGE_MAX_BYTES,
    )
    limits = ExtractionLimits(
        max_elements=settings.EXTRACT_MAX_ELEMENTS,
        max_chars=settings.EXTRACT_MAX_CHARS,
        wiki_max_elements=settings.EXTRACT_WIKI_MAX_ELEMENTS,
        wiki_max_chars=settings.EXTRACT_WIKI_MAX_CHARS,
        min_html=settings.EXTRACT_MIN_HTML,
    )
    orchestrator = TranslateUrlOrchestrator(
        fetcher,
        dom_translator,
        client,
        time_budget=settings.TRANSLATE_BUDGET_SECONDS,
        limits=limits,
    )
    weather = WeatherService(
        http_client,
        translator=client,
        base_url=settings.WEATHER_URL,
        timeout=settings.WEATHER_TIMEOUT,
        forecast_days=settings.WEATHER_FORECAST_DAYS,
        user_agent=settings.DEFAULT_USER_AGENT,
    )
    return TranslatorServices(
        http_client=http_client,
        cache=cache,
        limiter=limiter,
        translation_client=client,
        fetcher=fetcher,
        orchestrator=orchestrator,
        weather=weather,
        dictionary=BilingualDictionary(),
    )
