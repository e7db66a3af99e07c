# services/translation/providers.py
"""
Translation provider adapters.

Every provider exposes the same tiny surface::

    name: str
    async translate(text, source, target) -> str

and raises ``ProviderError`` for anything that is not a usable translation
(network error, timeout, non-2xx status, a failure status inside the
payload, or an empty result).  ``build_providers`` returns them in the
order the client should try them.
"""

import html
from typing import Any, Dict, List, Optional, Protocol

import httpx
from loguru import logger
from prometheus_client import Counter

from core.config import Settings
from core.exceptions import ProviderError

PROVIDER_CALLS = Counter("translation_provider_calls_total", "Provider calls", ["provider"])
PROVIDER_ERRORS = Counter("translation_provider_errors_total", "Failed provider calls", ["provider"])

QUOTA_WARNING_PREFIX = "MYMEMORY WARNING"
# MyMemory rejects a `q` longer than 500 bytes.
MYMEMORY_MAX_QUERY_CHARS = 480
LIBRETRANSLATE_MAX_QUERY_CHARS = 5000


class TranslationProvider(Protocol):
    name: str
    max_query_chars: int

    async def translate(self, text: str, source: str, target: str) -> str: ...


def _decode_json(provider: str, response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError as exc:
        raise ProviderError(provider, "response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise ProviderError(provider, f"unexpected response schema: {data!r}")
    return data


class MyMemoryProvider:
    """Free-tier MyMemory endpoint (GET, query-string text and language pair)."""

    name = "mymemory"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = "https://api.mymemory.translated.net",
        timeout: float = 15.0,
        email: Optional[str] = None,
        user_agent: Optional[str] = None,
        max_query_chars: int = MYMEMORY_MAX_QUERY_CHARS,
    ):
        self.http = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.email = email
        self.user_agent = user_agent
        self.max_query_chars = max_query_chars

    async def translate(self, text: str, source: str, target: str) -> str:
        PROVIDER_CALLS.labels(self.name).inc()
        params = {"q": text, "langpair": f"{source}|{target}"}
        if self.email:
            params["de"] = self.email
        headers = {"User-Agent": self.user_agent} if self.user_agent else None

        try:
            response = await self.http.get(
                f"{self.base_url}/get", params=params, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            PROVIDER_ERRORS.labels(self.name).inc()
            raise ProviderError(self.name, f"request failed: {exc}") from exc

        try:
            data = _decode_json(self.name, response)

            raw_status = data.get("responseStatus")
            try:
                status = int(raw_status) if raw_status not in (None, "") else 200
            except (TypeError, ValueError):
                status = 0
            if status != 200:
                details = data.get("responseDetails") or raw_status
                raise ProviderError(self.name, f"status {raw_status}: {details}")

            translated = (data.get("responseData") or {}).get("translatedText") or ""
            translated = html.unescape(str(translated)).strip()
            if not translated:
                raise ProviderError(self.name, "empty translation")
            if translated.upper().startswith(QUOTA_WARNING_PREFIX):
                raise ProviderError(self.name, "daily quota exhausted")
            return translated
        except ProviderError:
            PROVIDER_ERRORS.labels(self.name).inc()
            raise


class LibreTranslateProvider:
    """Self-hosted LibreTranslate instance (POST JSON, optional API key)."""

    name = "libretranslate"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 15.0,
        api_key: Optional[str] = None,
        max_query_chars: int = LIBRETRANSLATE_MAX_QUERY_CHARS,
    ):
        self.http = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_key = api_key
        self.max_query_chars = max_query_chars

    async def translate(self, text: str, source: str, target: str) -> str:
        PROVIDER_CALLS.labels(self.name).inc()
        payload: Dict[str, Any] = {
            "q": text,
            "source": source,
            "target": target,
            "format": "text",
        }
        if self.api_key:
            payload["api_key"] = self.api_key

        try:
            response = await self.http.post(
                f"{self.base_url}/translate", json=payload, timeout=self.timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            PROVIDER_ERRORS.labels(self.name).inc()
            raise ProviderError(self.name, f"request failed: {exc}") from exc

        try:
            data = _decode_json(self.name, response)
            if data.get("error"):
                raise ProviderError(self.name, str(data["error"]))
            translated = str(data.get("translatedText") or "").strip()
            if not translated:
                raise ProviderError(self.name, "empty translation")
            return translated
        except ProviderError:
            PROVIDER_ERRORS.labels(self.name).inc()
            raise


def build_providers(settings: Settings, http_client: httpx.AsyncClient) -> List[TranslationProvider]:
    """Primary provider first; the self-hosted fallback only when configured."""
    providers: List[TranslationProvider] = [
        MyMemoryProvider(
            http_client,
            base_url=settings.MYMEMORY_URL,
            timeout=settings.PROVIDER_TIMEOUT,
            email=settings.MYMEMORY_EMAIL,
            user_agent=settings.DEFAULT_USER_AGENT,
            max_query_chars=settings.MYMEMORY_MAX_QUERY_CHARS,
        )
    ]
    if settings.LIBRETRANSLATE_URL:
        providers.append(
            LibreTranslateProvider(
                http_client,
                base_url=settings.LIBRETRANSLATE_URL,
                timeout=settings.PROVIDER_TIMEOUT,
                api_key=settings.LIBRETRANSLATE_API_KEY,
            )
        )
    logger.info(f"Translation providers: {[p.name for p in providers]}")
    return providers
