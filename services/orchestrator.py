# services/orchestrator.py
"""
Translate-URL workflow as an explicit state machine.

    Fetching -> Extracting -> Translating -> Done
        \\            \\             \\
         +------------+-------------+---> Failed

Each phase is a small dataclass carrying exactly the data the next step
needs.  ``TranslateUrlOrchestrator.run`` steps through them and always
finishes in ``Done`` or ``Failed``; no exception escapes to the caller.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from bs4 import BeautifulSoup, Tag
from loguru import logger
from prometheus_client import Counter, Histogram

from core.exceptions import TranslatorServiceError
from services.extraction.content_extractor import (
    ExtractionLimits,
    extract_main_content,
    extract_title,
)
from services.fetcher.page_fetcher import FetchedResource, PageFetcher
from services.translation.client import TranslationClient
from services.translation.dom_translator import DomTranslator

TRANSLATE_URL_REQUESTS = Counter(
    "translate_url_requests_total", "translate-url runs by final phase", ["outcome"]
)
TRANSLATE_URL_DURATION = Histogram("translate_url_duration_seconds", "End-to-end translate-url time")

EMPTY_CONTENT_HTML = "<p>Не удалось извлечь контент.</p>"


# ----------------------------------------------------------------------
# Phases
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Fetching:
    url: str


@dataclass(frozen=True)
class Extracting:
    url: str
    page: FetchedResource


@dataclass(frozen=True)
class Translating:
    url: str
    base_url: str
    title: str
    fragment: Tag
    extracted_chars: int


@dataclass(frozen=True)
class Done:
    title: str
    content_html: str
    source_url: str
    debug: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "title": self.title,
            "contentHtml": self.content_html,
            "sourceUrl": self.source_url,
            "debug": self.debug,
        }


@dataclass(frozen=True)
class Failed:
    error: str
    status_code: int = 500
    debug: Optional[Dict[str, Any]] = None
    phase: str = ""

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.error}
        if self.debug:
            body["debug"] = self.debug
        return body


Phase = Union[Fetching, Extracting, Translating, Done, Failed]
TranslateUrlResult = Union[Done, Failed]


class TranslateUrlOrchestrator:
    def __init__(
        self,
        fetcher: PageFetcher,
        dom_translator: DomTranslator,
        client: TranslationClient,
        time_budget: float = 12.0,
        limits: Optional[ExtractionLimits] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fetcher = fetcher
        self.dom_translator = dom_translator
        self.client = client
        self.time_budget = time_budget
        self.limits = limits or ExtractionLimits()
        self._clock = clock

    async def _fetch(self, phase: Fetching) -> Extracting:
        page = await self.fetcher.fetch_page(phase.url)
        return Extracting(url=phase.url, page=page)

    def _extract(self, phase: Extracting) -> Translating:
        soup = BeautifulSoup(phase.page.content, "html.parser", from_encoding=phase.page.charset)
        # The title is read before extraction, which prunes headers in place.
        title = extract_title(soup)
        fragment = extract_main_content(soup, phase.url, self.limits)
        return Translating(
            url=phase.url,
            base_url=phase.page.url or phase.url,
            title=title,
            fragment=fragment,
            extracted_chars=len(fragment.decode_contents()),
        )

    async def _translate(self, phase: Translating, started: float) -> Done:
        # The translation budget starts once extraction is over.
        deadline = self._clock() + self.time_budget
        stats = await self.dom_translator.translate_in_place(phase.fragment, phase.base_url, deadline)
        title = await self.client.translate_text(phase.title)
        content_html = phase.fragment.decode_contents() or EMPTY_CONTENT_HTML

        debug = stats.to_dict()
        debug["extractedChars"] = phase.extracted_chars
        debug["elapsedMs"] = int((self._clock() - started) * 1000)
        return Done(title=title, content_html=content_html, source_url=phase.url, debug=debug)

    async def _step(self, phase: Phase, started: float) -> Phase:
        if isinstance(phase, Fetching):
            return await self._fetch(phase)
        if isinstance(phase, Extracting):
            return self._extract(phase)
        if isinstance(phase, Translating):
            return await self._translate(phase, started)
        raise TypeError(f"No transition out of {type(phase).__name__}")

    async def run(self, url: str) -> TranslateUrlResult:
        started = self._clock()
        phase: Phase = Fetching(url=url)

        while not isinstance(phase, (Done, Failed)):
            name = type(phase).__name__
            logger.debug(f"[translate-url] {url}: {name}")
            try:
                phase = await self._step(phase, started)
            except TranslatorServiceError as exc:
                logger.warning(f"[translate-url] {url} failed while {name}: {exc.message}")
                phase = Failed(
                    error=exc.message, status_code=exc.status_code, debug=exc.debug, phase=name
                )
            except Exception as exc:
                logger.exception(f"[translate-url] unexpected error while {name}: {exc}")
                phase = Failed(
                    error=f"Ошибка при переводе: {str(exc) or 'unknown'}", status_code=500, phase=name
                )

        elapsed = self._clock() - started
        TRANSLATE_URL_DURATION.observe(elapsed)
        TRANSLATE_URL_REQUESTS.labels("done" if isinstance(phase, Done) else "failed").inc()
        logger.info(f"[translate-url] {url}: {type(phase).__name__} in {elapsed:.2f}s")
        return phase
