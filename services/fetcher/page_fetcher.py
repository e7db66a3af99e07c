# services/fetcher/page_fetcher.py
"""
Plain HTTP fetching for source pages and proxied images.

Responses are streamed and cut off once they exceed a byte cap so a huge
page or image can never exhaust memory.  Every failure (network error,
timeout, oversized body, non-2xx status) is raised as ``FetchError`` and is
never retried at this layer.
"""

from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from loguru import logger
from prometheus_client import Counter, Histogram

from core.exceptions import FetchError

FETCH_REQUESTS = Counter("page_fetch_requests_total", "Outgoing page/image fetches", ["kind"])
FETCH_ERRORS = Counter("page_fetch_errors_total", "Failed page/image fetches", ["kind"])
FETCH_DURATION = Histogram("page_fetch_duration_seconds", "Time spent fetching source pages")


@dataclass
class FetchedResource:
    url: str
    status_code: int
    content: bytes
    content_type: Optional[str] = None
    charset: Optional[str] = None


class PageFetcher:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_agent: str,
        accept_language: str = "en-US,en;q=0.9,ru;q=0.8",
        timeout: float = 35.0,
        max_bytes: int = 7 * 1024 * 1024,
        image_timeout: float = 20.0,
        image_max_bytes: int = 4 * 1024 * 1024,
    ):
        self.http = http_client
        self.user_agent = user_agent
        self.accept_language = accept_language
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.image_timeout = image_timeout
        self.image_max_bytes = image_max_bytes

    def _page_headers(self) -> Dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": self.accept_language,
            "Upgrade-Insecure-Requests": "1",
        }

    async def _get_capped(
        self, url: str, headers: Dict[str, str], timeout: float, max_bytes: int, kind: str
    ) -> FetchedResource:
        FETCH_REQUESTS.labels(kind).inc()
        try:
            async with self.http.stream(
                "GET", url, headers=headers, timeout=timeout, follow_redirects=True
            ) as response:
                if not response.is_success:
                    raise FetchError(f"Источник ответил статусом {response.status_code}")

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    raise FetchError(f"Ответ слишком большой ({declared} байт)")

                chunks = []
                total = 0
                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > max_bytes:
                        raise FetchError(f"Ответ превысил лимит {max_bytes} байт")
                    chunks.append(chunk)

                return FetchedResource(
                    url=str(response.url),
                    status_code=response.status_code,
                    content=b"".join(chunks),
                    content_type=response.headers.get("content-type"),
                    charset=response.charset_encoding,
                )
        except FetchError:
            FETCH_ERRORS.labels(kind).inc()
            raise
        except httpx.TimeoutException as exc:
            FETCH_ERRORS.labels(kind).inc()
            raise FetchError(f"Таймаут при загрузке {url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            FETCH_ERRORS.labels(kind).inc()
            raise FetchError(f"Не удалось загрузить страницу: {exc}") from exc

    async def fetch_page(self, url: str) -> FetchedResource:
        logger.info(f"Fetching {url}")
        with FETCH_DURATION.time():
            page = await self._get_capped(
                url, self._page_headers(), self.timeout, self.max_bytes, kind="page"
            )
        logger.debug(f"Fetched {len(page.content)} bytes from {page.url}")
        return page

    async def fetch_image(self, url: str) -> FetchedResource:
        headers = {"User-Agent": self.user_agent, "Accept": "image/*,*/*;q=0.8"}
        return await self._get_capped(
            url, headers, self.image_timeout, self.image_max_bytes, kind="image"
        )
