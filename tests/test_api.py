# tests/test_api.py
"""
Endpoint tests.

The app is used *without* entering ``TestClient`` as a context manager, so
the lifespan never builds the real services; each test installs fakes on
``app.state`` instead.
"""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

import api.v1.endpoints.translate as translate_endpoint

from core.exceptions import FetchError, WeatherError
from main import app
from services.catalog.dictionary import BilingualDictionary
from services.fetcher.page_fetcher import FetchedResource
from services.orchestrator import Done, Failed

from conftest import DictionaryProvider, make_client


class FakeOrchestrator:
    def __init__(self, outcome):
        self.outcome = outcome
        self.urls = []

    async def run(self, url):
        self.urls.append(url)
        return self.outcome


class FakeWeather:
    def __init__(self, exc=None):
        self.exc = exc

    async def get_weather(self, city):
        raise self.exc


class FakeFetcher:
    def __init__(self, resource=None):
        self.resource = resource

    async def fetch_image(self, url):
        if self.resource is None:
            raise FetchError("Источник ответил статусом 404")
        return self.resource


@pytest.fixture
def api():
    app.state.translation_client = make_client([DictionaryProvider()])
    app.state.dictionary = BilingualDictionary()
    return TestClient(app)


# ----------------------------------------------------------------------
# translate-url
# ----------------------------------------------------------------------
def test_translate_url_success(api):
    done = Done(title="Привет мир", content_html="<h1>Привет мир</h1>", source_url="https://e.test/a")
    app.state.orchestrator = FakeOrchestrator(done)

    r = api.post("/api/translate-url", json={"url": " https://e.test/a "})
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "title": "Привет мир",
        "contentHtml": "<h1>Привет мир</h1>",
        "sourceUrl": "https://e.test/a",
        "debug": {},
    }
    assert app.state.orchestrator.urls == ["https://e.test/a"]


def test_translate_url_failure_uses_outcome_status(api):
    app.state.orchestrator = FakeOrchestrator(Failed(error="Таймаут", status_code=502))
    r = api.post("/api/translate-url", json={"url": "https://e.test/slow"})
    assert r.status_code == 502
    assert r.json() == {"success": False, "error": "Таймаут"}


def test_translate_url_requires_url(api):
    r = api.post("/api/translate-url", json={})
    assert r.status_code == 422
    assert r.json()["success"] is False


class SlowOrchestrator:
    def __init__(self):
        self.cancelled = asyncio.Event()

    async def run(self, url):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled.set()
            raise


class GoneRequest:
    url = SimpleNamespace(path="/api/translate-url")

    async def is_disconnected(self):
        return True


@pytest.mark.asyncio
async def test_disconnect_cancels_running_translation(monkeypatch):
    monkeypatch.setattr(translate_endpoint, "DISCONNECT_POLL_SECONDS", 0.01)
    orchestrator = SlowOrchestrator()

    coro = orchestrator.run("https://e.test/a")
    result = await translate_endpoint._run_unless_disconnected(GoneRequest(), coro)

    assert result is None
    await asyncio.wait_for(orchestrator.cancelled.wait(), timeout=1)


@pytest.mark.asyncio
async def test_connected_client_gets_the_result(monkeypatch):
    monkeypatch.setattr(translate_endpoint, "DISCONNECT_POLL_SECONDS", 0.01)

    class StayingRequest(GoneRequest):
        async def is_disconnected(self):
            return False

    async def work():
        await asyncio.sleep(0.05)
        return "done"

    assert await translate_endpoint._run_unless_disconnected(StayingRequest(), work()) == "done"


def test_translate_url_reports_abandoned_request(api, monkeypatch):
    monkeypatch.setattr(translate_endpoint, "DISCONNECT_POLL_SECONDS", 0.01)

    async def always_gone(self):
        return True

    monkeypatch.setattr(Request, "is_disconnected", always_gone)
    app.state.orchestrator = SlowOrchestrator()

    r = api.post("/api/translate-url", json={"url": "https://e.test/slow"})
    assert r.status_code == 499
    assert r.json() == {"success": False, "error": "Запрос отменён"}


# ----------------------------------------------------------------------
# translate-text
# ----------------------------------------------------------------------
def test_translate_text_keeps_console_log(api):
    r = api.post("/api/translate-text", json={"text": "console.log(x)"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert "console.log" in body["translated"]


def test_translate_text_translates_prose(api):
    r = api.post("/api/translate-text", json={"text": "Hello", "from": "en", "to": "ru"})
    assert r.json() == {"success": True, "translated": "Привет"}


def test_translate_text_rejects_empty(api):
    r = api.post("/api/translate-text", json={"text": "  "})
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "Текст не предоставлен"}


# ----------------------------------------------------------------------
# translate-word
# ----------------------------------------------------------------------
def test_translate_word_both_directions(api):
    r = api.post("/api/translate-word", json={"word": "Hello", "direction": "en-ru"})
    assert r.json() == {"success": True, "translation": "Привет"}

    r = api.post("/api/translate-word", json={"word": "МИР", "direction": "ru-en"})
    assert r.json() == {"success": True, "translation": "WORLD"}


def test_translate_word_unknown(api):
    r = api.post("/api/translate-word", json={"word": "zebra", "direction": "en-ru"})
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_translate_word_bad_direction(api):
    r = api.post("/api/translate-word", json={"word": "hello", "direction": "en-de"})
    assert r.status_code == 422


# ----------------------------------------------------------------------
# weather / articles / image / health
# ----------------------------------------------------------------------
@pytest.mark.parametrize("exc", [WeatherError("weather error: timeout"), RuntimeError("boom")])
def test_weather_failure_is_not_a_server_error(api, exc):
    app.state.weather = FakeWeather(exc)
    r = api.get("/api/weather", params={"city": "Moscow"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is False
    assert body["error"]


def test_articles_known_and_unknown_category(api):
    r = api.get("/api/articles/history")
    body = r.json()
    assert body["success"] is True
    assert body["articles"][0] == {
        "title": "Древний Рим",
        "url": "https://en.wikipedia.org/wiki/Ancient_Rome",
    }

    r = api.get("/api/articles/poetry")
    assert r.json() == {"success": True, "articles": []}


def test_image_proxy(api):
    app.state.fetcher = FakeFetcher(
        FetchedResource(url="https://cdn.test/p.png", status_code=200, content=b"\x89PNG", content_type="image/png")
    )
    r = api.get("/api/image", params={"url": "https://cdn.test/p.png"})
    assert r.status_code == 200
    assert r.content == b"\x89PNG"
    assert r.headers["content-type"] == "image/png"
    assert r.headers["cache-control"] == "public, max-age=86400"


def test_image_proxy_rejects_bad_url_and_missing_image(api):
    assert api.get("/api/image", params={"url": "ftp://x"}).status_code == 400
    app.state.fetcher = FakeFetcher(None)
    assert api.get("/api/image", params={"url": "https://cdn.test/gone.png"}).status_code == 404


def test_health_and_unknown_endpoint(api):
    r = api.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True and body["status"] == "healthy"
    assert "X-Process-Time" in r.headers

    r = api.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"success": False, "error": "Endpoint не найден"}
