# services/weather/weather_service.py
"""
Current conditions and a short forecast from a wttr.in-compatible API.

The upstream is asked for ``format=j1&lang=ru``; descriptions come from the
``lang_ru`` field when present and otherwise the English ``weatherDesc`` is
machine-translated.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from loguru import logger
from prometheus_client import Counter

from core.exceptions import WeatherError
from models.responses import CurrentWeather, ForecastDay, WeatherResponse
from services.translation.client import TranslationClient

WEATHER_REQUESTS = Counter("weather_requests_total", "Weather lookups by outcome", ["outcome"])

MISSING = "—"
MIDDAY_SLOT = "1200"


def _first_value(items: Any) -> Optional[str]:
    """wttr.in wraps most strings as ``[{"value": "..."}]``."""
    if isinstance(items, list) and items and isinstance(items[0], dict):
        value = items[0].get("value")
        return str(value) if value not in (None, "") else None
    return None


def _as_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def pick_midday(hourly: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    for slot in hourly:
        if str(slot.get("time")) == MIDDAY_SLOT:
            return slot
    return hourly[0] if hourly else None


class WeatherService:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        translator: Optional[TranslationClient] = None,
        base_url: str = "https://wttr.in",
        timeout: float = 15.0,
        forecast_days: int = 3,
        user_agent: str = "Mozilla/5.0",
    ):
        self.http = http_client
        self.translator = translator
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.forecast_days = forecast_days
        self.user_agent = user_agent

    async def _describe(self, entry: Optional[Dict[str, Any]]) -> str:
        if not entry:
            return MISSING
        ru = _first_value(entry.get("lang_ru"))
        if ru:
            return ru
        en = _first_value(entry.get("weatherDesc"))
        if not en:
            return MISSING
        if self.translator is None:
            return en
        return await self.translator.translate_text(en) or en

    async def _fetch(self, city: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{quote(city, safe='')}"
        try:
            response = await self.http.get(
                url,
                params={"format": "j1", "lang": "ru"},
                headers={"User-Agent": self.user_agent, "Accept-Language": "ru"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise WeatherError(f"weather error: {exc}") from exc
        except ValueError as exc:
            raise WeatherError("weather error: invalid JSON") from exc
        if not isinstance(data, dict):
            raise WeatherError("weather error: unexpected payload")
        return data

    async def get_weather(self, city: str) -> WeatherResponse:
        city = (city or "").strip()
        if not city:
            raise WeatherError("Город не указан", status_code=400)

        data = await self._fetch(city)
        current_raw = (data.get("current_condition") or [{}])[0]
        area = (data.get("nearest_area") or [{}])[0]

        current = CurrentWeather(
            tempC=_as_str(current_raw.get("temp_C")),
            humidity=_as_str(current_raw.get("humidity")),
            windKmph=_as_str(current_raw.get("windspeedKmph")),
            desc=await self._describe(current_raw),
        )

        forecast: List[ForecastDay] = []
        for day in (data.get("weather") or [])[: self.forecast_days]:
            forecast.append(
                ForecastDay(
                    date=_as_str(day.get("date")),
                    minC=_as_str(day.get("mintempC")),
                    maxC=_as_str(day.get("maxtempC")),
                    desc=await self._describe(pick_midday(day.get("hourly") or [])),
                )
            )

        location = _first_value(area.get("areaName")) or city
        WEATHER_REQUESTS.labels("ok").inc()
        logger.debug(f"Weather for {city}: {current.tempC}°C, {len(forecast)} forecast days")
        return WeatherResponse(success=True, location=location, current=current, forecast=forecast)
