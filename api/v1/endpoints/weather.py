# api/v1/endpoints/weather.py
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from core.config import settings
from core.exceptions import TranslatorServiceError
from models.responses import WeatherResponse
from services.weather.weather_service import WEATHER_REQUESTS

router = APIRouter()


@router.get("/weather", response_model=WeatherResponse)
async def get_weather(request: Request, city: Optional[str] = Query(default=None, max_length=100)):
    """Weather never fails the page: upstream problems come back as ``success: false``."""
    city = (city or "").strip() or settings.WEATHER_DEFAULT_CITY
    try:
        return await request.app.state.weather.get_weather(city)
    except TranslatorServiceError as exc:
        message = exc.message
    except Exception as exc:
        logger.exception(f"Unexpected weather failure for {city}: {exc}")
        message = str(exc) or "weather error"

    WEATHER_REQUESTS.labels("failed").inc()
    logger.warning(f"Weather lookup for {city} failed: {message}")
    return JSONResponse(content={"success": False, "error": message})
