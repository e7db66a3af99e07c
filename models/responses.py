# models/responses.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    debug: Optional[Dict[str, Any]] = None


class TranslateUrlResponse(BaseModel):
    success: bool = True
    title: str
    contentHtml: str
    sourceUrl: str
    debug: Dict[str, Any] = Field(default_factory=dict)


class TranslateTextResponse(BaseModel):
    success: bool = True
    translated: str


class TranslateWordResponse(BaseModel):
    success: bool = True
    translation: str


# ----------------------------------------------------------------------
#  Weather – field names follow the JSON the front-end already reads
# ----------------------------------------------------------------------
class CurrentWeather(BaseModel):
    tempC: Optional[str] = None
    humidity: Optional[str] = None
    windKmph: Optional[str] = None
    desc: str = "—"


class ForecastDay(BaseModel):
    date: Optional[str] = None
    minC: Optional[str] = None
    maxC: Optional[str] = None
    desc: str = "—"


class WeatherResponse(BaseModel):
    success: bool = True
    location: str
    current: CurrentWeather
    forecast: List[ForecastDay] = Field(default_factory=list)


class ArticleLink(BaseModel):
    title: str
    url: str


class ArticlesResponse(BaseModel):
    success: bool = True
    articles: List[ArticleLink] = Field(default_factory=list)


class HealthResponse(BaseModel):
    success: bool = True
    status: str = "healthy"
    timestamp: str
