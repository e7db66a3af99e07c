from .requests import TranslateTextRequest, TranslateUrlRequest, TranslateWordRequest
from .responses import (
    ArticleLink,
    ArticlesResponse,
    CurrentWeather,
    ErrorResponse,
    ForecastDay,
    HealthResponse,
    TranslateTextResponse,
    TranslateUrlResponse,
    TranslateWordResponse,
    WeatherResponse,
)

__all__ = [
    'TranslateUrlRequest', 'TranslateTextRequest', 'TranslateWordRequest',
    'ErrorResponse', 'TranslateUrlResponse', 'TranslateTextResponse', 'TranslateWordResponse',
    'CurrentWeather', 'ForecastDay', 'WeatherResponse',
    'ArticleLink', 'ArticlesResponse', 'HealthResponse',
]
