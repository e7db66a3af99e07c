# core/exceptions.py
"""
Error taxonomy for the translator service.

Errors that reach the user (fetch / extraction / validation) derive from
``TranslatorServiceError`` and know how to render themselves as the JSON
error body used by every endpoint.  ``ProviderError`` never reaches the
user: the translation client retries, fails over and finally degrades to
the original text.
"""

from typing import Any, Dict, List, Optional


class TranslatorServiceError(Exception):
    """Base class for errors that are surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        debug: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.debug = debug

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.message}
        if self.debug:
            body["debug"] = self.debug
        return body


class FetchError(TranslatorServiceError):
    """Network failure, timeout, oversized response or non-2xx status."""

    status_code = 502
    code = "FETCH_FAILED"


class ExtractionError(TranslatorServiceError):
    """The page yielded too little content to be worth translating."""

    status_code = 500
    code = "EXTRACTION_FAILED"


class WeatherError(TranslatorServiceError):
    """The weather upstream failed or answered with something unusable."""

    status_code = 502
    code = "WEATHER_FAILED"


class RequestValidationFailed(TranslatorServiceError):
    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[Dict[str, Any]], message: str = "Некорректный запрос"):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["errors"] = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in self.errors
        ]
        return body


class ProviderError(Exception):
    """A translation provider call failed (timeout, bad status, empty text)."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
