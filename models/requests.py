# models/requests.py
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.catalog.dictionary import Direction


# ----------------------------------------------------------------------
#  translate-url
# ----------------------------------------------------------------------
class TranslateUrlRequest(BaseModel):
    """
    Body of ``POST /api/translate-url``.

    ``url`` is kept as a plain string: a malformed address is reported by
    the fetch step as a regular translation failure, same as a dead host.
    """

    url: str = Field(..., min_length=1, description="Page to fetch, extract and translate")

    @field_validator("url")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("URL не предоставлен")
        return value


# ----------------------------------------------------------------------
#  translate-text
# ----------------------------------------------------------------------
class TranslateTextRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    source: Optional[str] = Field(default=None, alias="from", max_length=8)
    target: Optional[str] = Field(default=None, alias="to", max_length=8)


# ----------------------------------------------------------------------
#  translate-word
# ----------------------------------------------------------------------
class TranslateWordRequest(BaseModel):
    word: str = Field(..., min_length=1, max_length=64)
    direction: Direction = Direction.EN_RU
