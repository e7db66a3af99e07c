# services/catalog/config_loader.py
"""
Loads the static catalogues from ``configs/`` and validates them with
Pydantic models.

* ``configs/articles.yaml`` – curated article links per category.  The file
  can contain a top-level ``categories`` key or just the mapping of
  category name → list of entries.
* ``configs/dictionary.yaml`` – the small EN→RU word list behind
  ``/api/translate-word``.

Public API:
* ``get_category_articles(name)`` – returns the validated entries or raises
  ``CategoryNotFoundError``.
* ``get_dictionary_entries()`` – the validated word mapping.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Optional

# ----------------------------------------------------------------------
# Pydantic schemas – they give us runtime validation and nice error msgs
# ----------------------------------------------------------------------
from pydantic import BaseModel, Field, HttpUrl, field_validator


class ArticleEntry(BaseModel):
    """One curated link; ``title_ru`` is what the UI shows."""
    title: str
    url: HttpUrl
    title_ru: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title_ru or self.title


class ArticleCatalog(BaseModel):
    """Top-level container – maps category name → its entries."""
    categories: Dict[str, List[ArticleEntry]]


class DictionaryConfig(BaseModel):
    """English word → Russian word."""
    entries: Dict[str, str] = Field(default_factory=dict)

    @field_validator("entries")
    @classmethod
    def _lowercase_keys(cls, value: Dict[str, str]) -> Dict[str, str]:
        cleaned: Dict[str, str] = {}
        for en, ru in value.items():
            en_key, ru_val = str(en).strip().lower(), str(ru).strip()
            if not en_key or not ru_val:
                raise ValueError(f"Empty dictionary entry: {en!r} -> {ru!r}")
            cleaned[en_key] = ru_val
        return cleaned


# ----------------------------------------------------------------------
# Internal helpers & caching
# ----------------------------------------------------------------------
# Resolve the paths relative to this file (two levels up → project root)
CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"
ARTICLES_PATH = CONFIG_DIR / "articles.yaml"
DICTIONARY_PATH = CONFIG_DIR / "dictionary.yaml"

# Simple in-process cache so each YAML is read/validated only once per process
_cached_catalog: ArticleCatalog | None = None
_cached_dictionary: DictionaryConfig | None = None


def _load_yaml(path: Path, wrapper_key: str) -> dict:
    """Read a YAML file and return the inner ``wrapper_key`` mapping if present."""
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
        return raw.get(wrapper_key, raw)


def _load_catalog() -> ArticleCatalog:
    global _cached_catalog
    if _cached_catalog is None:
        raw = _load_yaml(ARTICLES_PATH, "categories")
        _cached_catalog = ArticleCatalog(categories=raw)   # validation happens here
    return _cached_catalog


def _load_dictionary() -> DictionaryConfig:
    global _cached_dictionary
    if _cached_dictionary is None:
        raw = _load_yaml(DICTIONARY_PATH, "entries")
        _cached_dictionary = DictionaryConfig(entries=raw)
    return _cached_dictionary


# ----------------------------------------------------------------------
# Custom exception for a missing category
# ----------------------------------------------------------------------
class CategoryNotFoundError(KeyError):
    """Raised when a requested category does not exist in articles.yaml."""

    def __init__(self, category: str):
        super().__init__(f"Category '{category}' not found.")
        self.category = category


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------
def get_category_articles(category: str) -> List[ArticleEntry]:
    """
    Return the **validated** entries for ``category``.

    Raises
    ------
    CategoryNotFoundError
        If the category name is not present in the YAML.
    ValidationError
        If the YAML exists but does not conform to the Pydantic schema.
    """
    catalog = _load_catalog()
    try:
        return catalog.categories[category]
    except KeyError as exc:
        raise CategoryNotFoundError(category) from exc


def get_dictionary_entries() -> Dict[str, str]:
    return dict(_load_dictionary().entries)
