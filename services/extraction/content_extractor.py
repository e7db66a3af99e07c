# services/extraction/content_extractor.py
"""
Pull the "article" part out of a fetched page.

The extractor picks a main-content scope (site-specific rules first, then a
generic selector list), strips chrome such as navigation, sidebars and
reference lists, and clones a budgeted set of content elements into a new
detached ``<div id="extracted">`` container.
"""

import copy
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag
from loguru import logger

from core.exceptions import ExtractionError

DEFAULT_TITLE = "Статья"

GENERIC_SCOPE_SELECTORS = ("article", "main", "#content", "#main", ".content", "body")

STRIP_TAGS_SELECTOR = "script,style,noscript,iframe"
CHROME_SELECTOR = (
    "nav,footer,header,aside,#leftmenu,#sidemenu,#topnav,.sidebar,.menu,.navigation"
)
REFERENCE_SELECTOR = ".reflist,.reference,.mw-references-wrap,ol.references,.navbox,.infobox"

CONTENT_SELECTOR = (
    "h1,h2,h3,h4,h5,h6,p,ul,ol,li,pre,code,blockquote,figure,img,figcaption,"
    "div.w3-panel,div.w3-note,div.w3-example,div.w3-info,div.w3-warning"
)
CHROME_ANCESTORS = frozenset({"nav", "header", "footer", "aside"})

# Minimum normalized text length per tag; shorter blocks are UI crumbs.
MIN_TEXT_BY_TAG = {"p": 3, "li": 3, "div": 25}
# Blocks that are unpacked into their children when they overflow the budget.
CONTAINER_TAGS = frozenset({"ul", "ol", "blockquote", "figure", "div"})

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExtractionLimits:
    max_elements: int = 650
    max_chars: int = 150_000
    wiki_max_elements: int = 260
    wiki_max_chars: int = 40_000
    min_html: int = 64


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def _is_wiki(host: str) -> bool:
    return host.endswith("wikipedia.org")


def _text(el: Tag) -> str:
    return _WS_RE.sub(" ", el.get_text()).strip()


def extract_title(soup: BeautifulSoup) -> str:
    """og:title, then the first ``<h1>``, then ``<title>``, then a placeholder."""
    og = soup.find("meta", attrs={"property": "og:title"})
    if og and (og.get("content") or "").strip():
        return og["content"].strip()

    h1 = soup.find("h1")
    if h1:
        text = _text(h1)
        if text:
            return text

    if soup.title and soup.title.string:
        text = soup.title.string.strip()
        if text:
            return text

    return DEFAULT_TITLE


def pick_main_scope(soup: BeautifulSoup, url: str) -> Tag:
    host = _host(url)

    site_rules: List[str] = []
    if _is_wiki(host):
        site_rules = ["#mw-content-text"]
    elif host.endswith("w3schools.com"):
        site_rules = ["#main", ".w3-main"]

    for selector in list(site_rules) + list(GENERIC_SCOPE_SELECTORS):
        el = soup.select_one(selector)
        if el is not None:
            return el
    # Markup without a <body> (html.parser never invents one).
    return soup


def _decompose_all(scope: Tag, selector: str) -> None:
    for el in scope.select(selector):
        if not el.decomposed:
            el.decompose()


def cleanup_scope(scope: Tag) -> None:
    _decompose_all(scope, STRIP_TAGS_SELECTOR)
    _decompose_all(scope, CHROME_SELECTOR)
    _decompose_all(scope, REFERENCE_SELECTOR)


def remove_event_handlers(root: Tag) -> None:
    for el in [root, *root.find_all(True)]:
        for attr in list(el.attrs):
            if attr.lower().startswith("on"):
                del el[attr]


def _inside_chrome(el: Tag) -> bool:
    return any(parent.name in CHROME_ANCESTORS for parent in el.parents)


def _has_included_ancestor(el: Tag, included: set) -> bool:
    return any(id(parent) in included for parent in el.parents)


def collect_content(candidates: Iterable[Tag], max_elements: int, max_chars: int) -> Tag:
    """
    Clone candidates into a detached container while the element count and
    the cumulative text length stay within their caps.  A container that no
    longer fits is skipped so its children are considered one by one; any
    other element that does not fit ends the collection.
    """
    out = BeautifulSoup('<div id="extracted"></div>', "html.parser").div
    out.extract()

    included: set = set()
    added = 0
    char_budget = 0

    for el in candidates:
        if added >= max_elements or char_budget >= max_chars:
            break
        if _inside_chrome(el):
            continue
        # A cloned ancestor already carries this element.
        if _has_included_ancestor(el, included):
            continue

        tag = (el.name or "").lower()
        text = _text(el)
        if tag in MIN_TEXT_BY_TAG and len(text) < MIN_TEXT_BY_TAG[tag]:
            continue
        if char_budget + len(text) > max_chars:
            if tag in CONTAINER_TAGS:
                continue
            # The first block is kept even when it alone exceeds the cap.
            if added:
                break

        out.append(copy.copy(el))
        included.add(id(el))
        added += 1
        char_budget += len(text)

    return out


def extract_main_content(
    soup: BeautifulSoup, source_url: str, limits: Optional[ExtractionLimits] = None
) -> Tag:
    """
    Return a detached ``<div id="extracted">`` holding the page's main content.

    Raises
    ------
    ExtractionError
        When the serialized result is too short to be a real article
        (protected page, empty page, or no selector matched anything useful).
    """
    limits = limits or ExtractionLimits()
    scope = pick_main_scope(soup, source_url)
    cleanup_scope(scope)

    if _is_wiki(_host(source_url)):
        max_elements, max_chars = limits.wiki_max_elements, limits.wiki_max_chars
    else:
        max_elements, max_chars = limits.max_elements, limits.max_chars

    out = collect_content(scope.select(CONTENT_SELECTOR), max_elements, max_chars)

    _decompose_all(out, STRIP_TAGS_SELECTOR)
    remove_event_handlers(out)

    html = out.decode_contents()
    if len(html.strip()) < limits.min_html:
        logger.warning(f"Extraction produced {len(html)} chars for {source_url}")
        raise ExtractionError(
            "Не удалось извлечь контент (страница пустая/защищена/селекторы не совпали).",
            debug={"extractedChars": len(html), "url": source_url},
        )

    logger.debug(f"Extracted {len(out.contents)} elements ({len(html)} chars) from {source_url}")
    return out
