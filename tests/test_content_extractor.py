# tests/test_content_extractor.py
import pytest
from bs4 import BeautifulSoup

from core.exceptions import ExtractionError
from services.extraction.content_extractor import (
    DEFAULT_TITLE,
    ExtractionLimits,
    extract_main_content,
    extract_title,
    pick_main_scope,
)

LONG_P = "This is a test paragraph with more than twenty characters."


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ----------------------------------------------------------------------
# Title
# ----------------------------------------------------------------------
def test_title_prefers_og_then_h1_then_title():
    assert extract_title(_soup(
        '<head><meta property="og:title" content=" OG "><title>T</title></head><h1>H</h1>'
    )) == "OG"
    assert extract_title(_soup("<title>T</title><h1> The  H1 </h1>")) == "The H1"
    assert extract_title(_soup("<title> T </title>")) == "T"
    assert extract_title(_soup("<p>nothing</p>")) == DEFAULT_TITLE


# ----------------------------------------------------------------------
# Scope
# ----------------------------------------------------------------------
def test_wikipedia_scope_rule():
    soup = _soup('<body><div id="mw-content-text"><p>wiki</p></div><article>a</article></body>')
    scope = pick_main_scope(soup, "https://en.wikipedia.org/wiki/X")
    assert scope.get("id") == "mw-content-text"


def test_w3schools_scope_rule():
    soup = _soup('<body><div class="w3-main"><p>w3</p></div><article>a</article></body>')
    scope = pick_main_scope(soup, "https://www.w3schools.com/js/")
    assert "w3-main" in scope.get("class")


def test_generic_scope_falls_back_to_article():
    soup = _soup("<body><main>m</main><article>a</article></body>")
    assert pick_main_scope(soup, "https://example.com/").name == "article"


# ----------------------------------------------------------------------
# Extraction
# ----------------------------------------------------------------------
def test_extracts_headings_and_paragraphs_without_chrome_or_scripts():
    html = f"""
    <html><body>
      <nav><p>Menu entry that is long enough</p></nav>
      <article>
        <h1>Hello World</h1>
        <script>alert(1)</script>
        <p onclick="evil()">{LONG_P}</p>
        <footer><p>Copyright footer text here</p></footer>
      </article>
    </body></html>
    """
    out = extract_main_content(_soup(html), "https://example.com/a")
    rendered = str(out)

    assert out.get("id") == "extracted"
    assert "<h1>Hello World</h1>" in rendered
    assert LONG_P in rendered
    assert "<script" not in rendered
    assert "onclick" not in rendered
    assert "Menu entry" not in rendered
    assert "Copyright" not in rendered


def test_short_divs_and_empty_paragraphs_are_skipped():
    html = f"""
    <article>
      <p>   </p>
      <div class="w3-note">tiny</div>
      <div class="w3-note">This callout has plenty of text in it.</div>
      <p>{LONG_P}</p>
    </article>
    """
    rendered = str(extract_main_content(_soup(html), "https://example.com/"))
    assert "tiny" not in rendered
    assert "This callout has plenty" in rendered


def test_nested_candidates_are_not_duplicated():
    html = f"<article><ul><li>{LONG_P}</li></ul></article>"
    out = extract_main_content(_soup(html), "https://example.com/")
    assert str(out).count(LONG_P) == 1


def test_element_cap_applies():
    paragraphs = "".join(f"<p>Paragraph number {i} with some words.</p>" for i in range(20))
    limits = ExtractionLimits(max_elements=3)
    out = extract_main_content(_soup(f"<article>{paragraphs}</article>"), "https://example.com/", limits)
    assert len(out.find_all("p")) == 3


def test_empty_scope_raises_extraction_error():
    html = "<body><article><p></p></article><nav><p>Only navigation here, nothing else</p></nav></body>"
    with pytest.raises(ExtractionError) as exc_info:
        extract_main_content(_soup(html), "https://example.com/empty")

    err = exc_info.value
    assert err.status_code == 500
    assert err.debug["url"] == "https://example.com/empty"
    assert err.to_dict()["success"] is False


# ----------------------------------------------------------------------
# Budgets and cleanup
# ----------------------------------------------------------------------
def _total_text(out) -> int:
    return sum(len(el.get_text(" ", strip=True)) for el in out.children if getattr(el, "name", None))


def test_character_cap_applies_to_paragraphs():
    paragraphs = "".join(f"<p>Paragraph {i:02d} has a fixed length.</p>" for i in range(10))
    limits = ExtractionLimits(max_chars=100)
    out = extract_main_content(_soup(f"<article>{paragraphs}</article>"), "https://example.com/", limits)

    assert len(out.find_all("p")) == 3
    assert _total_text(out) <= 100


def test_character_cap_applies_to_lists():
    items = "".join(f"<li>List item number {i:02d}</li>" for i in range(50))
    html = f"<article><ul>{items}</ul><ul>{items}</ul></article>"
    limits = ExtractionLimits(max_chars=200)
    out = extract_main_content(_soup(html), "https://example.com/", limits)

    assert 0 < _total_text(out) <= 200
    assert out.find("ul") is None
    assert len(out.find_all("li")) == 200 // len("List item number 00")


def test_list_within_budget_is_kept_whole():
    html = f"<article><ul><li>{LONG_P}</li><li>Second item here</li></ul></article>"
    out = extract_main_content(_soup(html), "https://example.com/")
    assert out.ul is not None
    assert len(out.ul.find_all("li")) == 2


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://en.wikipedia.org/wiki/Article", 2),
        ("https://example.com/wiki/Article", 6),
    ],
)
def test_wikipedia_uses_its_own_element_cap(url, expected):
    paragraphs = "".join(f"<p>Paragraph number {i} with some words.</p>" for i in range(6))
    html = f'<body><div id="mw-content-text">{paragraphs}</div></body>'
    limits = ExtractionLimits(wiki_max_elements=2)
    out = extract_main_content(_soup(html), url, limits)
    assert len(out.find_all("p")) == expected


def test_wikipedia_uses_its_own_character_cap():
    paragraphs = "".join(f"<p>Paragraph {i:02d} has a fixed length.</p>" for i in range(6))
    html = f'<body><div id="mw-content-text">{paragraphs}</div></body>'
    limits = ExtractionLimits(wiki_max_chars=70)
    out = extract_main_content(_soup(html), "https://ru.wikipedia.org/wiki/X", limits)
    assert len(out.find_all("p")) == 2


@pytest.mark.parametrize(
    "selector_class", ["sidebar", "menu", "navigation", "reflist", "navbox", "infobox"]
)
def test_chrome_and_reference_blocks_are_removed(selector_class):
    html = f"""
    <article>
      <h1>Hello World</h1>
      <p>{LONG_P}</p>
      <div class="{selector_class}"><p>Removed block text that is long enough</p></div>
    </article>
    """
    rendered = str(extract_main_content(_soup(html), "https://example.com/"))
    assert LONG_P in rendered
    assert "Removed block text" not in rendered
