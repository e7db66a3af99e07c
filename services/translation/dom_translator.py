# services/translation/dom_translator.py
"""
Translate an extracted fragment in place.

Text nodes are snapshotted up front, filtered, deduplicated and translated
in budgeted batches until a wall-clock deadline; the translations are then
written back into the snapshotted nodes with their original surrounding
whitespace.  Images are rerouted through the image proxy so they still load
when the translated page is rendered from another origin.
"""

import re
import time
from dataclasses import asdict, dataclass
from typing import Callable, Dict, Iterable, List, Optional
from urllib.parse import quote, urljoin

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString
from loguru import logger

from .batch import BatchTranslator
from .classifier import TextClassifier, normalize

# Text under these tags is code or markup and is never translated.
CODE_TAGS = frozenset({"script", "style", "noscript", "pre", "code", "kbd", "samp", "var"})
INTERACTIVE_TAGS = frozenset({"a", "button", "label", "input", "select", "option", "nav"})

LAZY_SRC_ATTRS = ("src", "data-src", "data-original", "data-lazy-src")
IMAGE_PROXY_PATH = "/api/image"
RESPONSIVE_IMG_STYLE = "max-width:100%;height:auto"

_HTTP_RE = re.compile(r"^https?://", re.I)
_LEAD_WS_RE = re.compile(r"\A\s*")
_TRAIL_WS_RE = re.compile(r"\s*\Z")


@dataclass
class SegmentStats:
    """Diagnostics for one in-place translation run."""

    segments: int = 0
    changed: int = 0
    batches: int = 0
    truncated: bool = False

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def absolutize_url(src: Optional[str], base_url: str) -> Optional[str]:
    if not src:
        return src
    s = src.strip()
    if not s or s.startswith("data:"):
        return s
    try:
        return urljoin(base_url, s)
    except ValueError:
        return src


def image_proxy_url(absolute_url: str) -> str:
    return f"{IMAGE_PROXY_PATH}?url={quote(absolute_url, safe='')}"


def rewrite_images(root: Tag, base_url: str) -> int:
    """Route every ``<img>`` through the image proxy; returns how many were touched."""
    count = 0
    for img in root.find_all("img"):
        raw = next((img.get(attr) for attr in LAZY_SRC_ATTRS if img.get(attr)), None)
        absolute = absolutize_url(raw, base_url)

        if absolute and _HTTP_RE.match(absolute):
            img["src"] = image_proxy_url(absolute)
        else:
            img["src"] = absolute or ""
        if img.has_attr("srcset"):
            del img["srcset"]

        img["loading"] = "lazy"
        style = (img.get("style") or "").strip().rstrip(";")
        img["style"] = ";".join(s for s in (style, RESPONSIVE_IMG_STYLE) if s) + ";"
        count += 1
    return count


class DomTranslator:
    def __init__(
        self,
        batch_translator: BatchTranslator,
        classifier: Optional[TextClassifier] = None,
        max_segments: int = 170,
        skip_interactive: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.batch_translator = batch_translator
        self.client = batch_translator.client
        self.classifier = classifier or TextClassifier()
        self.max_segments = max_segments
        self.skip_tags = CODE_TAGS | INTERACTIVE_TAGS if skip_interactive else CODE_TAGS
        self._clock = clock

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    def _in_skipped_region(self, node: NavigableString, root: Tag) -> bool:
        for parent in node.parents:
            if parent.name in self.skip_tags:
                return True
            if parent is root:
                break
        return False

    def collect_text_nodes(self, root: Tag) -> List[NavigableString]:
        """Snapshot of translatable-region text nodes (the root's own text included)."""
        nodes: List[NavigableString] = []
        for node in root.find_all(string=True):
            if isinstance(node, PreformattedString):
                continue
            if not node.strip():
                continue
            if self._in_skipped_region(node, root):
                continue
            nodes.append(node)
        return nodes

    def collect_segments(self, nodes: Iterable[NavigableString]) -> List[str]:
        seen: Dict[str, None] = {}
        for node in nodes:
            text = normalize(str(node))
            if text in seen or not self.classifier.needs_translation(text):
                continue
            seen[text] = None
        return list(seen)

    # ------------------------------------------------------------------
    # Translation
    # ------------------------------------------------------------------
    def _expired(self, deadline: Optional[float]) -> bool:
        return deadline is not None and self._clock() >= deadline

    async def _translate_segments(
        self, segments: List[str], deadline: Optional[float], stats: SegmentStats
    ) -> Dict[str, str]:
        translations: Dict[str, str] = {}
        offset = 0
        for batch in self.batch_translator.plan(segments):
            if self._expired(deadline):
                stats.truncated = True
                logger.info(
                    f"Translation deadline reached after {stats.batches} batches; "
                    f"{len(segments) - offset} segments left untranslated"
                )
                break
            results = await self.batch_translator.translate_planned(batch)
            stats.batches += 1
            for source, translated in zip(segments[offset : offset + len(batch)], results):
                translations[source] = translated
            offset += len(batch)
        return translations

    @staticmethod
    def _apply(nodes: Iterable[NavigableString], translations: Dict[str, str]) -> None:
        for node in nodes:
            raw = str(node)
            key = normalize(raw)
            if key not in translations:
                continue
            lead = _LEAD_WS_RE.match(raw).group(0)
            trail = _TRAIL_WS_RE.search(raw).group(0)
            node.replace_with(NavigableString(lead + translations[key] + trail))

    async def _translate_image_attributes(self, root: Tag, deadline: Optional[float]) -> None:
        for img in root.find_all("img"):
            for attr in ("alt", "title"):
                value = img.get(attr)
                if not value or not self.classifier.needs_translation(normalize(value)):
                    continue
                if self._expired(deadline):
                    return
                img[attr] = await self.client.translate_text(value)

    async def translate_in_place(
        self, fragment: Tag, source_url: str, deadline: Optional[float] = None
    ) -> SegmentStats:
        stats = SegmentStats()
        rewrite_images(fragment, source_url)

        nodes = self.collect_text_nodes(fragment)
        segments = self.collect_segments(nodes)
        if len(segments) > self.max_segments:
            logger.debug(f"Capping {len(segments)} segments at {self.max_segments}")
            segments = segments[: self.max_segments]
        stats.segments = len(segments)

        translations = await self._translate_segments(segments, deadline, stats)
        stats.changed = sum(1 for src, dst in translations.items() if src != dst)
        self._apply(nodes, translations)

        await self._translate_image_attributes(fragment, deadline)
        return stats
