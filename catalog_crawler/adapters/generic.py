from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from .base import ProductCandidate
from ..utils.parsing import resolve_url, visible_text

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 800
CARD_TAGS = ["a", "div", "li", "article"]

# Broad filter: a currency symbol followed by digits, or any number with a 2-digit decimal group.
PRICE_LIKE = re.compile(r"(R\$|\$|€)\s*\d+|(\d+([.,]\d{2}))", re.ASCII)
# Narrow extraction: what we actually hand to the price normalizer.
PRICE_TEXT = re.compile(r"(R\$|\$|€)?\s*\d{1,5}([.,]\d{2})", re.ASCII)

# Attribute stamped by the page controller with the image's resolved currentSrc.
CURRENT_SRC_ATTR = "data-current-src"


class GenericCardAdapter:
    """
    Site-agnostic product card heuristic.

    Any anchor/div/list-item/article that contains an image and whose visible
    text looks like it carries a price is a candidate. Wrappers around several
    cards match too, and products whose price is not in the card's own text
    are missed; both are accepted for a selector-free crawler.
    """

    def __init__(self, max_candidates: int = MAX_CANDIDATES) -> None:
        self.max_candidates = max_candidates

    def extract(self, url: str, html: str) -> List[ProductCandidate]:
        soup = BeautifulSoup(html, "html.parser")
        results: List[ProductCandidate] = []
        scanned = 0
        for el in soup.find_all(CARD_TAGS):
            if len(results) >= self.max_candidates:
                logger.debug("Candidate cap (%s) reached on %s", self.max_candidates, url)
                break
            scanned += 1
            candidate = self._candidate_from(el, url)
            if candidate is not None:
                results.append(candidate)

        logger.debug("Scanned %s elements on %s, kept %s candidates", scanned, url, len(results))
        return results

    # ---- Element helpers ----------------------------------------------------

    def _candidate_from(self, el: Tag, base_url: str) -> Optional[ProductCandidate]:
        img = el.find("img")
        if img is None:
            return None

        text = visible_text(el)
        if len(text) < 4 or not PRICE_LIKE.search(text):
            return None

        name = text.split("\n", 1)[0]
        match = PRICE_TEXT.search(text)
        price_text = match.group(0) if match else ""

        return ProductCandidate(
            name=name,
            price_text=price_text,
            image_url=self._image_url(img, base_url),
            link=self._link(el, base_url),
        )

    def _image_url(self, img: Tag, base_url: str) -> str:
        current = str(img.get(CURRENT_SRC_ATTR) or "").strip()
        if current:
            return current
        return resolve_url(base_url, img.get("src"))

    def _link(self, el: Tag, base_url: str) -> str:
        href = el.get("href")
        if not href:
            anchor = el.find("a")
            href = anchor.get("href") if anchor is not None else None
        return resolve_url(base_url, href)
