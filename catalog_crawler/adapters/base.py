from __future__ import annotations

from dataclasses import dataclass
from typing import List, Protocol


@dataclass(frozen=True)
class ProductCandidate:
    """An element judged to look like a product card, with its raw texts."""

    name: str
    price_text: str
    image_url: str
    link: str = ""


class CardExtractor(Protocol):
    """
    Interface for turning a rendered page snapshot into product candidates.
    Implementations must be pure: same (url, html) in, same candidates out.
    """

    def extract(self, url: str, html: str) -> List[ProductCandidate]:
        """
        Given the page URL and its serialized DOM, return candidates in document order.
        The session owns the browser; extractors never touch it.
        """
        ...
