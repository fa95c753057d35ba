from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Sequence

from .base import CSV_DELIMITER, CSV_HEADERS, CatalogRow
from ..adapters.base import ProductCandidate
from ..engines.base import CrawlResult
from ..errors import StorageError
from ..utils.http import ImageFetcher
from ..utils.normalize import normalize_price_br, sanitize_token
from ..utils.parsing import is_http_url

logger = logging.getLogger(__name__)

_NAME_BREAKS = re.compile(r"[\r\n;]+")


def build_rows(candidates: Sequence[ProductCandidate], limit: int) -> List[CatalogRow]:
    """Rows for the first ``limit`` candidates, numbered AUTO-1, AUTO-2, ... in order."""
    rows: List[CatalogRow] = []
    for idx, candidate in enumerate(candidates[:max(limit, 0)], start=1):
        rows.append(
            CatalogRow(
                sku=f"AUTO-{idx}",
                name=_NAME_BREAKS.sub(" ", candidate.name or "").strip(),
                price=normalize_price_br(candidate.price_text),
                image=candidate.image_url or "",
            )
        )
    return rows


def render_csv(rows: Iterable[CatalogRow]) -> str:
    # Fields are joined as-is: only the name is scrubbed of delimiters.
    lines = [CSV_DELIMITER.join(CSV_HEADERS)]
    lines.extend(CSV_DELIMITER.join(row.values()) for row in rows)
    return "\n".join(lines) + "\n"


def image_filename(sku: str, image_url: str) -> str:
    ext = "png" if ".png" in image_url else "jpg"
    return f"{sanitize_token(sku)}.{ext}"


class CatalogMaterializer:
    """
    Writes the catalog CSV and downloads one image per row.
    Image problems never abort the run; only the CSV write is fatal.
    """

    def __init__(self, fetcher: ImageFetcher) -> None:
        self.fetcher = fetcher

    async def materialize(
        self,
        candidates: Sequence[ProductCandidate],
        limit: int,
        csv_path: str | Path,
        image_dir: str | Path,
    ) -> CrawlResult:
        rows = build_rows(candidates, limit)
        saved = 0
        for row in rows:
            if await self.save_image(row, Path(image_dir)):
                saved += 1

        csv_path = Path(csv_path)
        try:
            csv_path.write_text(render_csv(rows), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not write {csv_path}: {exc}") from exc

        logger.info("Wrote %s rows to %s (%s images)", len(rows), csv_path, saved)
        return CrawlResult(item_count=len(rows))

    async def save_image(self, row: CatalogRow, image_dir: Path) -> bool:
        if not is_http_url(row.image):
            if row.image:
                logger.debug("Skipping non-http image for %s: %.80s", row.sku, row.image)
            return False

        outcome = await self.fetcher.fetch(row.image)
        if not outcome.ok:
            logger.info("Image for %s not downloaded: %s", row.sku, outcome.error)
            return False

        target = image_dir / image_filename(row.sku, row.image)
        try:
            target.write_bytes(outcome.data)
        except OSError as exc:
            logger.info("Image for %s not saved to %s: %r", row.sku, target, exc)
            return False
        return True
