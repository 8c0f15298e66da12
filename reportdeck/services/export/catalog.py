import asyncio
import logging

from reportdeck.models.report_models import CatalogEntry
from reportdeck.services.export.client import GammaClient
from reportdeck.services.export.payloads import ThemePage

logger = logging.getLogger(__name__)


class CatalogFetcher:
    """Assembles the full presentation-theme catalog from the cursor-paginated listing.

    The result is memoized for the lifetime of the instance (one report
    session) until ``reset`` is called. A failed fetch caches nothing.
    """

    def __init__(self, client: GammaClient, page_size: int | None = None, max_pages: int | None = None):
        self.client = client
        self.page_size = page_size or client.cfg.catalog_page_size
        self.max_pages = max_pages or client.cfg.catalog_max_pages
        self._entries: list[CatalogEntry] | None = None
        self._lock = asyncio.Lock()
        self._generation = 0

    @property
    def cached(self) -> bool:
        return self._entries is not None

    def reset(self) -> None:
        self._entries = None
        self._generation += 1

    async def fetch_all(self) -> list[CatalogEntry]:
        async with self._lock:
            if self._entries is not None:
                return list(self._entries)
            generation = self._generation
            entries = await self._fetch_pages()
            # A reset during the fetch means these pages belong to the previous session
            if generation == self._generation:
                self._entries = entries
            return list(entries)

    async def _fetch_pages(self) -> list[CatalogEntry]:
        entries: list[CatalogEntry] = []
        cursor: str | None = None

        for page_number in range(1, self.max_pages + 1):
            params: dict[str, str | int] = {"limit": self.page_size}
            if cursor:
                params["after"] = cursor
            page = await self.client.get("themes", params=params, response_model=ThemePage)

            entries.extend(page.data or [])
            logger.debug("Fetched catalog page %d (%d entries so far)", page_number, len(entries))

            if not page.has_more:
                return entries
            next_cursor = page.next_cursor
            if not next_cursor or next_cursor == cursor:
                logger.warning("Catalog reports more pages but the cursor did not advance (%r); stopping.", next_cursor)
                return entries
            cursor = next_cursor

        logger.warning("Catalog listing still reports more pages after %d pages; stopping.", self.max_pages)
        return entries
