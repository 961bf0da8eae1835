"""
Catalog loading: page through the BI server's view list into one immutable snapshot.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from dashbot.error_handler import BIServerResponseError, CatalogLoadError
from dashbot.integrations.contracts.bi_server import Catalog, CatalogEntry, Session

logger = logging.getLogger(__name__)

VIEWS_PAGE_SIZE = 1000


class CatalogLoader:
    def __init__(self, client, page_size: int = VIEWS_PAGE_SIZE) -> None:
        self.client = client
        self.page_size = page_size

    async def load_all(self, session: Session) -> Catalog:
        """
        Fetch every page of views, in order, and return them as one Catalog.

        Pages are requested strictly sequentially: page N+1 is only asked for
        when page N's pagination block says it exists. Any failed page
        aborts the whole pass; nothing partial is returned.
        """
        entries: List[CatalogEntry] = []
        page_number = 1
        while True:
            try:
                page = await self.client.list_views(session, page_number, self.page_size)
            except httpx.HTTPStatusError as e:
                raise CatalogLoadError(
                    f"views page {page_number} rejected with status {e.response.status_code}", cause=e
                ) from e
            except (httpx.HTTPError, BIServerResponseError) as e:
                raise CatalogLoadError(f"views page {page_number} failed: {e}", cause=e) from e

            entries.extend(page.entries)
            p = page.pagination
            logger.debug(
                "Loaded views page %d: %d entries (%d of %d)",
                p.page_number, len(page.entries), p.page_number * p.page_size, p.total_available,
            )
            if not page.has_more:
                break
            if not page.entries:
                raise CatalogLoadError(
                    f"views page {page_number} was empty but the server reports {p.total_available} views"
                )
            page_number += 1

        logger.info("Catalog loaded: %d views from %d page(s)", len(entries), page_number)
        return Catalog(entries=tuple(entries))


class CatalogStore:
    """Holds the current Catalog snapshot. Replaced wholesale, never mutated."""

    def __init__(self, catalog: Optional[Catalog] = None) -> None:
        self._catalog = catalog if catalog is not None else Catalog()

    @property
    def current(self) -> Catalog:
        return self._catalog

    def swap(self, catalog: Catalog) -> Catalog:
        previous, self._catalog = self._catalog, catalog
        return previous
