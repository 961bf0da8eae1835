"""Substring search over the in-memory catalog."""

from typing import List

from dashbot.integrations.contracts.bi_server import Catalog, CatalogEntry, SearchResult


def search(catalog: Catalog, query: str, limit: int) -> SearchResult:
    """
    Case-insensitive substring match on display names, in catalog order.

    Stops scanning once `limit` matches are collected. `truncated` is set
    whenever the cap was reached, so exactly `limit` matches and "more than
    `limit`" look the same to the caller.
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    needle = query.lower()
    matches: List[CatalogEntry] = []
    for entry in catalog:
        if needle in entry.display_name.lower():
            matches.append(entry)
            if len(matches) >= limit:
                break
    return SearchResult(matches=tuple(matches), truncated=len(matches) >= limit)
