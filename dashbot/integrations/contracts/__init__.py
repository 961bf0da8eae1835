"""
Contracts (data models).

This folder defines the shapes exchanged with external systems:
- BI server sessions, catalog pages and catalog entries
- Slack event and interaction payloads
- Fulfillment requests and their outcomes

Both mock and real HTTP clients return these types, so the catalog and bot
layers never handle raw XML or JSON.
"""

from .bi_server import (
    Catalog,
    CatalogEntry,
    FulfillmentOutcome,
    FulfillmentState,
    Pagination,
    SearchResult,
    SelectionRequest,
    Session,
    ViewsPage,
)

__all__ = [
    "Catalog", "CatalogEntry", "FulfillmentOutcome", "FulfillmentState",
    "Pagination", "SearchResult", "SelectionRequest", "Session", "ViewsPage",
]
