from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, List, Optional, Tuple

# contentUrl values look like "Workbook/sheets/View"; the render path drops "sheets/".
SHEETS_SEGMENT = "sheets/"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FulfillmentState(str, Enum):
    ACCEPTED = "ACCEPTED"
    FETCHING = "FETCHING"
    DELIVERING = "DELIVERING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REJECTED = "REJECTED"


# ---------------------------------------------------------------------------
# BI server data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Session:
    auth_token: str
    site_id: str

    def __repr__(self) -> str:
        return f"Session(auth_token='***', site_id={self.site_id!r})"


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    display_name: str
    render_key: str

    @classmethod
    def from_view(cls, view_id: str, name: str, content_url: str) -> "CatalogEntry":
        return cls(id=view_id, display_name=name, render_key=content_url.replace(SHEETS_SEGMENT, "", 1))


@dataclass(frozen=True)
class Pagination:
    page_number: int
    page_size: int
    total_available: int

    @property
    def has_more(self) -> bool:
        return self.page_number * self.page_size < self.total_available


@dataclass
class ViewsPage:
    entries: List[CatalogEntry]
    pagination: Pagination

    @property
    def has_more(self) -> bool:
        return self.pagination.has_more


@dataclass(frozen=True)
class Catalog:
    entries: Tuple[CatalogEntry, ...] = ()
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self.entries)


@dataclass(frozen=True)
class SearchResult:
    matches: Tuple[CatalogEntry, ...]
    truncated: bool


# ---------------------------------------------------------------------------
# Fulfillment
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectionRequest:
    render_key: str
    delivery_target: str                 # chat channel id
    response_url: str                    # where progress messages go
    user_id: Optional[str] = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class FulfillmentOutcome:
    request: SelectionRequest
    state: FulfillmentState
    error: Optional[str] = None
