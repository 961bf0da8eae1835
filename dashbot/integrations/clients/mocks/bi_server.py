"""
BI Server: MOCK client.

⚠️  This is a mock implementation for development and testing.
    It serves an in-memory view catalog with real pagination metadata and
    returns a tiny placeholder PNG for every render request.
    Select it with INTEGRATIONS_MODE=mock.
"""

import logging
import uuid
from typing import List, Optional, Sequence, Tuple

from dashbot.integrations.contracts.bi_server import CatalogEntry, Pagination, Session, ViewsPage

logger = logging.getLogger(__name__)

# 1x1 transparent PNG
PLACEHOLDER_PNG = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63000100000500010d0a2db40000000049454e44ae426082"
)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

_MOCK_VIEWS: List[Tuple[str, str]] = [
    ("Q1 Sales Report", "SalesOverview/sheets/Q1SalesReport"),
    ("Q2 Sales Report", "SalesOverview/sheets/Q2SalesReport"),
    ("Orders per Region", "Operations/sheets/OrdersperRegion"),
    ("Delivery Time Dashboard", "Operations/sheets/DeliveryTimeDashboard"),
    ("Customer Churn", "Retention/sheets/CustomerChurn"),
    ("Marketing Spend", "Marketing/sheets/MarketingSpend"),
]


class MockBIServerClient:
    def __init__(
        self,
        views: Optional[Sequence[Tuple[str, str]]] = None,
        image: bytes = PLACEHOLDER_PNG,
    ) -> None:
        self._entries = [
            CatalogEntry.from_view(view_id=str(uuid.uuid5(uuid.NAMESPACE_URL, url)), name=name, content_url=url)
            for name, url in (views if views is not None else _MOCK_VIEWS)
        ]
        self._image = image
        self.site_id = "mock-site"

    async def sign_in(self, login: str, password: str) -> Session:
        logger.info(f"[MOCK] Signing in as {login}")
        return Session(auth_token=f"mock-token-{uuid.uuid4().hex[:8]}", site_id=self.site_id)

    async def list_views(self, session: Session, page_number: int, page_size: int) -> ViewsPage:
        start = (page_number - 1) * page_size
        chunk = self._entries[start : start + page_size]
        logger.info(f"[MOCK] Listing views page {page_number} ({len(chunk)} entries)")
        return ViewsPage(
            entries=list(chunk),
            pagination=Pagination(page_number=page_number, page_size=page_size, total_available=len(self._entries)),
        )

    async def fetch_view_image(self, session: Session, render_key: str) -> bytes:
        logger.info(f"[MOCK] Rendering view {render_key}")
        return self._image

    async def aclose(self) -> None:
        return None
