"""
Rendered view fetching.

The whole image is buffered in memory before it is handed to the chat
upload, so per-request memory is bounded by the image size.
"""

from __future__ import annotations

import io
import logging

import httpx

from dashbot.error_handler import AuthError, RenderFetchError
from dashbot.integrations.contracts.bi_server import Session

logger = logging.getLogger(__name__)

EXPIRED_SESSION_STATUSES = {401, 403}


class ViewRenderer:
    def __init__(self, client, sessions=None, reauthenticate_on_expiry: bool = False) -> None:
        if reauthenticate_on_expiry and sessions is None:
            raise ValueError("reauthenticate_on_expiry requires a SessionManager")
        self.client = client
        self.sessions = sessions
        self.reauthenticate_on_expiry = reauthenticate_on_expiry

    async def render(self, session: Session, render_key: str) -> io.BytesIO:
        try:
            return await self._fetch(session, render_key)
        except RenderFetchError as e:
            if not (self.reauthenticate_on_expiry and e.status_code in EXPIRED_SESSION_STATUSES):
                raise
        # One re-authentication, one retry.
        try:
            fresh = await self.sessions.reauthenticate(session)
        except AuthError as e:
            raise RenderFetchError(f"re-authentication for {render_key!r} failed: {e}", cause=e) from e
        return await self._fetch(fresh, render_key)

    async def _fetch(self, session: Session, render_key: str) -> io.BytesIO:
        try:
            content = await self.client.fetch_view_image(session, render_key)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RenderFetchError(
                f"render of {render_key!r} failed with status {status}", cause=e, status_code=status
            ) from e
        except httpx.HTTPError as e:
            raise RenderFetchError(f"render of {render_key!r} failed: {e}", cause=e) from e
        logger.info("Fetched %d bytes for view %s", len(content), render_key)
        return io.BytesIO(content)
