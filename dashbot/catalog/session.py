"""
BI session ownership.

The SessionManager is the only writer of the current Session. Every other
component reads it through `current`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from dashbot.error_handler import AuthError, BIServerResponseError
from dashbot.integrations.contracts.bi_server import Session

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, client) -> None:
        self.client = client
        self._session: Optional[Session] = None
        self._credentials: Optional[tuple] = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> Session:
        if self._session is None:
            raise AuthError("No BI session established; authenticate() must run first")
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    async def authenticate(self, login: str, password: str) -> Session:
        """Sign in and make the resulting Session the process-wide current one."""
        async with self._lock:
            session = await self._sign_in(login, password)
            self._credentials = (login, password)
            self._session = session
            return session

    async def reauthenticate(self, stale: Session) -> Session:
        """
        Replace `stale` with a fresh Session.

        Concurrent callers holding the same stale session get the refreshed
        one without signing in again.
        """
        async with self._lock:
            if self._session is not None and self._session != stale:
                return self._session
            if self._credentials is None:
                raise AuthError("Cannot re-authenticate before the first authenticate()")
            logger.warning("BI session rejected; signing in again")
            self._session = await self._sign_in(*self._credentials)
            return self._session

    async def _sign_in(self, login: str, password: str) -> Session:
        try:
            session = await self.client.sign_in(login, password)
        except httpx.HTTPStatusError as e:
            raise AuthError(f"BI sign-in rejected with status {e.response.status_code}", cause=e) from e
        except httpx.HTTPError as e:
            raise AuthError(f"BI sign-in request failed: {e}", cause=e) from e
        except BIServerResponseError as e:
            raise AuthError(f"BI sign-in returned a malformed response: {e}", cause=e) from e
        logger.info("Authenticated to BI server (site=%s)", session.site_id)
        return session
