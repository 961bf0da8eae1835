"""
BI Server HTTP Client.

Purpose:
- Signs in to the BI server REST API and returns a Session
- Lists views page by page (XML bodies, header-based auth)
- Fetches rendered view images (cookie-based auth on the /views path)

Implementation notes:
- One shared httpx.AsyncClient per process; every call is bounded by the
  configured request timeout
- Transport and status failures surface as httpx exceptions; malformed bodies
  raise BIServerResponseError. The catalog layer maps both to domain errors.

Important:
- This client is the ONLY place that talks HTTP to the BI server.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional
from urllib.parse import quote
from xml.sax.saxutils import quoteattr

import httpx
from bs4 import BeautifulSoup

from dashbot.error_handler import BIServerResponseError
from dashbot.integrations.contracts.bi_server import CatalogEntry, Pagination, Session, ViewsPage

logger = logging.getLogger(__name__)

AUTH_HEADER = "X-Tableau-Auth"
SESSION_COOKIE = "workgroup_session_id"
RENDER_PARAMS: Dict[str, str] = {
    ":embed": "y",
    ":refresh": "yes",
    ":highdpi": "true",
    ":size": "1920,1080",
}


class BIServerClient:
    def __init__(
        self,
        base_url: str,
        api_version: str = "3.0",
        site_content_url: str = "",
        timeout_seconds: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.site_content_url = site_content_url
        self.timeout_seconds = timeout_seconds
        self._client = http_client or httpx.AsyncClient(
            timeout=timeout_seconds,
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=64),
        )

    @classmethod
    def from_config(cls, cfg) -> "BIServerClient":
        return cls(
            base_url=cfg.base_url,
            api_version=cfg.api_version,
            site_content_url=cfg.site_content_url,
            timeout_seconds=cfg.request_timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _api_url(self, path: str) -> str:
        return f"{self.base_url}/api/{self.api_version}/{path.lstrip('/')}"

    async def sign_in(self, login: str, password: str) -> Session:
        body = (
            f"<tsRequest><credentials name={quoteattr(login)} password={quoteattr(password)}>"
            f"<site contentUrl={quoteattr(self.site_content_url)} /></credentials></tsRequest>"
        )
        url = self._api_url("auth/signin")
        logger.info("Signing in to BI server at %s as %s", url, login)
        response = await self._client.post(url, content=body.encode("utf-8"), headers={"Content-Type": "application/xml"})
        response.raise_for_status()
        return parse_sign_in_response(response.text)

    async def list_views(self, session: Session, page_number: int, page_size: int) -> ViewsPage:
        url = self._api_url(f"sites/{session.site_id}/views")
        params = {"pageSize": str(page_size), "pageNumber": str(page_number)}
        headers = {"Content-Type": "application/xml", AUTH_HEADER: session.auth_token}
        logger.debug("Listing views page=%d size=%d", page_number, page_size)
        response = await self._client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return parse_views_response(response.text)

    async def fetch_view_image(self, session: Session, render_key: str) -> bytes:
        url = f"{self.base_url}/views/{quote(render_key, safe='/')}.png"
        headers = {"Cookie": f"{SESSION_COOKIE}={session.auth_token}", "Connection": "keep-alive"}
        logger.info("Fetching rendered view %s", render_key)
        response = await self._client.get(url, params=RENDER_PARAMS, headers=headers)
        response.raise_for_status()
        return response.content


def _soup(text: str) -> BeautifulSoup:
    if not text or not text.strip():
        raise BIServerResponseError("Empty response body from BI server")
    # lxml refuses str input that carries an encoding declaration.
    return BeautifulSoup(text.encode("utf-8"), "xml")


def _int_attr(tag, name: str, payload: str) -> int:
    raw = tag.get(name)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise BIServerResponseError(f"pagination attribute '{name}' is not an integer: {raw!r}", payload=payload)


def parse_sign_in_response(text: str) -> Session:
    soup = _soup(text)
    credentials = soup.find("credentials")
    if credentials is None:
        raise BIServerResponseError("sign-in response has no <credentials> element", payload=text)
    site = credentials.find("site")
    token = credentials.get("token")
    site_id = site.get("id") if site is not None else None
    if not token or not site_id:
        raise BIServerResponseError("sign-in response is missing the token or site id", payload=text)
    return Session(auth_token=token, site_id=site_id)


def parse_views_response(text: str) -> ViewsPage:
    soup = _soup(text)
    pagination_tag = soup.find("pagination")
    if pagination_tag is None:
        raise BIServerResponseError("views response has no <pagination> element", payload=text)
    pagination = Pagination(
        page_number=_int_attr(pagination_tag, "pageNumber", text),
        page_size=_int_attr(pagination_tag, "pageSize", text),
        total_available=_int_attr(pagination_tag, "totalAvailable", text),
    )

    entries: List[CatalogEntry] = []
    views = soup.find("views")
    if views is not None:
        for view in views.find_all("view", recursive=False):
            entries.append(
                CatalogEntry.from_view(
                    view_id=view.get("id", ""),
                    name=view.get("name", ""),
                    content_url=view.get("contentUrl", ""),
                )
            )
    return ViewsPage(entries=entries, pagination=pagination)
