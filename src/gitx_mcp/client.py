"""Unified REST client for both hosting platforms.

`GitClient` owns request construction and status normalization. Backends only
decide headers, the API base URL and two verb/media-type details, all fixed at
construction:

- 401/403 -> AuthenticationFailed (body discarded)
- 404 -> NotFound(effective URL)
- other non-2xx -> ApiFailure(status + body text)
- undecodable 2xx JSON or any transport error -> TransportFailure
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from . import __version__
from .config import Config, LimitsConfig
from .errors import api_failure, auth_failed, not_found, transport_failure
from .platform import Platform

logger = logging.getLogger(__name__)

USER_AGENT = f"gitx-mcp/{__version__}"

Query = dict[str, str] | list[tuple[str, str]]


class GitClient(ABC):
    """Capability interface shared by every tool."""

    # Media type for raw/diff downloads.
    raw_accept: str = "text/plain"
    # Verb used by post_no_content.
    no_content_method: str = "POST"
    # Query parameter carrying the page size.
    page_size_param: str = "limit"

    def __init__(
        self,
        *,
        base_url: str,
        token: str,
        limits: LimitsConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create a client bound to one platform base URL.

        Args:
            base_url: Configured host URL, without trailing slash.
            token: Access token; only ever placed in the Authorization header.
            limits: Timeouts.
            transport: Optional httpx transport for tests.
        """
        self._base_url = base_url.rstrip("/")
        self._api_base_url = self.api_base_url_for(self._base_url)
        self._headers = self.default_headers(token)
        self._limits = limits or LimitsConfig()
        self._transport = transport

    @property
    @abstractmethod
    def platform(self) -> Platform:
        """Platform this client talks to."""

    @staticmethod
    @abstractmethod
    def api_base_url_for(base_url: str) -> str:
        """Derive the REST API root from the configured host URL."""

    @abstractmethod
    def default_headers(self, token: str) -> dict[str, str]:
        """Headers sent with every request."""

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_base_url(self) -> str:
        return self._api_base_url

    def _timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            timeout=self._limits.total_timeout_s,
            connect=self._limits.connect_timeout_s,
            read=self._limits.read_timeout_s,
        )

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Query | None = None,
        json_body: Any = None,
        accept: str | None = None,
    ) -> httpx.Response:
        url = f"{self._api_base_url}{path}"
        headers = dict(self._headers)
        if accept is not None:
            headers["Accept"] = accept

        logger.debug("%s %s", method, url)
        try:
            async with httpx.AsyncClient(
                follow_redirects=True,
                timeout=self._timeout(),
                transport=self._transport,
            ) as client:
                resp = await client.request(method, url, headers=headers, params=params, json=json_body)
        except httpx.HTTPError as exc:
            raise transport_failure(str(exc) or type(exc).__name__) from exc

        if resp.status_code in (401, 403):
            raise auth_failed(status_code=resp.status_code)
        if resp.status_code == 404:
            raise not_found(str(resp.request.url))
        if not resp.is_success:
            raise api_failure(resp.status_code, resp.content.decode("utf-8", errors="replace"))
        return resp

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        if not resp.content.strip():
            return None
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise transport_failure(f"invalid JSON in response: {exc}") from exc

    async def get_json(self, path: str, query: Query | None = None) -> Any:
        resp = await self._send("GET", path, params=query)
        return self._decode(resp)

    async def get_raw(self, path: str) -> str:
        """GET a text/diff body, returned verbatim."""
        resp = await self._send("GET", path, accept=self.raw_accept)
        return resp.text

    async def post_json(self, path: str, body: Any) -> Any:
        resp = await self._send("POST", path, json_body=body)
        return self._decode(resp)

    async def post_no_content(self, path: str, body: Any) -> None:
        """Send a state-changing request whose response body is ignored."""
        await self._send(self.no_content_method, path, json_body=body)

    async def put_json(self, path: str, body: Any) -> Any:
        resp = await self._send("PUT", path, json_body=body)
        return self._decode(resp)

    async def patch_json(self, path: str, body: Any) -> Any:
        resp = await self._send("PATCH", path, json_body=body)
        return self._decode(resp)

    async def delete(self, path: str) -> None:
        await self._send("DELETE", path)

    async def delete_with_body(self, path: str, body: Any) -> None:
        await self._send("DELETE", path, json_body=body)


def create_client(config: Config, *, transport: httpx.AsyncBaseTransport | None = None) -> GitClient:
    """Build the backend matching `config.platform`."""
    # Imported here: both backends subclass GitClient from this module.
    from .gitea_client import GiteaClient
    from .github_client import GitHubClient

    if config.platform is Platform.GITHUB:
        return GitHubClient(base_url=config.base_url, token=config.token, limits=config.limits, transport=transport)
    return GiteaClient(base_url=config.base_url, token=config.token, limits=config.limits, transport=transport)
