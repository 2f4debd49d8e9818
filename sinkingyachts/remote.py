"""HTTP client for the Sinking Yachts reputation API."""

from __future__ import annotations

import json
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from .constants import API_URL, API_VERSION, REQUEST_TIMEOUT, USER_AGENT
from .errors import RemoteError
from .models import Change

logger = logging.getLogger(__name__)


class ReputationRemote:
    """
    Thin wrapper around the reputation API endpoints.

    Provides:
    - Shared httpx client with the identity header on every request
    - Non-2xx responses and unreadable bodies raised as RemoteError
    - Transport errors (timeouts, connection failures) propagated as httpx errors
    """

    def __init__(
        self,
        identity: str,
        *,
        api_url: str = API_URL,
        api_version: int = API_VERSION,
        timeout: float = REQUEST_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.identity = identity
        self.base_url = f"{api_url.rstrip('/')}/v{api_version}"
        self.timeout_seconds = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout_seconds),
                headers={"X-Identity": self.identity, "User-Agent": USER_AGENT},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get_text(self, path: str, action: str) -> tuple[int, str]:
        client = await self._get_client()
        resp = await client.get(path)
        text = resp.text
        if not resp.is_success:
            raise RemoteError(
                resp.status_code,
                f"Unexpected response while {action}",
                response_body=text,
            )
        return resp.status_code, text

    async def fetch_full_list(self) -> list[str]:
        """Fetch every domain in the phishing database."""
        _, text = await self._get_text("/text", "fetching all phishing domains")
        return [line.strip() for line in text.split("\n") if line.strip()]

    async def check_domain(self, domain: str) -> bool:
        """Ask the API whether a single domain is a known phish."""
        status, text = await self._get_text(f"/check/{quote(domain, safe='')}", f"checking {domain}")
        value = text.strip().lower()
        if value not in ("true", "false"):
            raise RemoteError(status, f"Couldn't parse {text!r} as a verdict for {domain}", text)
        return value == "true"

    async def fetch_database_size(self) -> int:
        """Fetch the total number of flagged domains."""
        status, text = await self._get_text("/dbsize", "fetching database size")
        try:
            return int(text.strip())
        except ValueError:
            raise RemoteError(status, f"Couldn't parse {text!r} as domain count", text) from None

    async def fetch_recent(self, seconds: int) -> list[Change]:
        """Fetch the domains added or deleted within the last `seconds` seconds."""
        status, text = await self._get_text(f"/recent/{seconds}", "fetching recent changes")
        try:
            data = json.loads(text)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            return [Change.from_dict(item) for item in data]
        except ValueError as e:
            raise RemoteError(
                status,
                f"Failed to deserialize database changes: {type(e).__name__} => {e}",
                text,
            ) from e
