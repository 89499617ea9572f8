"""
Minimal async HTTP sender for the checkout backend.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx


def to_form_urlencoded(data: Mapping[str, Any]) -> str:
    """
    Encode a flat mapping as application/x-www-form-urlencoded.

    Strings are sent as-is, any other value is JSON-encoded first and None
    values are dropped.
    """
    parts = []
    for key, value in data.items():
        if value is None:
            continue
        if not isinstance(value, str):
            value = json.dumps(value, separators=(",", ":"))
        parts.append(f"{key}={quote(value, safe='')}")
    return "&".join(parts)


class HttpRequestSender:
    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url.rstrip("/")
        # A shared client is never closed here; an owned one is closed in close().
        if client is not None:
            self.client = client
            self._owns_client = False
        else:
            self.client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
            self._owns_client = True

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def post(
        self,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
    ) -> httpx.Response:
        """POST a form-encoded body and raise on HTTP error status."""
        content = to_form_urlencoded(body) if body is not None else None
        resp = await self.client.post(path, headers=dict(headers or {}), content=content)
        resp.raise_for_status()
        return resp
