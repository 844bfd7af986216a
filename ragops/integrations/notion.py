"""Notion REST API client.

A narrow adapter over the four endpoints the sync worker needs. Every call goes
through the retry policy: 429 and 5xx responses are retried with a doubling
delay, any other error status raises `httpx.HTTPStatusError` immediately.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ragops.core.config import Settings, settings as default_settings
from ragops.core.exceptions import ConfigurationError
from ragops.utils.retry import Sleeper, is_retryable, retry_with_backoff

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class NotionClient:
    """Async Notion API client with rate-limit aware retries."""

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[Settings] = None,
        sleep: Optional[Sleeper] = None,
    ) -> None:
        self.settings = config or default_settings
        token = token or self.settings.NOTION_TOKEN
        if not token and client is None:
            logger.warning("NOTION_TOKEN not set. Notion sync will fail.")
        self._token = token
        self._client = client
        self._owns_client = client is None
        self.max_attempts = self.settings.NOTION_RETRY_ATTEMPTS
        self.base_delay = self.settings.NOTION_RETRY_BASE_DELAY_SECONDS
        self._sleep = sleep

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            if not self._token:
                raise ConfigurationError("NOTION_TOKEN not configured")
            self._client = httpx.AsyncClient(
                base_url=self.settings.NOTION_API_URL,
                timeout=self.settings.NOTION_TIMEOUT_SECONDS,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Notion-Version": self.settings.NOTION_VERSION,
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/pages/{page_id}")

    async def list_block_children(
        self,
        block_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page_size": min(page_size, MAX_PAGE_SIZE)}
        if start_cursor:
            params["start_cursor"] = start_cursor
        return await self._request("GET", f"/blocks/{block_id}/children", params=params)

    async def search_pages(self, *, start_cursor: Optional[str] = None, page_size: int = 50) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "page_size": min(page_size, MAX_PAGE_SIZE),
            "filter": {"property": "object", "value": "page"},
            "sort": {"direction": "descending", "timestamp": "last_edited_time"},
        }
        if start_cursor:
            body["start_cursor"] = start_cursor
        return await self._request("POST", "/search", json=body)

    async def query_database(
        self,
        database_id: str,
        *,
        start_cursor: Optional[str] = None,
        page_size: int = 50,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"page_size": min(page_size, MAX_PAGE_SIZE)}
        if start_cursor:
            body["start_cursor"] = start_cursor
        return await self._request("POST", f"/databases/{database_id}/query", json=body)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        client = self._http()

        async def call() -> Dict[str, Any]:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()

        retry_kwargs: Dict[str, Any] = {}
        if self._sleep is not None:
            retry_kwargs["sleep"] = self._sleep
        return await retry_with_backoff(
            call,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            should_retry=is_retryable,
            label=f"Notion {method} {path}",
            **retry_kwargs,
        )


__all__ = ["NotionClient", "MAX_PAGE_SIZE"]
