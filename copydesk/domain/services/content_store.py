"""
Content stores: where a campaign's canonical markdown is persisted.

The external task tracker keeps the email table in a task's description
field. Stores only move strings; they never parse them.
"""

import logging
from typing import Dict, Optional, Protocol

import httpx

from copydesk.domain.models.errors import ContentStoreError
from copydesk.domain.services.markdown_table_pure import (
    reconstruct_markdown_table,
    sanitize_markdown_for_tracker,
)


logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    """Source and sink of campaign content."""

    async def fetch(self, campaign_id: str) -> str:
        ...

    async def store(self, campaign_id: str, content: str) -> None:
        ...


class InMemoryContentStore:
    """In-memory content store for testing and local runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._contents: Dict[str, str] = dict(initial or {})

    async def fetch(self, campaign_id: str) -> str:
        return self._contents.get(campaign_id, "")

    async def store(self, campaign_id: str, content: str) -> None:
        self._contents[campaign_id] = content

    def get(self, campaign_id: str) -> Optional[str]:
        return self._contents.get(campaign_id)


class TrackerContentStore:
    """Task tracker REST API store: GET/PUT /task/{id} description field."""

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Tracker API root, e.g. https://api.clickup.com/api/v2
            api_token: Token sent in the Authorization header
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Authorization": self._api_token,
                "Content-Type": "application/json",
            },
        )

    async def _request(self, method: str, campaign_id: str, **kwargs) -> httpx.Response:
        try:
            async with self._client() as client:
                response = await client.request(method, f"/task/{campaign_id}", **kwargs)
        except httpx.TimeoutException as e:
            raise ContentStoreError(f"Tracker request timed out: {e}")
        except httpx.RequestError as e:
            raise ContentStoreError(f"Tracker request failed: {e}")

        if response.status_code >= 400:
            logger.warning(
                f"Tracker {method} for task {campaign_id} failed with {response.status_code}"
            )
            raise ContentStoreError(
                f"Tracker returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    async def fetch(self, campaign_id: str) -> str:
        response = await self._request("GET", campaign_id)
        data = response.json()
        description = (data.get("markdown_description") or data.get("description") or "").strip()
        # Human edits in the tracker can break cells across lines
        return reconstruct_markdown_table(description)

    async def store(self, campaign_id: str, content: str) -> None:
        payload = {"description": sanitize_markdown_for_tracker(content)}
        await self._request("PUT", campaign_id, json=payload)
        logger.info(f"Saved content for task {campaign_id} ({len(content)} chars)")
