"""FastAPI dependency injection for API endpoints."""

import logging
from functools import lru_cache
from typing import Dict, Optional

from copydesk.core.config import Settings, get_settings
from copydesk.domain.models.email_table import IdSource
from copydesk.domain.services.content_store import (
    ContentStore,
    InMemoryContentStore,
    TrackerContentStore,
)
from copydesk.domain.services.email_table_editor import EmailTableEditor

logger = logging.getLogger(__name__)


class EditorRegistry:
    """One editor session per campaign, sharing a content store."""

    def __init__(self, content_store: ContentStore, id_source: Optional[IdSource] = None):
        self._store = content_store
        self._id_source = id_source
        self._editors: Dict[str, EmailTableEditor] = {}

    @property
    def content_store(self) -> ContentStore:
        return self._store

    def get(self, campaign_id: str) -> Optional[EmailTableEditor]:
        return self._editors.get(campaign_id)

    def get_or_create(self, campaign_id: str) -> EmailTableEditor:
        editor = self._editors.get(campaign_id)
        if editor is None:
            editor = EmailTableEditor(content_store=self._store, id_source=self._id_source)
            self._editors[campaign_id] = editor
        return editor

    def discard(self, campaign_id: str) -> Optional[EmailTableEditor]:
        """Drop a campaign's session. Returns the removed editor, if any."""
        return self._editors.pop(campaign_id, None)

    def __contains__(self, campaign_id: str) -> bool:
        return campaign_id in self._editors

    def __len__(self) -> int:
        return len(self._editors)


def build_content_store(settings: Settings) -> ContentStore:
    """Tracker-backed store when configured, in-memory otherwise."""
    if settings.tracker_enabled:
        return TrackerContentStore(
            base_url=settings.tracker_api_url,
            api_token=settings.tracker_api_token,
            timeout=settings.tracker_timeout_seconds,
        )
    logger.info("TRACKER_API_URL not set, using in-memory content store")
    return InMemoryContentStore()


@lru_cache
def get_content_store() -> ContentStore:
    """Get the content store (cached)."""
    return build_content_store(get_settings())


@lru_cache
def get_editor_registry() -> EditorRegistry:
    """Get the process-wide editor registry (cached)."""
    return EditorRegistry(content_store=get_content_store())


def clear_caches() -> None:
    """Clear cached dependencies (for testing)."""
    get_content_store.cache_clear()
    get_editor_registry.cache_clear()
