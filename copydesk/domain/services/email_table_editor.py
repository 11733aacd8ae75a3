"""
Headless email table editor: the contract both editor surfaces share.

The editor owns the in-memory EmailTable for one campaign at a time plus its
version history. Every change, whether it came from a person or from the AI
edit layer, goes through _commit(), so history, the unsaved-changes flag
and change listeners stay consistent regardless of origin.

Saving is a separate, fallible step. A failed save leaves content, history
and the unsaved flag exactly as they were.
"""

import logging
from typing import Callable, Iterable, List, Optional, Union

from copydesk.domain.models.email_table import (
    EmailTable,
    EmailVersion,
    IdSource,
    PLACEHOLDER_CONTENT,
    PLACEHOLDER_SECTION,
    TableRow,
    VersionSource,
    default_id_source,
)
from copydesk.domain.models.errors import (
    ContentStoreError,
    EditorNotLoadedError,
)
from copydesk.domain.services import table_mutations
from copydesk.domain.services.content_store import ContentStore
from copydesk.domain.services.email_edit_tool import (
    EmailEditResult,
    apply_email_edit_result,
)
from copydesk.domain.services.html_table_pure import (
    normalize_content,
    parse_content,
    table_to_html,
)
from copydesk.domain.services.markdown_table_pure import (
    parse_markdown_table,
    serialize_to_markdown,
)
from copydesk.domain.services.section_operations import (
    SectionOperation,
    apply_section_operations,
)
from copydesk.domain.services.text_patches import TextPatch, apply_patch
from copydesk.domain.services.version_history import VersionHistory

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str, VersionSource, Optional[str]], None]


class EmailTableEditor:
    """In-memory editor for one campaign's structured email content."""

    def __init__(
        self,
        content_store: Optional[ContentStore] = None,
        id_source: Optional[IdSource] = None,
    ):
        self._store = content_store
        self._ids = id_source or default_id_source()
        self._history = VersionHistory(id_source=self._ids)
        self._listeners: List[ChangeListener] = []
        self._campaign_id: Optional[str] = None
        self._table: Optional[EmailTable] = None
        self._saved_content = ""

    # -- listeners -----------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> None:
        """Register a callback(content, source, description) for changes."""
        self._listeners.append(listener)

    def _notify(self, content: str, source: VersionSource, description: Optional[str]) -> None:
        for listener in self._listeners:
            listener(content, source, description)

    # -- state ---------------------------------------------------------------

    @property
    def campaign_id(self) -> Optional[str]:
        return self._campaign_id

    @property
    def history(self) -> VersionHistory:
        return self._history

    @property
    def is_loaded(self) -> bool:
        return self._table is not None

    @property
    def is_empty(self) -> bool:
        """True for a loaded table with zero rows, or when nothing is loaded."""
        return self._table is None or self._table.is_empty

    @property
    def table(self) -> EmailTable:
        self._require_loaded()
        return self._table

    @property
    def has_unsaved_changes(self) -> bool:
        return self.is_loaded and self.get_content() != self._saved_content

    def _require_loaded(self) -> None:
        if self._table is None:
            raise EditorNotLoadedError("No campaign content is loaded")

    # -- loading -------------------------------------------------------------

    def load(self, campaign_id: str, content: Optional[str]) -> bool:
        """
        Load a campaign's content as the saved baseline.

        A different campaign resets version history; reloading the same
        campaign keeps it. Returns True when history was reset.
        """
        table = parse_content(content, id_source=self._ids)
        canonical = serialize_to_markdown(table)

        reset = self._history.bind(campaign_id, canonical)
        self._campaign_id = campaign_id
        self._table = table
        self._saved_content = canonical
        logger.info(
            f"Loaded campaign {campaign_id}: {len(table)} sections"
            f"{' (history reset)' if reset else ''}"
        )
        return reset

    async def load_from_store(self, campaign_id: str) -> bool:
        """Fetch content from the content store and load it."""
        if self._store is None:
            raise ContentStoreError("No content store configured")
        content = await self._store.fetch(campaign_id)
        return self.load(campaign_id, content)

    # -- editor surface contract --------------------------------------------

    def get_content(self) -> str:
        """Current canonical markdown ("" when nothing is loaded)."""
        if self._table is None:
            return ""
        return serialize_to_markdown(self._table)

    def get_html(self) -> str:
        """Current content rendered for the rich-text surface."""
        if self._table is None:
            return ""
        return table_to_html(self._table)

    def set_content(
        self,
        content: str,
        source: Union[VersionSource, str] = VersionSource.USER,
        description: Optional[str] = None,
    ) -> str:
        """
        Replace the table with content given as markdown or HTML.

        Fires the same change path as a row edit.
        """
        self._require_loaded()
        table = parse_markdown_table(normalize_content(content), id_source=self._ids)
        return self._commit(table, VersionSource(source), description)

    # -- row edits -----------------------------------------------------------

    def update_row(self, row_id: str, **updates: str) -> str:
        return self._commit(
            table_mutations.update_row(self.table, row_id, **updates),
            VersionSource.USER,
            "Edited section",
        )

    def reorder_rows(self, new_order: Iterable[TableRow]) -> str:
        return self._commit(
            table_mutations.reorder_rows(self.table, new_order),
            VersionSource.USER,
            "Reordered sections",
        )

    def reorder_rows_by_id(self, row_ids: Iterable[str]) -> str:
        return self._commit(
            table_mutations.reorder_rows_by_id(self.table, row_ids),
            VersionSource.USER,
            "Reordered sections",
        )

    def new_row(
        self,
        section: str = PLACEHOLDER_SECTION,
        content: str = PLACEHOLDER_CONTENT,
    ) -> TableRow:
        """A detached row with an id from this editor's identity source."""
        return table_mutations.create_new_row(section, content, id_source=self._ids)

    def add_row(self, row: Optional[TableRow] = None) -> str:
        return self._commit(
            table_mutations.add_row(self.table, row, id_source=self._ids),
            VersionSource.USER,
            "Added section",
        )

    def remove_row(self, row_id: str) -> str:
        return self._commit(
            table_mutations.remove_row(self.table, row_id),
            VersionSource.USER,
            "Removed section",
        )

    # -- AI edits ------------------------------------------------------------

    def apply_section_operations(
        self,
        operations: Iterable[SectionOperation],
        description: Optional[str] = None,
    ) -> str:
        table = apply_section_operations(self.table, operations, id_source=self._ids)
        return self._commit(table, VersionSource.AI, description or "AI edit")

    def apply_patch(self, patch: TextPatch, description: Optional[str] = None) -> str:
        """Apply a raw text patch to the canonical markdown."""
        content = apply_patch(self.get_content(), patch)
        return self.set_content(content, VersionSource.AI, description or "AI edit")

    def apply_ai_result(self, result: EmailEditResult) -> str:
        """Commit a successful email_edit tool result."""
        self._require_loaded()
        content = apply_email_edit_result(self.get_content(), result, id_source=self._ids)
        return self.set_content(content, VersionSource.AI, result.explanation or "AI edit")

    # -- history -------------------------------------------------------------

    def undo(self) -> bool:
        return self._move(self._history.undo())

    def redo(self) -> bool:
        return self._move(self._history.redo())

    def go_to_version(self, index: int) -> bool:
        return self._move(self._history.go_to_version(index))

    def restore_version(self, index: int) -> Optional[EmailVersion]:
        self._require_loaded()
        version = self._history.restore_version(index)
        if version is not None:
            self._table = parse_markdown_table(version.content, id_source=self._ids)
            self._notify(version.content, version.source, version.description)
        return version

    def _move(self, moved: bool) -> bool:
        self._require_loaded()
        if moved:
            version = self._history.current_version
            self._table = parse_markdown_table(version.content, id_source=self._ids)
            self._notify(version.content, version.source, version.description)
        return moved

    # -- persistence ---------------------------------------------------------

    async def save(self) -> str:
        """
        Persist current content to the content store.

        ContentStoreError propagates to the caller; local state is untouched
        so the save can be retried.
        """
        self._require_loaded()
        if self._store is None:
            raise ContentStoreError("No content store configured")

        content = self.get_content()
        try:
            await self._store.store(self._campaign_id, content)
        except ContentStoreError as e:
            logger.warning(f"Save failed for campaign {self._campaign_id}: {e}")
            raise

        self._saved_content = content
        return content

    # -- internals -----------------------------------------------------------

    def _commit(
        self,
        table: EmailTable,
        source: VersionSource,
        description: Optional[str],
    ) -> str:
        self._table = table
        content = serialize_to_markdown(table)
        if content != self._history.current_content:
            self._history.add_version(content, source, description)
        self._notify(content, source, description)
        return content
