"""
Linear undo/redo history of serialized email content, per campaign.

States:
    Empty        no campaign bound yet
    Initialized  one "Initial version" seeded from the campaign's content
    Edited       one or more versions appended

Adding a version while rewound discards everything after the current index.
Binding a different campaign key resets the history; re-binding the same
key (a save) does not.
"""

import logging
from typing import List, Optional, Tuple, Union

from copydesk.domain.models.email_table import (
    EmailVersion,
    IdSource,
    VersionSource,
    default_id_source,
)
from copydesk.domain.models.errors import VersionHistoryError

logger = logging.getLogger(__name__)

INITIAL_VERSION_DESCRIPTION = "Initial version"


class VersionHistory:
    """Undo/redo stack of full-content snapshots keyed by campaign id."""

    def __init__(self, id_source: Optional[IdSource] = None):
        self._id_source = id_source or default_id_source()
        self._versions: List[EmailVersion] = []
        self._index = 0
        self._key: Optional[str] = None
        self._bound = False
        self._initial_content = ""

    # -- binding -------------------------------------------------------------

    def bind(self, key: Optional[str], content: str) -> bool:
        """
        Bind the history to a campaign.

        Returns True when the history was reset (first bind or a different
        key). Content for the same key is treated as a save and ignored.
        """
        if self._bound and key == self._key:
            return False

        logger.info(f"Resetting version history for campaign {key}")
        self._key = key
        self._bound = True
        self._initial_content = content
        self._versions = [self._make_version(
            content, VersionSource.USER, INITIAL_VERSION_DESCRIPTION
        )]
        self._index = 0
        return True

    @property
    def key(self) -> Optional[str]:
        return self._key

    @property
    def is_bound(self) -> bool:
        return self._bound

    # -- state ---------------------------------------------------------------

    @property
    def versions(self) -> Tuple[EmailVersion, ...]:
        return tuple(self._versions)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_version(self) -> Optional[EmailVersion]:
        if not self._versions:
            return None
        return self._versions[self._index]

    @property
    def current_content(self) -> str:
        version = self.current_version
        return version.content if version else self._initial_content

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._versions) - 1

    def __len__(self) -> int:
        return len(self._versions)

    # -- transitions ---------------------------------------------------------

    def add_version(
        self,
        content: str,
        source: Union[VersionSource, str] = VersionSource.USER,
        description: Optional[str] = None,
    ) -> EmailVersion:
        """Truncate the redo branch, append, and move to the new tip."""
        if not self._bound:
            raise VersionHistoryError("Version history is not bound to a campaign")

        version = self._make_version(content, VersionSource(source), description)
        self._versions = self._versions[: self._index + 1] + [version]
        self._index = len(self._versions) - 1
        return version

    def undo(self) -> bool:
        if not self.can_undo:
            return False
        self._index -= 1
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            return False
        self._index += 1
        return True

    def go_to_version(self, index: int) -> bool:
        """Move the current position. Out-of-range indices are ignored."""
        if 0 <= index < len(self._versions):
            self._index = index
            return True
        return False

    def restore_version(self, index: int) -> Optional[EmailVersion]:
        """
        Make version `index` current and record it as a new version.

        Viewing a version alone does not rewrite history; restoring does.
        """
        if not self.go_to_version(index):
            return None
        content = self._versions[index].content
        return self.add_version(
            content, VersionSource.USER, f"Restored version {index + 1}"
        )

    def _make_version(
        self,
        content: str,
        source: VersionSource,
        description: Optional[str],
    ) -> EmailVersion:
        return EmailVersion(
            id=self._id_source.next_id("v"),
            content=content,
            source=source,
            description=description,
        )
