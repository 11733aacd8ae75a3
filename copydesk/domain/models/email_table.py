"""Structured email table models.

A campaign email is an ordered table of named sections. Each section is a
TableRow with a stable identity; the table itself is an immutable value so
that every mutation produces a new EmailTable.
"""

import itertools
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, Optional, Protocol, Tuple


# ---------------------------------------------------------------------------
# Identity sources
# ---------------------------------------------------------------------------

class IdSource(Protocol):
    """Produces collision-resistant identifiers for rows and versions."""

    def next_id(self, prefix: str = "row") -> str:
        ...


class UuidIdSource:
    """Default identity source backed by uuid4."""

    def next_id(self, prefix: str = "row") -> str:
        return f"{prefix}-{uuid.uuid4().hex}"


class CounterIdSource:
    """Monotonic identity source. Deterministic, used in tests."""

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def next_id(self, prefix: str = "row") -> str:
        return f"{prefix}-{next(self._counter)}"


_default_id_source: IdSource = UuidIdSource()


def default_id_source() -> IdSource:
    return _default_id_source


# ---------------------------------------------------------------------------
# Rows and tables
# ---------------------------------------------------------------------------

PLACEHOLDER_SECTION = "[section goes here]"
PLACEHOLDER_CONTENT = "[content goes here]"


@dataclass(frozen=True)
class TableRow:
    """One named section of an email."""
    id: str
    section: str
    content: str = ""

    def with_fields(self, **updates) -> "TableRow":
        return replace(self, **updates)

    def to_dict(self) -> dict:
        return {"id": self.id, "section": self.section, "content": self.content}


@dataclass(frozen=True)
class EmailTable:
    """Ordered sequence of rows. Order is the email's section order."""
    rows: Tuple[TableRow, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable of rows but always store a tuple
        if not isinstance(self.rows, tuple):
            object.__setattr__(self, "rows", tuple(self.rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[TableRow]:
        return iter(self.rows)

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0

    @property
    def row_ids(self) -> Tuple[str, ...]:
        return tuple(row.id for row in self.rows)

    def get(self, row_id: str) -> Optional[TableRow]:
        for row in self.rows:
            if row.id == row_id:
                return row
        return None

    def pairs(self) -> Tuple[Tuple[str, str], ...]:
        """(section, content) pairs in order. Ids are not part of the value."""
        return tuple((row.section, row.content) for row in self.rows)

    @classmethod
    def empty(cls) -> "EmailTable":
        return cls(rows=())

    @classmethod
    def from_pairs(cls, pairs, id_source: Optional[IdSource] = None) -> "EmailTable":
        ids = id_source or default_id_source()
        return cls(rows=tuple(
            TableRow(id=ids.next_id("row"), section=section, content=content)
            for section, content in pairs
        ))


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

class VersionSource(str, Enum):
    """Who produced a version."""
    USER = "user"
    AI = "ai"


@dataclass(frozen=True)
class EmailVersion:
    """Immutable snapshot of serialized email content."""
    id: str
    content: str
    source: VersionSource
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "source": self.source.value,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
        }
