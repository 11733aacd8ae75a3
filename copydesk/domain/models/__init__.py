"""Domain models for Copydesk."""

from .email_table import (
    CounterIdSource,
    EmailTable,
    EmailVersion,
    IdSource,
    PLACEHOLDER_CONTENT,
    PLACEHOLDER_SECTION,
    TableRow,
    UuidIdSource,
    VersionSource,
    default_id_source,
)
from .errors import (
    ContentStoreError,
    EditorNotLoadedError,
    EmailEditRejectedError,
    EmailTableError,
    InvalidSectionOperationError,
    PatchApplicationError,
    RowOrderError,
    SectionNotFoundError,
    VersionHistoryError,
)

__all__ = [
    "CounterIdSource",
    "EmailTable",
    "EmailVersion",
    "IdSource",
    "PLACEHOLDER_CONTENT",
    "PLACEHOLDER_SECTION",
    "TableRow",
    "UuidIdSource",
    "VersionSource",
    "default_id_source",
    "ContentStoreError",
    "EditorNotLoadedError",
    "EmailEditRejectedError",
    "EmailTableError",
    "InvalidSectionOperationError",
    "PatchApplicationError",
    "RowOrderError",
    "SectionNotFoundError",
    "VersionHistoryError",
]
