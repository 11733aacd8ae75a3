"""Domain errors for the email table engine."""

from typing import List, Optional


class EmailTableError(Exception):
    """Base class for email table errors."""


class RowOrderError(EmailTableError):
    """A proposed row order is not a permutation of the current rows."""

    def __init__(
        self,
        message: str,
        missing: Optional[List[str]] = None,
        unexpected: Optional[List[str]] = None,
        duplicated: Optional[List[str]] = None,
    ):
        self.missing = missing or []
        self.unexpected = unexpected or []
        self.duplicated = duplicated or []
        super().__init__(message)


class SectionNotFoundError(EmailTableError):
    """A section operation referenced a section name that does not exist."""

    def __init__(self, section_name: str):
        self.section_name = section_name
        super().__init__(f"Section not found: {section_name!r}")


class InvalidSectionOperationError(EmailTableError):
    """A section operation is missing required parameters."""


class PatchApplicationError(EmailTableError):
    """A text patch could not be applied. Nothing was changed."""


class EmailEditRejectedError(EmailTableError):
    """An AI edit result was unsuccessful or of an unknown type."""


class VersionHistoryError(EmailTableError):
    """Version history used before it was bound to a campaign."""


class ContentStoreError(EmailTableError):
    """Persisting or loading content from the external tracker failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EditorNotLoadedError(EmailTableError):
    """An editor operation was attempted before any campaign was loaded."""
