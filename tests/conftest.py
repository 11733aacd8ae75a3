"""
Shared pytest fixtures for all tests.

Provides deterministic identity sources and sample email tables.
"""

import pytest

from copydesk.core.config import clear_settings_cache
from copydesk.domain.models.email_table import CounterIdSource, EmailTable


SAMPLE_MARKDOWN = (
    "| Section | Content |\n"
    "|---------|---------|\n"
    "| **HEADER** | Big Sale |\n"
    "| **BODY** | Shop now and save |"
)


@pytest.fixture
def ids() -> CounterIdSource:
    """Deterministic row/version ids: row-1, row-2, ..."""
    return CounterIdSource()


@pytest.fixture
def sample_markdown() -> str:
    return SAMPLE_MARKDOWN


@pytest.fixture
def campaign_table(ids) -> EmailTable:
    """SUBJECT, HEADER, BODY, CTA."""
    return EmailTable.from_pairs(
        [
            ("SUBJECT", "Spring sale starts now"),
            ("**HEADER**", "Big Sale"),
            ("BODY", "Shop now and save"),
            ("CTA", "[Shop](https://example.com)"),
        ],
        id_source=ids,
    )


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; isolate tests that touch the env."""
    clear_settings_cache()
    yield
    clear_settings_cache()
