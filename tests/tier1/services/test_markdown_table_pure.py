"""
Tier-1 tests for markdown_table_pure.py.

Pure in-memory, no I/O.
Tests parse_markdown_table, serialize_to_markdown, cell escaping and the
tracker sanitation helpers.
"""

import pytest

from copydesk.domain.models.email_table import CounterIdSource, EmailTable
from copydesk.domain.services.markdown_table_pure import (
    TABLE_HEADER,
    TABLE_SEPARATOR,
    escape_cell,
    has_table_header,
    parse_markdown_table,
    reconstruct_markdown_table,
    sanitize_cell,
    sanitize_markdown_for_tracker,
    sanitize_tracker_cell,
    serialize_to_markdown,
    split_row_line,
    unescape_cell,
)
from copydesk.domain.services.table_mutations import remove_row


def table_text(*rows):
    return "\n".join([TABLE_HEADER, TABLE_SEPARATOR, *rows])


# ===========================================================================
# Parse
# ===========================================================================

class TestParseMarkdownTable:

    def test_parses_rows_in_order(self, sample_markdown, ids):
        table = parse_markdown_table(sample_markdown, id_source=ids)
        assert table.pairs() == (
            ("**HEADER**", "Big Sale"),
            ("**BODY**", "Shop now and save"),
        )

    def test_assigns_fresh_ids_from_source(self, sample_markdown):
        table = parse_markdown_table(sample_markdown, id_source=CounterIdSource())
        assert table.row_ids == ("row-1", "row-2")

    def test_reparse_assigns_new_ids(self, sample_markdown, ids):
        first = parse_markdown_table(sample_markdown, id_source=ids)
        second = parse_markdown_table(sample_markdown, id_source=ids)
        assert set(first.row_ids).isdisjoint(second.row_ids)
        assert first.pairs() == second.pairs()

    def test_empty_string_is_empty_table(self):
        assert parse_markdown_table("").is_empty

    def test_none_is_empty_table(self):
        assert parse_markdown_table(None).is_empty

    def test_text_without_header_is_empty_table(self):
        """Malformed content is a normal state, not an error."""
        assert parse_markdown_table("Just a plain email draft | with a pipe |").is_empty

    def test_header_row_is_not_a_row(self):
        table = parse_markdown_table(table_text("| CTA | Buy |"))
        assert table.pairs() == (("CTA", "Buy"),)

    def test_lines_before_header_are_ignored(self):
        markdown = "| Intro | before the table |\n" + table_text("| CTA | Buy |")
        assert parse_markdown_table(markdown).pairs() == (("CTA", "Buy"),)

    @pytest.mark.parametrize("separator", [
        "|---|---|",
        "| --- | --- |",
        "|:---|---:|",
        "|:-------:|---------|",
    ])
    def test_separator_variants_are_skipped(self, separator):
        markdown = "\n".join([TABLE_HEADER, separator, "| CTA | Buy |"])
        assert parse_markdown_table(markdown).pairs() == (("CTA", "Buy"),)

    def test_splits_on_first_pipe_only(self):
        table = parse_markdown_table(table_text("| BODY | one | two |"))
        assert table.pairs() == (("BODY", "one | two"),)

    def test_escaped_pipe_in_section_is_not_a_split_point(self):
        table = parse_markdown_table(table_text("| A \\| B | content |"))
        assert table.pairs() == (("A | B", "content"),)

    def test_empty_content_kept_as_empty_string(self):
        table = parse_markdown_table(table_text("| CTA |   |"))
        assert table.pairs() == (("CTA", ""),)

    def test_row_without_content_cell(self):
        table = parse_markdown_table(table_text("| CTA |"))
        assert table.pairs() == (("CTA", ""),)

    def test_row_with_empty_section_is_skipped(self):
        table = parse_markdown_table(table_text("|   | orphan content |", "| CTA | Buy |"))
        assert table.pairs() == (("CTA", "Buy"),)

    def test_non_pipe_lines_are_skipped(self):
        table = parse_markdown_table(table_text("| A | 1 |", "stray text", "", "| B | 2 |"))
        assert table.pairs() == (("A", "1"), ("B", "2"))

    def test_cells_are_trimmed(self):
        table = parse_markdown_table(table_text("|    SUBJECT    |   Hello   |"))
        assert table.pairs() == (("SUBJECT", "Hello"),)


# ===========================================================================
# Serialize
# ===========================================================================

class TestSerializeToMarkdown:

    def test_empty_table_is_empty_string(self):
        """No header skeleton for zero rows."""
        assert serialize_to_markdown(EmailTable.empty()) == ""

    def test_canonical_format(self, ids):
        table = EmailTable.from_pairs([("SUBJECT", "Hi"), ("BODY", "Text")], id_source=ids)
        assert serialize_to_markdown(table) == (
            "| Section | Content |\n"
            "|---------|---------|\n"
            "| SUBJECT | Hi |\n"
            "| BODY | Text |"
        )

    def test_empty_content_written_as_single_space(self, ids):
        table = EmailTable.from_pairs([("CTA", "")], id_source=ids)
        assert serialize_to_markdown(table).splitlines()[-1] == "| CTA |   |"

    def test_pipes_in_content_are_escaped(self, ids):
        table = EmailTable.from_pairs([("BODY", "a | b")], id_source=ids)
        assert serialize_to_markdown(table).splitlines()[-1] == "| BODY | a \\| b |"

    def test_line_breaks_collapse_to_one_space(self, ids):
        table = EmailTable.from_pairs([("BODY", "line one\r\n\nline two")], id_source=ids)
        assert serialize_to_markdown(table).splitlines()[-1] == "| BODY | line one line two |"

    def test_no_trailing_blank_rows(self, campaign_table):
        assert not serialize_to_markdown(campaign_table).endswith("\n")


# ===========================================================================
# Round trip and scenarios
# ===========================================================================

class TestRoundTrip:

    @pytest.mark.parametrize("pairs", [
        [("SUBJECT", "Hello")],
        [("**HEADER**", "Big *Sale*"), ("BODY", "")],
        [("BODY", "a | b"), ("CTA", "[Shop](https://example.com)")],
        [("DUPLICATE", "one"), ("DUPLICATE", "two")],
    ])
    def test_parse_of_serialize_preserves_pairs(self, pairs, ids):
        table = EmailTable.from_pairs(pairs, id_source=ids)
        assert parse_markdown_table(serialize_to_markdown(table)).pairs() == tuple(pairs)

    def test_first_pipe_split_round_trip(self, ids):
        """'a | b' serializes as a \\| b and parses back to 'a | b'."""
        table = EmailTable.from_pairs([("BODY", "a | b")], id_source=ids)
        text = serialize_to_markdown(table)
        assert "a \\| b" in text
        assert parse_markdown_table(text).pairs() == (("BODY", "a | b"),)

    def test_remove_first_row_then_serialize(self, sample_markdown, ids):
        table = parse_markdown_table(sample_markdown, id_source=ids)
        assert len(table) == 2

        remaining = remove_row(table, table.rows[0].id)
        assert serialize_to_markdown(remaining) == (
            "| Section | Content |\n"
            "|---------|---------|\n"
            "| **BODY** | Shop now and save |"
        )

    def test_empty_table_round_trip(self):
        assert serialize_to_markdown(EmailTable.empty()) == ""
        assert parse_markdown_table("").is_empty


# ===========================================================================
# Cells
# ===========================================================================

class TestCellHelpers:

    def test_escape_is_idempotent(self):
        once = escape_cell("a|b|c")
        assert once == "a\\|b\\|c"
        assert escape_cell(once) == once

    def test_already_escaped_pipe_not_double_escaped(self):
        assert escape_cell("a \\| b") == "a \\| b"

    def test_unescape(self):
        assert unescape_cell("a \\| b") == "a | b"

    def test_sanitize_cell_placeholder(self):
        assert sanitize_cell("   ", empty_placeholder=" ") == " "
        assert sanitize_cell("", empty_placeholder="") == ""

    def test_split_row_line_rejects_non_rows(self):
        assert split_row_line("no pipes here") is None
        assert split_row_line("| starts but never ends") is None
        assert split_row_line("|") is None

    def test_split_row_line_keeps_cells_escaped(self):
        assert split_row_line("| A | x \\| y |") == ("A", "x \\| y")

    def test_has_table_header(self, sample_markdown):
        assert has_table_header(sample_markdown)
        assert not has_table_header("| Section | Body |")
        assert not has_table_header(None)


# ===========================================================================
# Tracker sanitation
# ===========================================================================

class TestTrackerSanitation:

    def test_non_table_text_unchanged(self):
        assert sanitize_markdown_for_tracker("plain text") == "plain text"

    @pytest.mark.parametrize("raw,expected", [
        ("", " "),
        ("a\nb", "a<br/>b"),
        ("a\r\nb", "a<br/>b"),
        ("a\tb", "a b"),
        ("x|y", "x\\|y"),
        ("x\\|y", "x\\|y"),
        ("\u200bHi\u00a0there", "Hi there"),
        ("too    many   spaces", "too many spaces"),
    ])
    def test_sanitize_tracker_cell(self, raw, expected):
        assert sanitize_tracker_cell(raw) == expected

    def test_header_lines_kept_and_rows_cleaned(self):
        markdown = table_text("| **HEADER** |  Big\u00a0Sale  |")
        assert sanitize_markdown_for_tracker(markdown) == table_text("| **HEADER** | Big Sale |")

    def test_reconstruct_joins_broken_rows(self):
        broken = "\n".join([
            TABLE_HEADER,
            TABLE_SEPARATOR,
            "| BODY | First line",
            "second line |",
            "| CTA | Buy |",
        ])
        assert reconstruct_markdown_table(broken) == table_text(
            "| BODY | First line second line |",
            "| CTA | Buy |",
        )

    def test_reconstruct_keeps_indented_rows_separate(self):
        indented = "\n".join([
            TABLE_HEADER,
            TABLE_SEPARATOR,
            "| HEADER | Big Sale |",
            "   | BODY | Shop now |",
        ])
        assert reconstruct_markdown_table(indented) == table_text(
            "| HEADER | Big Sale |",
            "| BODY | Shop now |",
        )
        assert parse_markdown_table(reconstruct_markdown_table(indented)).pairs() == (
            ("HEADER", "Big Sale"),
            ("BODY", "Shop now"),
        )

    def test_reconstruct_leaves_non_table_text(self):
        assert reconstruct_markdown_table("Hello") == "Hello"

    def test_reconstructed_table_parses(self):
        broken = "\n".join([TABLE_HEADER, TABLE_SEPARATOR, "| BODY | a", "b |"])
        table = parse_markdown_table(reconstruct_markdown_table(broken))
        assert table.pairs() == (("BODY", "a b"),)
