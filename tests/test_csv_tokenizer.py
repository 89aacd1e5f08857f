"""
tests/test_csv_tokenizer.py

Pytest unit tests for the quote-aware CSV tokenizer.

Pure Python, no worker process involved.

Coverage
--------
- Plain, quoted and escaped-quote fields
- Empty trailing field and empty input
- Line ending normalization and blank line skipping
- Progress cadence and final report
"""

from __future__ import annotations

import pytest

from app.parsing.csv_tokenizer import split_csv_line, tokenize_csv


# ---------------------------------------------------------------------------
# split_csv_line
# ---------------------------------------------------------------------------


class TestSplitCSVLine:
    def test_plain_fields(self) -> None:
        assert split_csv_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_field_keeps_comma(self) -> None:
        assert split_csv_line('a,"b,c",d') == ["a", "b,c", "d"]

    def test_escaped_quote_inside_quotes(self) -> None:
        assert split_csv_line('"He said ""hi"""') == ['He said "hi"']

    def test_trailing_separator_emits_empty_field(self) -> None:
        assert split_csv_line("a,b,") == ["a", "b", ""]

    def test_empty_fields_between_separators(self) -> None:
        assert split_csv_line(",,") == ["", "", ""]

    def test_whitespace_is_preserved(self) -> None:
        assert split_csv_line(" a , b ") == [" a ", " b "]


# ---------------------------------------------------------------------------
# tokenize_csv
# ---------------------------------------------------------------------------


class TestTokenizeCSV:
    def test_quoted_comma_with_crlf(self) -> None:
        rows = tokenize_csv('a,"b,c",d\r\n1,2,3')
        assert rows == [["a", "b,c", "d"], ["1", "2", "3"]]

    def test_blank_and_whitespace_lines_are_skipped(self) -> None:
        rows = tokenize_csv("a,b\n\n   \nc,d\n")
        assert rows == [["a", "b"], ["c", "d"]]

    def test_empty_text_yields_no_rows(self) -> None:
        assert tokenize_csv("") == []

    def test_quoted_field_does_not_span_lines(self) -> None:
        rows = tokenize_csv('"open\nclosed"')
        assert rows == [["open"], ["closed"]]

    def test_output_has_no_line_terminators(self) -> None:
        rows = tokenize_csv("a,b\r\nc,d\r\n")
        for row in rows:
            for value in row:
                assert "\n" not in value
                assert "\r" not in value

    def test_same_input_same_output(self) -> None:
        text = 'x,"y,z"\n1,2\n'
        assert tokenize_csv(text) == tokenize_csv(text)


# ---------------------------------------------------------------------------
# Progress reporting
# ---------------------------------------------------------------------------


class TestProgress:
    def test_reports_every_interval_and_last_line(self) -> None:
        text = "\n".join(f"{i},value" for i in range(250))
        reports: list[float] = []

        tokenize_csv(text, reports.append)

        assert reports == pytest.approx([0.0, 100 / 250, 200 / 250, 249 / 250])

    def test_progress_is_non_decreasing_and_below_one(self) -> None:
        text = "\n".join("a,b" for _ in range(1000))
        reports: list[float] = []

        tokenize_csv(text, reports.append, progress_interval=37)

        assert reports == sorted(reports)
        assert all(0.0 <= value < 1.0 for value in reports)

    def test_trailing_blank_line_still_reports_last_index(self) -> None:
        reports: list[float] = []

        tokenize_csv("a\nb\n", reports.append, progress_interval=100)

        # Three physical lines: "a", "b", "".
        assert reports == pytest.approx([0.0, 2 / 3])

    def test_no_callback_is_allowed(self) -> None:
        assert tokenize_csv("a,b") == [["a", "b"]]
