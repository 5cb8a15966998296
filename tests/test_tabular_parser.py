"""
tests/test_tabular_parser.py

Pytest unit tests for delimited-text parsing of published sheet exports.
"""

from __future__ import annotations

import pytest

from app.parsing.tabular import TabularFormatError, is_blank_row, looks_like_markup, parse_delimited_text


class TestParseDelimitedText:
    def test_splits_rows_and_cells(self) -> None:
        rows = parse_delimited_text("a,b,c\n1,2,3\n")
        assert rows == [["a", "b", "c"], ["1", "2", "3"]]

    def test_quoted_cells_keep_commas_newlines_and_quotes(self) -> None:
        text = 'title,caption\n"Lineup, Saturday","Line one\nLine ""two"""\n'
        rows = parse_delimited_text(text)
        assert rows[1] == ["Lineup, Saturday", 'Line one\nLine "two"']

    def test_crlf_and_lf_are_equivalent(self) -> None:
        assert parse_delimited_text("a,b\r\n1,2\r\n") == parse_delimited_text("a,b\n1,2\n")

    def test_trailing_blank_rows_are_dropped_but_inner_ones_kept(self) -> None:
        rows = parse_delimited_text("a,b\n,\n1,2\n,\n\n")
        assert rows == [["a", "b"], ["", ""], ["1", "2"]]

    def test_leading_byte_order_mark_is_removed(self) -> None:
        rows = parse_delimited_text("\ufeffDate,DJ 1\n")
        assert rows[0][0] == "Date"

    def test_empty_text_gives_no_rows(self) -> None:
        assert parse_delimited_text("") == []

    def test_html_payload_is_rejected(self) -> None:
        with pytest.raises(TabularFormatError):
            parse_delimited_text("<!DOCTYPE html><html><body>Sign in</body></html>")


class TestHelpers:
    @pytest.mark.parametrize(
        "text",
        ["<html>", "  <!doctype html>", "\ufeff<?xml version='1.0'?>", "\n<HEAD>"],
    )
    def test_markup_is_detected(self, text: str) -> None:
        assert looks_like_markup(text) is True

    def test_csv_is_not_markup(self) -> None:
        assert looks_like_markup("date,event\n<3 party,x") is False

    def test_blank_row(self) -> None:
        assert is_blank_row(["", "  ", "\t"]) is True
        assert is_blank_row(["", "x"]) is False
