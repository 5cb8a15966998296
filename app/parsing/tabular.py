"""
app/parsing/tabular.py

Delimited-text parsing for published spreadsheet exports.
"""

from __future__ import annotations

import csv
import io

_MARKUP_SIGNATURES: tuple[str, ...] = ("<!", "<html", "<?xml", "<head", "<body")


class TabularFormatError(ValueError):
    """
    Raised when a payload is detectably not delimited text.
    """


def looks_like_markup(text: str) -> bool:
    """
    Return True when the payload starts like an HTML/XML document.

    Spreadsheet hosts answer an expired or private link with a login page,
    which must not be mistaken for an empty sheet.
    """

    head = text.lstrip("\ufeff \t\r\n")[:64].lower()
    return head.startswith(_MARKUP_SIGNATURES)


def parse_delimited_text(text: str, *, delimiter: str = ",") -> list[list[str]]:
    """
    Split raw CSV text into rows of cell strings.

    Quoted cells may contain the delimiter, line breaks and doubled quotes.
    `\\r\\n` and `\\n` endings are treated alike and trailing blank rows are
    dropped. Blank rows in the middle are kept so callers can see row order.
    """

    if looks_like_markup(text):
        raise TabularFormatError("Payload looks like an HTML document, not delimited text.")

    if text.startswith("\ufeff"):
        text = text[1:]

    try:
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter, strict=False)
        rows = [list(row) for row in reader]
    except csv.Error as exc:
        raise TabularFormatError(f"Invalid delimited text: {exc}") from exc

    while rows and is_blank_row(rows[-1]):
        rows.pop()
    return rows


def is_blank_row(row: list[str]) -> bool:
    return all(not cell.strip() for cell in row)
