"""
app/parsing package marker.
"""

from app.parsing.tabular import TabularFormatError, is_blank_row, looks_like_markup, parse_delimited_text

__all__ = [
    "TabularFormatError",
    "is_blank_row",
    "looks_like_markup",
    "parse_delimited_text",
]
