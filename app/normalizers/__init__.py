"""
app/normalizers package marker.
"""

from app.normalizers.row_normalizer import (
    HeaderSpec,
    RowNormalizer,
    locate_header,
    normalize_header,
    parse_clock,
    parse_date,
    parse_slot_cell,
)

__all__ = [
    "HeaderSpec",
    "RowNormalizer",
    "locate_header",
    "normalize_header",
    "parse_clock",
    "parse_date",
    "parse_slot_cell",
]
