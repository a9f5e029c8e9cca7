"""Ledger parsing package."""

from giftcalc.ledger.parser import (
    LINE_PATTERN,
    format_timestamp,
    parse_entry,
    parse_lines,
    render_entry,
    render_output,
)

__all__ = [
    "LINE_PATTERN",
    "format_timestamp",
    "parse_entry",
    "parse_lines",
    "render_entry",
    "render_output",
]
