"""Tests for the ledger line parser and canonical rendering."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from giftcalc.ledger import format_timestamp, parse_entry, parse_lines, render_entry
from giftcalc.services.currency import format_amount


class TestParseEntry:
    """Tests for parsing single ledger lines."""
    
    def test_parse_full_line(self):
        """Test a line with amount, currency and recipient."""
        entry = parse_entry("2024-12-01T10:15:30.123Z 150 SEK for Alice")
        assert entry is not None
        assert entry.timestamp == datetime(2024, 12, 1, 10, 15, 30, 123000, tzinfo=timezone.utc)
        assert entry.amount == Decimal("150")
        assert entry.currency == "SEK"
        assert entry.recipient == "Alice"
        assert entry.raw_text == "150 SEK for Alice"
    
    def test_parse_decimal_amount(self):
        """Test fractional amounts keep their precision."""
        entry = parse_entry("2024-12-01T10:00:00.000Z 89.99 USD")
        assert entry.amount == Decimal("89.99")
        assert entry.recipient is None
    
    def test_parse_recipient_with_spaces(self):
        """Test multi-word recipient names."""
        entry = parse_entry("2024-12-01T10:00:00.000Z 200 EUR for Anna Maria")
        assert entry.recipient == "Anna Maria"
    
    def test_parse_annotation_is_not_part_of_recipient(self):
        """Test that a trailing parenthetical is stripped from the name."""
        entry = parse_entry("2024-12-01T10:00:00.000Z 0 SEK for Bob (on naughty list!)")
        assert entry.recipient == "Bob"
        assert entry.amount == Decimal("0")
        assert entry.raw_text == "0 SEK for Bob (on naughty list!)"
    
    def test_parse_dangling_for_keeps_amount(self):
        """Test a line cut off after "for" still yields the gift."""
        entry = parse_entry("2024-12-01T10:00:00.000Z 150 SEK for ")
        assert entry is not None
        assert entry.amount == Decimal("150")
        assert entry.recipient is None
    
    def test_parse_offset_timestamp_normalized_to_utc(self):
        """Test that an explicit offset is converted to UTC."""
        entry = parse_entry("2024-12-01T23:30:00.000-02:00 100 SEK")
        assert entry.timestamp.tzinfo is not None
        assert entry.day == date(2024, 12, 2)
    
    def test_parse_tolerates_surrounding_whitespace(self):
        """Test leading and trailing whitespace is ignored."""
        entry = parse_entry("  2024-12-01T10:00:00.000Z 100 SEK for Alice  \n")
        assert entry is not None
        assert entry.recipient == "Alice"
    
    @pytest.mark.parametrize("line", [
        "",
        "   ",
        "not a gift line",
        "2024-12-01T10:00:00.000Z 100",
        "2024-12-01T10:00:00.000Z 100 sek for Alice",
        "2024-12-01T10:00:00.000Z SEK 100",
        "2024-12-01 100 SEK for Alice",
        "2024-12-01T10:00:00Z 100 SEK",
        "2024-13-01T10:00:00.000Z 100 SEK",
        "2024-12-01T10:00:00.000Z -5 SEK",
        "2024-12-01T10:00:00.000Z 100 SEKK",
    ])
    def test_parse_rejects_malformed_lines(self, line):
        """Test that lines outside the grammar yield None."""
        assert parse_entry(line) is None
    
    def test_parse_never_raises_on_non_string(self):
        """Test that non-string input is treated as unparsable."""
        assert parse_entry(None) is None
        assert parse_entry(42) is None


class TestParseLines:
    """Tests for parsing a whole log."""
    
    def test_invalid_lines_are_skipped(self):
        """Test that bad lines drop out and order is kept."""
        entries = parse_lines([
            "2024-12-01T10:00:00.000Z 100 SEK for Alice",
            "garbage",
            "",
            "2024-11-01T10:00:00.000Z 50 USD for Bob",
        ])
        assert [e.recipient for e in entries] == ["Alice", "Bob"]
    
    def test_partially_flushed_last_line(self):
        """Test that a truncated last line is ignored."""
        entries = parse_lines([
            "2024-12-01T10:00:00.000Z 100 SEK for Alice",
            "2024-12-02T10:00:0",
        ])
        assert len(entries) == 1


class TestRendering:
    """Tests for the canonical line format."""
    
    def test_format_timestamp_millisecond_utc(self):
        """Test ISO-8601 output with millisecond precision and Z."""
        ts = datetime(2024, 12, 1, 10, 15, 30, 123456, tzinfo=timezone.utc)
        assert format_timestamp(ts) == "2024-12-01T10:15:30.123Z"
    
    def test_format_timestamp_naive_is_utc(self):
        """Test that naive datetimes are treated as UTC."""
        assert format_timestamp(datetime(2024, 12, 1, 8)) == "2024-12-01T08:00:00.000Z"
    
    def test_render_entry(self):
        """Test rendering with recipient and annotation."""
        line = render_entry(
            datetime(2024, 12, 1, 10, tzinfo=timezone.utc),
            Decimal("85.00"),
            "sek",
            "Alice",
            "birthday",
        )
        assert line == "2024-12-01T10:00:00.000Z 85 SEK for Alice (birthday)"
    
    def test_rendered_line_parses_back(self):
        """Test that parsing a rendered line restores its fields."""
        ts = datetime(2024, 12, 1, 10, 15, 30, 987000, tzinfo=timezone.utc)
        entry = parse_entry(render_entry(ts, Decimal("120.75"), "EUR", "Eva"))
        assert entry.timestamp == ts
        assert entry.amount == Decimal("120.75")
        assert entry.currency == "EUR"
        assert entry.recipient == "Eva"
    
    @pytest.mark.parametrize("amount, expected", [
        (Decimal("85.00"), "85"),
        (Decimal("120.750"), "120.75"),
        (Decimal("100"), "100"),
        (Decimal("0.10"), "0.1"),
        (Decimal("0"), "0"),
        (250, "250"),
    ])
    def test_format_amount(self, amount, expected):
        """Test amounts render without trailing zeros or exponents."""
        assert format_amount(amount) == expected
    
    @pytest.mark.parametrize("amount", ["NaN", "Infinity", Decimal("-Infinity")])
    def test_format_amount_rejects_non_finite(self, amount):
        """Test NaN and infinities are refused with ValueError."""
        with pytest.raises(ValueError):
            format_amount(amount)
