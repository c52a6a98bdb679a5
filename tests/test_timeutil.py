"""Tests for millisecond clamping and formatting."""

from segmark.timeutil import clamp_ms, format_ms


class TestClamp:
    def test_inside_range(self):
        assert clamp_ms(5, 0, 10) == 5

    def test_below_and_above(self):
        assert clamp_ms(-3, 0, 10) == 0
        assert clamp_ms(42, 0, 10) == 10

    def test_degenerate_range(self):
        assert clamp_ms(7, 4, 4) == 4


class TestFormat:
    def test_rounds_to_tenth(self):
        assert format_ms(0) == "00:00.0"
        assert format_ms(949) == "00:00.9"
        assert format_ms(950) == "00:01.0"
        assert format_ms(999) == "00:01.0"

    def test_minute_carry(self):
        assert format_ms(59999) == "01:00.0"
        assert format_ms(61000) == "01:01.0"

    def test_fractional_ms(self):
        assert format_ms(1249.9) == "00:01.2"
        assert format_ms(1250.0) == "00:01.3"

    def test_long_media(self):
        assert format_ms(6_000_000) == "100:00.0"
