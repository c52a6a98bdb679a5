"""Tests for CSV export."""

from segmark.export import CSV_HEADER, escape_field, export_csv
from segmark.models import Segment


class TestEscapeField:
    def test_plain_text_unchanged(self):
        assert escape_field("hello world") == "hello world"

    def test_comma(self):
        assert escape_field("a,b") == '"a,b"'

    def test_newline(self):
        assert escape_field("a\nb") == '"a\nb"'
        assert escape_field("a\r\nb") == '"a\r\nb"'

    def test_double_quote(self):
        assert escape_field('a"b') == '"a""b"'

    def test_empty(self):
        assert escape_field("") == ""


class TestExportCsv:
    def test_single_row(self):
        segments = [Segment(start_ms=0, end_ms=1000, label_id=3, text="a,b")]
        assert export_csv(segments) == 'start,end,label,text\n00:00.0,00:01.0,3,"a,b"'

    def test_rows_in_canonical_order(self):
        segments = [
            Segment(start_ms=61000, end_ms=62500, label_id=1, text="later"),
            Segment(start_ms=950, end_ms=2000, label_id=0, text="early"),
        ]
        lines = export_csv(segments).split("\n")
        assert lines == [
            CSV_HEADER,
            "00:01.0,00:02.0,0,early",
            "01:01.0,01:02.5,1,later",
        ]

    def test_unlabeled_renders_empty(self):
        assert export_csv([Segment(0, 500, text="x")]).endswith("00:00.0,00:00.5,,x")

    def test_empty_collection(self):
        assert export_csv([]) == CSV_HEADER
