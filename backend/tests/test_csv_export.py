"""
Tests for CSV export rendering.
"""

import csv
import io
from datetime import date, datetime, timezone

from storefront_shared.utils.csv_export import export_filename, format_cell, to_csv


class TestFormatCell:

    def test_flattening(self):
        assert format_cell(None) == ""
        assert format_cell(True) == "true"
        assert format_cell(False) == "false"
        assert format_cell(0) == "0"
        assert format_cell(["a", "b"]) == "a;b"
        assert format_cell(datetime(2026, 1, 2, 3, 4, tzinfo=timezone.utc)) == "2026-01-02T03:04:00+00:00"


class TestToCsv:

    def test_header_and_column_order(self):
        text = to_csv(("name", "slug"), [{"slug": "nike", "name": "Nike", "ignored": 1}])
        assert text == "name,slug\nNike,nike\n"

    def test_missing_keys_are_empty(self):
        assert to_csv(("name", "sku"), [{"name": "Socks"}]) == "name,sku\nSocks,\n"

    def test_quoting_round_trips(self):
        rows = [{"name": 'Tee "Classic", white', "description": "line one\nline two"}]

        parsed = list(csv.DictReader(io.StringIO(to_csv(("name", "description"), rows))))

        assert parsed == [{"name": 'Tee "Classic", white', "description": "line one\nline two"}]

    def test_no_rows(self):
        assert to_csv(("name",), []) == "name\n"


def test_export_filename():
    assert export_filename("Brands", date(2026, 10, 19)) == "brands_2026-10-19.csv"
