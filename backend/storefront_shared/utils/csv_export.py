"""
CSV rendering for admin exports.

Headers are the column keys, in the order given, so an exported file can
be edited and fed back into the matching import. Values are flattened:

    None       -> ""
    True/False -> "true"/"false"
    lists      -> items joined with ";"
    datetimes  -> ISO 8601
"""

import csv
import io
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Sequence

LIST_SEPARATOR = ";"


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(format_cell(v) for v in value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_csv(columns: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> str:
    """
    Render rows as CSV text with a header line.

    Quoting of commas, quotes and newlines is left to the csv module.
    Keys missing from a row render as empty cells.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([format_cell(row.get(column)) for column in columns])
    return buffer.getvalue()


def export_filename(entity_plural: str, today: date | None = None) -> str:
    """File name for a download, e.g. brands_2026-10-19.csv."""
    today = today or date.today()
    return f"{entity_plural.lower()}_{today.isoformat()}.csv"
