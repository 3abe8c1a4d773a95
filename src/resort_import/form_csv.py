"""resort_import.form_csv

Tabular tokenizer for Google Forms CSV exports.

The export is uncontrolled third-party text: answers can contain commas and
line breaks (quoted), quotes are escaped by doubling, and files arrive with
LF, CRLF or bare CR line endings depending on who re-saved them.  The
tokenizer is lenient; malformed quoting never raises.
"""

from __future__ import annotations

import csv
import io
import logging

log = logging.getLogger(__name__)

_BOM = "\ufeff"


def tokenize_rows(text: str) -> list[list[str]]:
    """Split raw export text into rows of trimmed fields.

    Rows whose fields are all empty (blank separator lines, trailing
    ',,,,' lines) are dropped.
    """
    if text.startswith(_BOM):
        text = text[len(_BOM):]

    # A single free-text answer may exceed the reader's default field limit
    if len(text) > csv.field_size_limit():
        csv.field_size_limit(len(text))

    rows: list[list[str]] = []
    # newline="" keeps CR / CRLF inside quoted answers intact for the reader
    reader = csv.reader(io.StringIO(text, newline=""), strict=False)
    try:
        for raw in reader:
            fields = [f.strip() for f in raw]
            if any(fields):
                rows.append(fields)
    except csv.Error as exc:
        log.warning("stopped tokenizing at line %d: %s", reader.line_num, exc)
    return rows


def cell(row: list[str], index: int) -> str:
    """Return row[index] trimmed, or '' when the row is short."""
    if index < 0 or index >= len(row):
        return ""
    return row[index].strip()
