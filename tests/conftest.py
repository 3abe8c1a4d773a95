"""Shared fixtures: builders for Google Forms export rows and CSV text."""

from __future__ import annotations

import csv
import io

import pytest

from resort_import.form_schema import COL_EN, COL_FR, ColumnMap

FR_HEADER_13 = "Prénoms du voyageur 1 (comme sur le passeport)"
EN_HEADER_13 = "How did you hear about us?"


def _width(cols: ColumnMap) -> int:
    last_traveler = cols.traveler1_start + 4 * 3
    return max(last_traveler, cols.emergency_relation + 1)


def build_row(
    cols: ColumnMap,
    timestamp: str = "05/02/2026 10:00:00",
    referent: str = "Jean Dupont",
    num_people: str = "2",
    nights: str = "3, Du 7 au 10",
    arrival_date: str = "05/02/2026",
    arrival_time: str = "14:30:00",
    departure_date: str = "08/02/2026",
    departure_time: str = "09:15:00",
    transport: str = "Oui, besoin d'un taxi",
    luggage: str = "2 valises",
    boardbags: str = "1",
    travelers: list[tuple[str, str, str]] | None = None,
    emergency: tuple[str, str, str, str] = ("Marie Dupont", "+33 6 12 34 56 78", "marie@example.com", "Soeur"),
) -> list[str]:
    row = [""] * _width(cols)
    row[cols.timestamp] = timestamp
    row[cols.referent] = referent
    row[cols.num_people] = num_people
    row[cols.num_nights] = nights
    row[cols.arrival_date] = arrival_date
    row[cols.arrival_time] = arrival_time
    row[cols.departure_date] = departure_date
    row[cols.departure_time] = departure_time
    row[cols.transport] = transport
    row[cols.luggage] = luggage
    row[cols.boardbags] = boardbags
    if travelers is None:
        travelers = [("Jean", "Dupont", "AB123456"), ("Paul", "Martin", "CD654321")]
    for slot, (first, last, passport) in enumerate(travelers):
        f, l, p = cols.traveler_columns(slot)
        row[f], row[l], row[p] = first, last, passport
    (row[cols.emergency_name], row[cols.emergency_phone],
     row[cols.emergency_email], row[cols.emergency_relation]) = emergency
    return row


def build_header(cols: ColumnMap) -> list[str]:
    header = [f"Question {i}" for i in range(_width(cols))]
    header[0] = "Horodateur" if cols is COL_FR else "Timestamp"
    header[13] = FR_HEADER_13 if cols is COL_FR else EN_HEADER_13
    return header


def to_csv(rows: list[list[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    for row in rows:
        writer.writerow(row)
    return buf.getvalue()


@pytest.fixture
def fr_row():
    def _make(**kwargs) -> list[str]:
        return build_row(COL_FR, **kwargs)
    return _make


@pytest.fixture
def en_row():
    def _make(**kwargs) -> list[str]:
        return build_row(COL_EN, **kwargs)
    return _make


@pytest.fixture
def fr_export():
    """Build FR export text from row kwargs dicts."""
    def _make(*row_kwargs: dict) -> str:
        rows = [build_header(COL_FR)] + [build_row(COL_FR, **kw) for kw in row_kwargs]
        return to_csv(rows)
    return _make


@pytest.fixture
def en_export():
    def _make(*row_kwargs: dict) -> str:
        rows = [build_header(COL_EN)] + [build_row(COL_EN, **kw) for kw in row_kwargs]
        return to_csv(rows)
    return _make
