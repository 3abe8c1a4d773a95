"""Normalization functions for Google Forms booking export ingestion.

All functions accept str | None and return the appropriate type or None.
None of them raise on bad input: the export is produced by a third-party
form and cells routinely mix numbers with free text.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Iterable

_TIMESTAMP_RE = re.compile(r"^\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}$")
_FORM_DATE_RE = re.compile(r"(\d{2})/(\d{2})/(\d{4})")
_FORM_TIME_RE = re.compile(r"(\d{2}:\d{2})")
_INT_RE = re.compile(r"\d+")
_LEADING_INT_RE = re.compile(r"^\s*[+-]?(\d+)")


# ---------------------------------------------------------------------------
# Rule 1: trim
# ---------------------------------------------------------------------------

def trim(value: str | None) -> str | None:
    """Strip leading/trailing whitespace; treat empty string as None."""
    if value is None:
        return None
    v = value.strip()
    return v if v else None


# ---------------------------------------------------------------------------
# Rule 2: normalize_passport  (natural key for person matching)
# ---------------------------------------------------------------------------

def normalize_passport(value: str | None) -> str | None:
    """Upper-case and trim a passport number; blank → None."""
    v = trim(value)
    if v is None:
        return None
    return v.upper()


# ---------------------------------------------------------------------------
# Rule 3: is_form_timestamp
# ---------------------------------------------------------------------------

def is_form_timestamp(value: str | None) -> bool:
    """True for a 'DD/MM/YYYY HH:MM:SS' submission timestamp cell."""
    if value is None:
        return False
    return _TIMESTAMP_RE.match(value) is not None


# ---------------------------------------------------------------------------
# Rule 4: correct_year / parse_form_date
# ---------------------------------------------------------------------------

def correct_year(year: int) -> int:
    """Repair the off-by-2000 years some exports contain.

    '0024' → 2024, '4024' → 2024.  Plausible years pass through.
    """
    if year < 100:
        return year + 2000
    if year > 2100:
        return year - 2000
    return year


def parse_form_date(value: str | None) -> date | None:
    """Find a 'DD/MM/YYYY' anywhere in the cell and return it as a date.

    Works on both plain dates and full timestamps.  Impossible calendar
    dates (31/02/2026) → None.
    """
    v = trim(value)
    if v is None:
        return None
    m = _FORM_DATE_RE.search(v)
    if not m:
        return None
    day, month, year = (int(g) for g in m.groups())
    try:
        return date(correct_year(year), month, day)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Rule 5: parse_form_time
# ---------------------------------------------------------------------------

def parse_form_time(value: str | None) -> str | None:
    """'HH:MM:SS' (or any text holding 'HH:MM') → 'HH:MM'."""
    v = trim(value)
    if v is None:
        return None
    m = _FORM_TIME_RE.search(v)
    return m.group(1) if m else None


# ---------------------------------------------------------------------------
# Rule 6: first_int / parse_headcount
# ---------------------------------------------------------------------------

def first_int(value: str | None, default: int = 0) -> int:
    """Return the first run of digits in the cell as an int.

    "3, Du 7 au 10 novembre" → 3.  No digits → default.
    """
    v = trim(value)
    if v is None:
        return default
    m = _INT_RE.search(v)
    return int(m.group(0)) if m else default


def parse_headcount(value: str | None) -> int:
    """Leading integer of a people-count cell; missing or zero → 1."""
    v = trim(value)
    if v is None:
        return 1
    m = _LEADING_INT_RE.match(v)
    if not m:
        return 1
    return int(m.group(1)) or 1


# ---------------------------------------------------------------------------
# Rule 7: is_affirmative
# ---------------------------------------------------------------------------

def is_affirmative(value: str | None, tokens: Iterable[str]) -> bool:
    """True when the free-text answer contains any affirmative token.

    Substring match, case-insensitive: "Oui, j'ai besoin d'un taxi" and
    "Yes please" are both affirmative for tokens ('oui', 'yes').
    """
    v = trim(value)
    if v is None:
        return False
    lower = v.lower()
    return any(token.lower() in lower for token in tokens)


# ---------------------------------------------------------------------------
# Helper: add_days
# ---------------------------------------------------------------------------

def add_days(start: date | None, days: int) -> date | None:
    """Return start + days, or None when there is no start or no positive span."""
    if start is None or days <= 0:
        return None
    return start + timedelta(days=days)
