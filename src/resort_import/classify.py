"""resort_import.classify

Row classification for the Google Forms booking import.

Each data row of the export becomes one ImportRow with a status:

    skip      -- its submission timestamp (import_id) is already present
                 among stored persons/reservations; nothing will be created
    new       -- ready to commit
    conflict  -- the referent's passport matches a stored person whose
                 name or passport differs; an operator must decide

Matching is exact on the natural key (passport, case-insensitive) and only
the referent is checked.  Companions are always created as new persons.

Entry point: parse_form_export(), pure over its arguments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from resort_import.entities import Person, PersonDraft, Reservation, ReservationDraft
from resort_import.extract import extract_persons, extract_reservation
from resort_import.form_csv import cell, tokenize_rows
from resort_import.form_schema import ColumnMap, select_column_map
from resort_import.normalize import is_form_timestamp, normalize_passport
from resort_import.profile import DEFAULT_PROFILE, ImportProfile

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

STATUS_SKIP = "skip"
STATUS_NEW = "new"
STATUS_CONFLICT = "conflict"

RESOLUTION_KEEP = "keep"
RESOLUTION_REPLACE = "replace"
VALID_RESOLUTIONS = frozenset({RESOLUTION_KEEP, RESOLUTION_REPLACE})

# Birth date, nationality etc. never raise a conflict
CONFLICT_FIELDS = ("first_name", "last_name", "passport_number")

FIELD_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "passport_number": "Passport number",
}


# ---------------------------------------------------------------------------
# Row types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Conflict:
    field: str
    existing: str | None
    incoming: str | None

    @property
    def label(self) -> str:
        return FIELD_LABELS.get(self.field, self.field)


@dataclass(frozen=True)
class ImportRow:
    import_id: str
    status: str
    persons: tuple[PersonDraft, ...]
    reservation: ReservationDraft
    conflicts: tuple[Conflict, ...] = ()
    existing_person_id: str | None = None
    resolution: str | None = None

    @property
    def referent(self) -> PersonDraft | None:
        for person in self.persons:
            if person.is_referent:
                return person
        return None


@dataclass
class ParseResult:
    rows: list[ImportRow] = field(default_factory=list)
    form_language: str = "unknown"
    total_data_rows: int = 0

    def rows_with_status(self, status: str) -> list[ImportRow]:
        return [r for r in self.rows if r.status == status]

    @property
    def new_rows(self) -> list[ImportRow]:
        return self.rows_with_status(STATUS_NEW)

    @property
    def conflict_rows(self) -> list[ImportRow]:
        return self.rows_with_status(STATUS_CONFLICT)

    @property
    def skip_rows(self) -> list[ImportRow]:
        return self.rows_with_status(STATUS_SKIP)


# ---------------------------------------------------------------------------
# Snapshot indexes
# ---------------------------------------------------------------------------

def build_import_id_set(
    persons: Iterable[Person],
    reservations: Iterable[Reservation],
) -> set[str]:
    """Return every import_id already present among stored records.

    Recomputed on every run; never cached between imports.
    """
    ids: set[str] = set()
    for person in persons:
        if person.import_id:
            ids.add(person.import_id)
    for reservation in reservations:
        if reservation.import_id:
            ids.add(reservation.import_id)
    return ids


def build_passport_index(persons: Iterable[Person]) -> dict[str, Person]:
    """Index stored persons by normalized passport number (last one wins)."""
    index: dict[str, Person] = {}
    for person in persons:
        key = normalize_passport(person.passport_number)
        if key:
            index[key] = person
    return index


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def detect_conflicts(existing: Person, incoming: PersonDraft) -> list[Conflict]:
    """Compare identity fields; blanks on either side are never a conflict."""
    conflicts: list[Conflict] = []
    for name in CONFLICT_FIELDS:
        ev = getattr(existing, name) or None
        iv = getattr(incoming, name) or None
        if ev and iv and ev.lower() != iv.lower():
            conflicts.append(Conflict(field=name, existing=ev, incoming=iv))
    return conflicts


def is_data_row(row: list[str]) -> bool:
    return is_form_timestamp(cell(row, 0))


def classify_row(
    row: list[str],
    cols: ColumnMap,
    import_ids: set[str],
    passport_index: dict[str, Person],
    profile: ImportProfile = DEFAULT_PROFILE,
) -> ImportRow | None:
    """Classify one tokenized row; None for rows that are not data rows."""
    if not is_data_row(row):
        return None

    import_id = cell(row, cols.timestamp)
    reservation = extract_reservation(row, cols, import_id, profile)

    if import_id in import_ids:
        return ImportRow(
            import_id=import_id,
            status=STATUS_SKIP,
            persons=(),
            reservation=reservation,
        )

    persons = tuple(extract_persons(row, cols, import_id, profile))
    referent = persons[0] if persons else None

    key = normalize_passport(referent.passport_number) if referent else None
    existing = passport_index.get(key) if key else None
    if existing is None:
        return ImportRow(
            import_id=import_id,
            status=STATUS_NEW,
            persons=persons,
            reservation=reservation,
        )

    conflicts = tuple(detect_conflicts(existing, referent))
    return ImportRow(
        import_id=import_id,
        status=STATUS_CONFLICT if conflicts else STATUS_NEW,
        persons=persons,
        reservation=reservation,
        conflicts=conflicts,
        existing_person_id=existing.id,
    )


def parse_form_export(
    text: str,
    existing_persons: Iterable[Person],
    import_ids: set[str],
    profile: ImportProfile = DEFAULT_PROFILE,
) -> ParseResult:
    """Tokenize, detect the form edition and classify every data row."""
    all_rows = tokenize_rows(text)
    if not all_rows:
        return ParseResult(rows=[], form_language="unknown", total_data_rows=0)

    form_language, cols = select_column_map(all_rows[0])
    passport_index = build_passport_index(existing_persons)

    rows: list[ImportRow] = []
    for raw in all_rows:
        import_row = classify_row(raw, cols, import_ids, passport_index, profile)
        if import_row is not None:
            rows.append(import_row)

    result = ParseResult(rows=rows, form_language=form_language, total_data_rows=len(rows))
    log.debug(
        "parsed %d data rows (form_language=%s): %d new, %d conflict, %d skip",
        result.total_data_rows,
        form_language,
        len(result.new_rows),
        len(result.conflict_rows),
        len(result.skip_rows),
    )
    return result
