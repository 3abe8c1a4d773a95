"""resort_import.extract

Entity extraction for one export row.

A row describes one stay: the reservation columns at the front, then a
repeating block of travelers (first name, last name, passport).  The first
traveler is the referent; only the referent carries the emergency contact.
The traveler-count answer on the form is unreliable, so the block is read
until the first slot with neither a first nor a last name.
"""

from __future__ import annotations

from resort_import.entities import PersonDraft, ReservationDraft
from resort_import.form_csv import cell
from resort_import.form_schema import ColumnMap
from resort_import.normalize import (
    add_days,
    first_int,
    is_affirmative,
    parse_form_date,
    parse_form_time,
    parse_headcount,
    trim,
)
from resort_import.profile import DEFAULT_PROFILE, ImportProfile


def extract_emergency_contact(row: list[str], cols: ColumnMap) -> dict[str, str | None]:
    return {
        "emergency_contact_name": trim(cell(row, cols.emergency_name)),
        "emergency_contact_phone": trim(cell(row, cols.emergency_phone)),
        "emergency_contact_email": trim(cell(row, cols.emergency_email)),
        "emergency_contact_relation": trim(cell(row, cols.emergency_relation)),
    }


def extract_persons(
    row: list[str],
    cols: ColumnMap,
    import_id: str,
    profile: ImportProfile = DEFAULT_PROFILE,
) -> list[PersonDraft]:
    """Return the travelers of a row, referent first."""
    emergency = extract_emergency_contact(row, cols)
    persons: list[PersonDraft] = []
    for slot in range(profile.max_travelers):
        first_col, last_col, passport_col = cols.traveler_columns(slot)
        first_name = cell(row, first_col)
        last_name = cell(row, last_col)
        # Stop test looks at names only; a stray passport does not make a traveler
        if not first_name and not last_name:
            break

        draft = PersonDraft(
            first_name=first_name,
            last_name=last_name,
            passport_number=trim(cell(row, passport_col)),
            import_id=import_id,
            is_referent=(slot == 0),
        )
        if draft.is_referent:
            draft.emergency_contact_name = emergency["emergency_contact_name"]
            draft.emergency_contact_phone = emergency["emergency_contact_phone"]
            draft.emergency_contact_email = emergency["emergency_contact_email"]
            draft.emergency_contact_relation = emergency["emergency_contact_relation"]
        persons.append(draft)
    return persons


def extract_reservation(
    row: list[str],
    cols: ColumnMap,
    import_id: str,
    profile: ImportProfile = DEFAULT_PROFILE,
) -> ReservationDraft:
    """Return the reservation described by a row."""
    check_in = parse_form_date(cell(row, cols.arrival_date))
    nights = first_int(cell(row, cols.num_nights))
    wants_taxi = is_affirmative(cell(row, cols.transport), profile.affirmative_tokens)
    emergency = extract_emergency_contact(row, cols)

    return ReservationDraft(
        import_id=import_id,
        check_in=check_in,
        check_out=add_days(check_in, nights),
        nights=nights,
        arrival_time=parse_form_time(cell(row, cols.arrival_time)),
        departure_time=parse_form_time(cell(row, cols.departure_time)),
        # The form asks a single transport question for both legs
        taxi_arrival=wants_taxi,
        taxi_departure=wants_taxi,
        luggage_count=first_int(cell(row, cols.luggage)),
        boardbag_count=first_int(cell(row, cols.boardbags)),
        num_center_access=parse_headcount(cell(row, cols.num_people)),
        status=profile.reservation_status,
        emergency_contact_name=emergency["emergency_contact_name"],
        emergency_contact_phone=emergency["emergency_contact_phone"],
        emergency_contact_email=emergency["emergency_contact_email"],
    )
