"""resort_import.commit

Materialize resolved import rows into final persons and reservations.

Input is the full row list after conflict resolution.  'skip' rows are
ignored; any row still in 'conflict' aborts the commit before anything is
built.  For each 'new' row:

  - every traveler becomes a Person with a fresh id, except the referent of
    a row resolved 'keep', whose stored person is reused
  - one Reservation with a fresh id and the next sequential booking number,
    linked to the kept stored person or to the newly created referent
  - the reservation's participants list is a snapshot of every traveler on
    the row, referent included, whether or not a Person was created for it

Commit only appends: inputs are never mutated and nothing existing is
touched.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterable

from resort_import.classify import (
    RESOLUTION_KEEP,
    STATUS_CONFLICT,
    STATUS_NEW,
    ImportRow,
)
from resort_import.entities import Participant, Person, Reservation
from resort_import.shared import ImportCounters, UnresolvedConflictError

log = logging.getLogger(__name__)


def new_entity_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


@dataclass
class CommitResult:
    persons: list[Person] = field(default_factory=list)
    reservations: list[Reservation] = field(default_factory=list)


def next_reservation_number(reservations: Iterable[Reservation]) -> int:
    """Highest stored booking_number + 1 (1 when there are none)."""
    return max((r.booking_number for r in reservations), default=0) + 1


def _participants(row: ImportRow) -> list[Participant]:
    return [
        Participant(
            id=f"p_{row.import_id}_{i}",
            first_name=draft.first_name,
            last_name=draft.last_name,
            passport_number=draft.passport_number or "",
        )
        for i, draft in enumerate(row.persons)
    ]


def materialize(
    rows: Iterable[ImportRow],
    next_booking_number: int,
    new_id: Callable[[str], str] = new_entity_id,
    counters: ImportCounters | None = None,
) -> CommitResult:
    """Build the persons/reservations delta for every 'new' row.

    Raises:
        UnresolvedConflictError: a row is still in 'conflict'.
    """
    rows = list(rows)
    unresolved = [r.import_id for r in rows if r.status == STATUS_CONFLICT]
    if unresolved:
        raise UnresolvedConflictError(unresolved)

    counters = counters if counters is not None else ImportCounters()
    result = CommitResult()
    booking_number = next_booking_number

    for row in rows:
        if row.status != STATUS_NEW:
            continue

        keep_existing = bool(row.existing_person_id) and row.resolution == RESOLUTION_KEEP
        referent_id: str | None = None

        for draft in row.persons:
            if draft.is_referent and keep_existing:
                counters.persons_reused += 1
                continue
            person = Person.from_draft(new_id("c"), draft)
            result.persons.append(person)
            counters.persons_created += 1
            if draft.is_referent:
                referent_id = person.id

        if keep_existing:
            client_id = row.existing_person_id
        elif referent_id is not None:
            client_id = referent_id
        else:
            # Row without any traveler names; keep a stable placeholder link
            client_id = f"c_{row.import_id}"

        draft = row.reservation
        result.reservations.append(
            Reservation(
                id=new_id("bk"),
                booking_number=booking_number,
                client_id=client_id,
                check_in=draft.check_in,
                check_out=draft.check_out,
                status=draft.status,
                num_center_access=draft.num_center_access,
                arrival_time=draft.arrival_time,
                departure_time=draft.departure_time,
                luggage_count=draft.luggage_count,
                boardbag_count=draft.boardbag_count,
                taxi_arrival=draft.taxi_arrival,
                taxi_departure=draft.taxi_departure,
                participants=_participants(row),
                import_id=row.import_id,
                emergency_contact_name=draft.emergency_contact_name,
                emergency_contact_phone=draft.emergency_contact_phone,
                emergency_contact_email=draft.emergency_contact_email,
            )
        )
        booking_number += 1
        counters.reservations_created += 1

    log.debug(
        "commit built %d person(s), %d reservation(s)",
        len(result.persons), len(result.reservations),
    )
    return result
