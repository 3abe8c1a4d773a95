"""Unit tests for resort_import.commit."""

from __future__ import annotations

import itertools
from datetime import date

import pytest

from resort_import.classify import STATUS_CONFLICT, STATUS_NEW, STATUS_SKIP, Conflict, ImportRow
from resort_import.commit import materialize, new_entity_id, next_reservation_number
from resort_import.entities import PersonDraft, Reservation, ReservationDraft
from resort_import.shared import ImportCounters, UnresolvedConflictError


def _ids():
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}_{next(counter)}"


def _row(
    import_id: str = "05/02/2026 10:00:00",
    status: str = STATUS_NEW,
    travelers: list[tuple[str, str, str | None]] | None = None,
    existing_person_id: str | None = None,
    resolution: str | None = None,
    conflicts: tuple[Conflict, ...] = (),
) -> ImportRow:
    if travelers is None:
        travelers = [("Jean", "Dupond", "AB123456"), ("Paul", "Martin", None)]
    persons = tuple(
        PersonDraft(first, last, passport, import_id, is_referent=(i == 0))
        for i, (first, last, passport) in enumerate(travelers)
    )
    return ImportRow(
        import_id=import_id,
        status=status,
        persons=persons,
        reservation=ReservationDraft(
            import_id=import_id,
            check_in=date(2026, 2, 5),
            check_out=date(2026, 2, 8),
            nights=3,
            taxi_arrival=True,
            taxi_departure=True,
            luggage_count=2,
            emergency_contact_name="Marie Dupont",
        ),
        conflicts=conflicts,
        existing_person_id=existing_person_id,
        resolution=resolution,
    )


LAST_NAME_CONFLICT = (Conflict(field="last_name", existing="Dupont", incoming="Dupond"),)


# ---------------------------------------------------------------------------
# next_reservation_number
# ---------------------------------------------------------------------------

class TestNextReservationNumber:
    def test_empty(self):
        assert next_reservation_number([]) == 1

    def test_max_plus_one(self):
        reservations = [
            Reservation(id="a", booking_number=7, client_id="c"),
            Reservation(id="b", booking_number=3, client_id="c"),
        ]
        assert next_reservation_number(reservations) == 8


# ---------------------------------------------------------------------------
# materialize
# ---------------------------------------------------------------------------

class TestMaterialize:
    def test_new_row(self):
        result = materialize([_row()], 42, new_id=_ids())
        assert [p.id for p in result.persons] == ["c_1", "c_2"]
        assert [p.first_name for p in result.persons] == ["Jean", "Paul"]
        (reservation,) = result.reservations
        assert reservation.id == "bk_3"
        assert reservation.booking_number == 42
        assert reservation.client_id == "c_1"
        assert reservation.check_in == date(2026, 2, 5)
        assert reservation.check_out == date(2026, 2, 8)
        assert reservation.taxi_arrival is True
        assert reservation.luggage_count == 2
        assert reservation.import_id == "05/02/2026 10:00:00"
        assert reservation.emergency_contact_name == "Marie Dupont"

    def test_participants_snapshot(self):
        result = materialize([_row()], 1, new_id=_ids())
        participants = result.reservations[0].participants
        assert [(p.id, p.first_name, p.passport_number) for p in participants] == [
            ("p_05/02/2026 10:00:00_0", "Jean", "AB123456"),
            ("p_05/02/2026 10:00:00_1", "Paul", ""),
        ]

    def test_persons_carry_import_id(self):
        result = materialize([_row()], 1, new_id=_ids())
        assert {p.import_id for p in result.persons} == {"05/02/2026 10:00:00"}

    def test_keep_reuses_existing_person(self):
        row = _row(existing_person_id="c_existing", resolution="keep", conflicts=LAST_NAME_CONFLICT)
        counters = ImportCounters()
        result = materialize([row], 1, new_id=_ids(), counters=counters)
        assert [p.first_name for p in result.persons] == ["Paul"]
        reservation = result.reservations[0]
        assert reservation.client_id == "c_existing"
        assert len(reservation.participants) == 2
        assert counters.persons_reused == 1
        assert counters.persons_created == 1

    def test_replace_creates_new_person(self):
        row = _row(existing_person_id="c_existing", resolution="replace", conflicts=LAST_NAME_CONFLICT)
        result = materialize([row], 1, new_id=_ids())
        referent = result.persons[0]
        assert referent.id == "c_1"
        assert referent.last_name == "Dupond"
        assert result.reservations[0].client_id == "c_1"

    def test_passport_match_without_conflict_creates_person(self):
        row = _row(existing_person_id="c_existing")
        result = materialize([row], 1, new_id=_ids())
        assert len(result.persons) == 2
        assert result.reservations[0].client_id == "c_1"

    def test_booking_numbers_sequential(self):
        rows = [_row(import_id=f"0{i}/02/2026 10:00:00") for i in range(1, 4)]
        result = materialize(rows, 10, new_id=_ids())
        assert [r.booking_number for r in result.reservations] == [10, 11, 12]

    def test_skip_rows_ignored(self):
        rows = [_row(status=STATUS_SKIP, travelers=[]), _row(import_id="06/02/2026 10:00:00")]
        result = materialize(rows, 1, new_id=_ids())
        assert len(result.reservations) == 1
        assert result.reservations[0].import_id == "06/02/2026 10:00:00"

    def test_unresolved_conflict_refused(self):
        rows = [_row(), _row(import_id="x", status=STATUS_CONFLICT, conflicts=LAST_NAME_CONFLICT)]
        with pytest.raises(UnresolvedConflictError) as exc:
            materialize(rows, 1, new_id=_ids())
        assert exc.value.import_ids == ["x"]

    def test_row_without_travelers_gets_placeholder_client(self):
        result = materialize([_row(travelers=[])], 1, new_id=_ids())
        assert result.persons == []
        assert result.reservations[0].client_id == "c_05/02/2026 10:00:00"
        assert result.reservations[0].participants == []

    def test_inputs_not_mutated(self):
        row = _row()
        materialize([row], 1, new_id=_ids())
        assert row.status == STATUS_NEW
        assert row.persons[0].first_name == "Jean"

    def test_participants_match_drafts(self):
        rows = [
            _row(import_id="a", travelers=[("A", "One", None)]),
            _row(import_id="b", existing_person_id="c_x", resolution="keep", conflicts=LAST_NAME_CONFLICT),
            _row(import_id="c", travelers=[("A", "1", None), ("B", "2", None), ("C", "3", None), ("D", "4", None)]),
        ]
        result = materialize(rows, 1, new_id=_ids())
        for row, reservation in zip(rows, result.reservations):
            assert len(reservation.participants) == len(row.persons)


class TestNewEntityId:
    def test_prefix_and_unique(self):
        a, b = new_entity_id("c"), new_entity_id("c")
        assert a.startswith("c_")
        assert a != b
