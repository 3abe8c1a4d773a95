"""resort_import.entities

Records exchanged with the surrounding console application.

Person and Reservation mirror the application's client and booking rows;
PersonDraft and ReservationDraft are the per-row extraction results that
exist only until commit.  to_dict()/from_dict() define the JSON shape used
by the snapshot files.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import date
from typing import Any

from resort_import.normalize import trim


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_iso(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    v = trim(value) if isinstance(value, str) else None
    if v is None:
        return None
    try:
        return date.fromisoformat(v[:10])
    except ValueError:
        return None


def _known(cls: type, data: dict[str, Any]) -> dict[str, Any]:
    """Keep the fields cls declares; text fields holding numbers become str."""
    text_fields = {f.name for f in fields(cls) if str(f.type).startswith("str")}
    names = {f.name for f in fields(cls)}
    out: dict[str, Any] = {}
    for k, v in data.items():
        if k not in names:
            continue
        if k in text_fields and isinstance(v, (int, float)):
            v = str(v)
        out[k] = v
    return out


# ---------------------------------------------------------------------------
# Drafts (one import run only)
# ---------------------------------------------------------------------------

@dataclass
class PersonDraft:
    first_name: str
    last_name: str
    passport_number: str | None
    import_id: str
    is_referent: bool = False
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_email: str | None = None
    emergency_contact_relation: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class ReservationDraft:
    import_id: str
    check_in: date | None = None
    check_out: date | None = None
    nights: int = 0
    arrival_time: str | None = None
    departure_time: str | None = None
    taxi_arrival: bool = False
    taxi_departure: bool = False
    luggage_count: int = 0
    boardbag_count: int = 0
    num_center_access: int = 1
    status: str = "confirmed"
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_email: str | None = None


# ---------------------------------------------------------------------------
# Final records
# ---------------------------------------------------------------------------

@dataclass
class Person:
    id: str
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    nationality: str | None = None
    passport_number: str | None = None
    birth_date: str | None = None
    kite_level: str | None = None
    import_id: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_email: str | None = None
    emergency_contact_relation: str | None = None

    @classmethod
    def from_draft(cls, person_id: str, draft: PersonDraft) -> Person:
        return cls(
            id=person_id,
            first_name=draft.first_name,
            last_name=draft.last_name,
            passport_number=draft.passport_number,
            import_id=draft.import_id,
            emergency_contact_name=draft.emergency_contact_name,
            emergency_contact_phone=draft.emergency_contact_phone,
            emergency_contact_email=draft.emergency_contact_email,
            emergency_contact_relation=draft.emergency_contact_relation,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Person:
        values = _known(cls, data)
        values.setdefault("id", "")
        values.setdefault("first_name", "")
        values.setdefault("last_name", "")
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Participant:
    id: str
    first_name: str
    last_name: str
    passport_number: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Participant:
        return cls(**_known(cls, data))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Reservation:
    id: str
    booking_number: int
    client_id: str
    check_in: date | None = None
    check_out: date | None = None
    status: str = "confirmed"
    visa_entry_date: str | None = None
    visa_exit_date: str | None = None
    notes: str | None = None
    num_lessons: int = 0
    num_equipment_rentals: int = 0
    num_center_access: int = 1
    arrival_time: str | None = None
    departure_time: str | None = None
    luggage_count: int = 0
    boardbag_count: int = 0
    taxi_arrival: bool = False
    taxi_departure: bool = False
    couples_count: int = 0
    children_count: int = 0
    participants: list[Participant] = field(default_factory=list)
    amount_paid: float = 0
    import_id: str | None = None
    emergency_contact_name: str | None = None
    emergency_contact_phone: str | None = None
    emergency_contact_email: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reservation:
        values = _known(cls, data)
        values["check_in"] = _parse_iso(values.get("check_in"))
        values["check_out"] = _parse_iso(values.get("check_out"))
        values["participants"] = [
            Participant.from_dict(p) for p in values.get("participants") or []
        ]
        values["booking_number"] = int(values.get("booking_number") or 0)
        values.setdefault("id", "")
        values.setdefault("client_id", "")
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["check_in"] = _iso(self.check_in)
        out["check_out"] = _iso(self.check_out)
        return out
