"""resort_import.form_schema

Column layouts of the booking form, one per language edition.

The French and English editions of the form ask the same questions but in a
different order, so the export columns move.  Detection looks at a single
header cell (column 13), which holds a different question in each edition.
Anything unrecognized falls back to the French layout, the first edition of the form.
"""

from __future__ import annotations

from dataclasses import dataclass

from resort_import.form_csv import cell

TRAVELER_WIDTH = 3
MAX_TRAVELER_SLOTS = 4

_DISCRIMINATOR_COL = 13
_EN_MARKERS = ("how did you know", "how did you hear")
_FR_MARKERS = ("voyageur", "pr", "nom")


@dataclass(frozen=True)
class ColumnMap:
    """Field indexes of one form edition.

    Travelers occupy TRAVELER_WIDTH consecutive columns each (first name,
    last name, passport) starting at traveler1_start.
    """

    label: str
    timestamp: int
    referent: int
    num_people: int
    num_nights: int
    arrival_date: int
    arrival_time: int
    departure_date: int
    departure_time: int
    transport: int
    luggage: int
    boardbags: int
    double_beds: int
    single_beds: int
    emergency_name: int
    emergency_phone: int
    emergency_email: int
    emergency_relation: int
    traveler1_start: int

    def traveler_columns(self, slot: int) -> tuple[int, int, int]:
        """(first_name, last_name, passport) indexes for a 0-based traveler slot."""
        base = self.traveler1_start + slot * TRAVELER_WIDTH
        return base, base + 1, base + 2


COL_FR = ColumnMap(
    label="fr",
    timestamp=0, referent=1, num_people=2, num_nights=3,
    arrival_date=4, arrival_time=5, departure_date=6, departure_time=7,
    transport=8, luggage=9, boardbags=10, double_beds=11, single_beds=12,
    traveler1_start=13,
    emergency_name=25, emergency_phone=26, emergency_email=27, emergency_relation=28,
)

COL_EN = ColumnMap(
    label="en",
    timestamp=0, referent=1, num_people=2, num_nights=3,
    arrival_date=4, arrival_time=5, departure_date=6, departure_time=7,
    transport=8, luggage=9, boardbags=10, double_beds=11, single_beds=12,
    emergency_name=14, emergency_phone=15, emergency_email=16, emergency_relation=17,
    traveler1_start=20,
)

DEFAULT_COLUMN_MAP = COL_FR

_COLUMN_MAPS: dict[str, ColumnMap] = {
    "fr": COL_FR,
    "en": COL_EN,
}


def detect_form_language(header: list[str]) -> str:
    """Return 'en', 'fr' or 'unknown' from the export header row."""
    probe = cell(header, _DISCRIMINATOR_COL).lower()
    if any(marker in probe for marker in _EN_MARKERS):
        return "en"
    # FR column 13 is "Prénoms du voyageur 1 ..."
    if any(marker in probe for marker in _FR_MARKERS):
        return "fr"
    return "unknown"


def column_map_for(form_language: str) -> ColumnMap:
    """Total lookup: unknown labels get the default layout."""
    return _COLUMN_MAPS.get(form_language, DEFAULT_COLUMN_MAP)


def select_column_map(header: list[str]) -> tuple[str, ColumnMap]:
    """Detect the edition once per run and return (label, layout)."""
    form_language = detect_form_language(header)
    return form_language, column_map_for(form_language)
