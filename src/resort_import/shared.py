"""resort_import.shared

Shared utilities for the import pipeline and its command line: workflow
exceptions, run counters, JSON snapshot I/O, the decisions CSV reader and
report-writing support.
"""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from resort_import.entities import Person, Reservation

_DECISION_COLS = frozenset({"import_id", "resolution"})
_VALID_DECISIONS = frozenset({"keep", "replace"})


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ImportWorkflowError(Exception):
    """Base class for misuse of the import workflow by the caller."""


class StepperIdleError(ImportWorkflowError):
    """Raised when a decision is applied while no conflict is presented."""


class InvalidDecisionError(ImportWorkflowError, ValueError):
    """Raised for a decision other than 'keep' or 'replace'."""


class MissingDecisionError(ImportWorkflowError):
    """Raised when file-driven resolution has no decision for a conflict."""

    def __init__(self, import_id: str) -> None:
        super().__init__(f"no decision for conflicting row {import_id!r}")
        self.import_id = import_id


class UnresolvedConflictError(ImportWorkflowError):
    """Raised when rows still in 'conflict' are handed to commit."""

    def __init__(self, import_ids: list[str]) -> None:
        super().__init__(
            f"{len(import_ids)} row(s) still in conflict: {import_ids[:10]}"
        )
        self.import_ids = import_ids


# ---------------------------------------------------------------------------
# ImportCounters
# ---------------------------------------------------------------------------

@dataclass
class ImportCounters:
    data_rows: int = 0
    rows_new: int = 0
    rows_conflict: int = 0
    rows_skipped: int = 0
    decisions_read: int = 0
    decisions_invalid: int = 0
    conflicts_kept: int = 0
    conflicts_replaced: int = 0
    persons_created: int = 0
    persons_reused: int = 0
    reservations_created: int = 0
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data_rows": self.data_rows,
            "rows_new": self.rows_new,
            "rows_conflict": self.rows_conflict,
            "rows_skipped": self.rows_skipped,
            "decisions_read": self.decisions_read,
            "decisions_invalid": self.decisions_invalid,
            "conflicts_kept": self.conflicts_kept,
            "conflicts_replaced": self.conflicts_replaced,
            "persons_created": self.persons_created,
            "persons_reused": self.persons_reused,
            "reservations_created": self.reservations_created,
            "warnings": self.warnings[:50],
        }


# ---------------------------------------------------------------------------
# Snapshot I/O
# ---------------------------------------------------------------------------

def load_snapshot(path: Path | None) -> list[dict[str, Any]]:
    """Read a JSON array of records; a missing path means an empty snapshot."""
    if path is None or not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8") or "[]")
    if not isinstance(data, list):
        raise ValueError(f"snapshot must be a JSON array: {path}")
    return [r for r in data if isinstance(r, dict)]


def load_persons(path: Path | None) -> list[Person]:
    return [Person.from_dict(r) for r in load_snapshot(path)]


def load_reservations(path: Path | None) -> list[Reservation]:
    return [Reservation.from_dict(r) for r in load_snapshot(path)]


def write_snapshot(path: Path, records: Iterable[Person | Reservation]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.to_dict() for r in records]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Decisions CSV
# ---------------------------------------------------------------------------

def read_decisions(path: Path, counters: ImportCounters) -> dict[str, str]:
    """Read 'import_id,resolution' rows into an ordered mapping.

    Invalid rows are counted and warned about, not applied; a conflict left
    without a decision is caught later by the stepper.
    """
    decisions: dict[str, str] = {}
    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        if reader.fieldnames is None:
            raise ValueError(f"decisions CSV is empty or has no header: {path}")
        missing = _DECISION_COLS - {name.strip() for name in reader.fieldnames}
        if missing:
            raise ValueError(
                f"decisions CSV missing required columns: {sorted(missing)}"
            )

        for idx, raw_row in enumerate(reader):
            counters.decisions_read += 1
            row = {(k or "").strip(): v for k, v in raw_row.items()}
            import_id = (row.get("import_id") or "").strip()
            resolution = (row.get("resolution") or "").strip().lower()
            if not import_id:
                counters.decisions_invalid += 1
                counters.warnings.append(f"decision row {idx}: missing import_id")
                continue
            if resolution not in _VALID_DECISIONS:
                counters.decisions_invalid += 1
                counters.warnings.append(
                    f"decision row {idx}: unknown resolution={resolution!r}"
                )
                continue
            decisions[import_id] = resolution
    return decisions


# ---------------------------------------------------------------------------
# Report writer
# ---------------------------------------------------------------------------

def write_run_report(
    run_id: str,
    started_at: str,
    dry_run: bool,
    source_paths: dict[str, str | None],
    counters: ImportCounters,
    report_dir: Path = Path("./artifacts/reports"),
    extra: dict[str, Any] | None = None,
) -> Path:
    report = {
        "run_id": run_id,
        "started_at": started_at,
        "finished_at": datetime.now(timezone.utc).isoformat(),
        "dry_run": dry_run,
        **source_paths,
        **(extra or {}),
        "counters": counters.to_dict(),
    }
    report_path = report_dir / f"{run_id}.json"
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(json.dumps(report, indent=2, default=str))
    return report_path
