"""resort_import.conflict_stepper

Operator conflict resolution for an import run.

Rows classified 'conflict' are presented one at a time, in file order.  Each
must be decided before the next one is shown:

    keep     -- the stored person wins; the referent is not re-created at
                commit and the reservation links to the stored person
    replace  -- the incoming data wins; a new person is created as usual

Either decision records the resolution on the row and reclassifies it 'new'.
The row's conflicts are kept for audit.

The stepper is a reducer over an immutable StepperState:

    state = start_resolution(result.rows)
    while (row := current_conflict(state)) is not None:
        state = resolve(state, ask_operator(row))
    rows = state.rows

State guards:
  - resolve() on an idle state raises StepperIdleError
  - any decision other than keep/replace raises InvalidDecisionError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from resort_import.classify import (
    STATUS_CONFLICT,
    STATUS_NEW,
    VALID_RESOLUTIONS,
    ImportRow,
)
from resort_import.shared import (
    InvalidDecisionError,
    MissingDecisionError,
    StepperIdleError,
)

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepperState:
    rows: tuple[ImportRow, ...]
    queue: tuple[int, ...]
    cursor: int = 0

    @property
    def is_idle(self) -> bool:
        return self.cursor >= len(self.queue)

    @property
    def total(self) -> int:
        """n in 'conflict i of n'."""
        return len(self.queue)

    @property
    def position(self) -> int | None:
        """1-based i in 'conflict i of n'; None when idle."""
        return None if self.is_idle else self.cursor + 1


def start_resolution(rows: Iterable[ImportRow]) -> StepperState:
    """Queue every conflict row in row order."""
    frozen = tuple(rows)
    queue = tuple(i for i, r in enumerate(frozen) if r.status == STATUS_CONFLICT)
    log.debug("conflict resolution started: %d conflict(s)", len(queue))
    return StepperState(rows=frozen, queue=queue)


def current_conflict(state: StepperState) -> ImportRow | None:
    if state.is_idle:
        return None
    return state.rows[state.queue[state.cursor]]


def resolve(state: StepperState, decision: str) -> StepperState:
    """Apply the operator's decision to the presented row and advance."""
    if decision not in VALID_RESOLUTIONS:
        raise InvalidDecisionError(
            f"invalid decision {decision!r}; expected one of {sorted(VALID_RESOLUTIONS)}"
        )
    if state.is_idle:
        raise StepperIdleError("no conflict is being presented")

    index = state.queue[state.cursor]
    row = state.rows[index]
    resolved = replace(row, status=STATUS_NEW, resolution=decision)
    rows = state.rows[:index] + (resolved,) + state.rows[index + 1:]
    log.debug(
        "conflict %d/%d (%s) resolved: %s",
        state.cursor + 1, state.total, row.import_id, decision,
    )
    return StepperState(rows=rows, queue=state.queue, cursor=state.cursor + 1)


# ---------------------------------------------------------------------------
# File-driven resolution
# ---------------------------------------------------------------------------

def apply_decisions(
    rows: Iterable[ImportRow],
    decisions: Mapping[str, str],
) -> tuple[list[ImportRow], list[str]]:
    """Step through every conflict using decisions keyed by import_id.

    Returns (rows, unused_import_ids).  Decisions naming rows that were not
    presented as conflicts are returned as unused rather than applied.

    Raises:
        MissingDecisionError: a presented conflict has no decision.
        InvalidDecisionError: a decision is not keep/replace.
    """
    state = start_resolution(rows)
    used: set[str] = set()
    while (row := current_conflict(state)) is not None:
        decision = decisions.get(row.import_id)
        if decision is None:
            raise MissingDecisionError(row.import_id)
        state = resolve(state, decision)
        used.add(row.import_id)
    unused = [import_id for import_id in decisions if import_id not in used]
    return list(state.rows), unused
