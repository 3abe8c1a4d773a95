"""resort_import.cli

Command line for the Google Forms booking import.

    resort-import --csv-path export.csv \
        --persons-path data/persons.json \
        --reservations-path data/reservations.json \
        [--decisions-path decisions.csv] [--dry-run]

Steps: review (classify every row), resolve conflicts (interactive prompts,
or a decisions CSV with columns import_id,resolution), commit (write the new
persons/reservations as JSON deltas next to a run report).  Nothing is
written until every conflict has been decided.
"""

from __future__ import annotations

import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

import click

from resort_import.classify import (
    RESOLUTION_KEEP,
    RESOLUTION_REPLACE,
    ImportRow,
    ParseResult,
    build_import_id_set,
    parse_form_export,
)
from resort_import.commit import materialize, next_reservation_number
from resort_import.conflict_stepper import (
    StepperState,
    apply_decisions,
    current_conflict,
    resolve,
    start_resolution,
)
from resort_import.entities import Person
from resort_import.profile import DEFAULT_PROFILE, load_import_profile
from resort_import.shared import (
    ImportCounters,
    ImportWorkflowError,
    load_persons,
    load_reservations,
    read_decisions,
    write_run_report,
    write_snapshot,
)

_LANGUAGE_LABELS = {"fr": "French form", "en": "English form"}


# ---------------------------------------------------------------------------
# Review / prompts
# ---------------------------------------------------------------------------

def _echo_review(run_id: str, result: ParseResult) -> None:
    language = _LANGUAGE_LABELS.get(result.form_language, "Unknown form")
    click.echo(
        f"[{run_id}] Review: {result.total_data_rows} rows found ({language}) - "
        f"{len(result.new_rows)} new, {len(result.conflict_rows)} conflict(s), "
        f"{len(result.skip_rows)} already imported"
    )
    for row in result.new_rows:
        ref = row.referent
        name = ref.display_name if ref else "?"
        arrival = row.reservation.check_in.isoformat() if row.reservation.check_in else "-"
        click.echo(
            f"[{run_id}]   new  {name}: {len(row.persons)} person(s), "
            f"arrival {arrival}, {row.reservation.nights or '?'} night(s)"
        )
    for row in result.conflict_rows:
        ref = row.referent
        name = ref.display_name if ref else "?"
        fields = ", ".join(c.label for c in row.conflicts)
        click.echo(f"[{run_id}]   conflict  {name} - {fields}")
    if not result.new_rows and not result.conflict_rows:
        click.echo(f"[{run_id}] All rows already imported - nothing to do.")


def _prompt_conflicts(
    run_id: str,
    rows: list[ImportRow],
    persons_by_id: dict[str, Person],
) -> list[ImportRow]:
    state: StepperState = start_resolution(rows)
    while (row := current_conflict(state)) is not None:
        ref = row.referent
        stored = persons_by_id.get(row.existing_person_id or "")
        stored_name = f"{stored.first_name} {stored.last_name}" if stored else "?"
        click.echo(
            f"[{run_id}] Conflict {state.position}/{state.total} · passport "
            f"{ref.passport_number if ref else '?'} already exists as {stored_name}"
        )
        for conflict in row.conflicts:
            click.echo(
                f"    {conflict.label}: stored={conflict.existing!r} "
                f"incoming={conflict.incoming!r}"
            )
        decision = click.prompt(
            "    keep stored data or replace with incoming",
            type=click.Choice([RESOLUTION_KEEP, RESOLUTION_REPLACE]),
        )
        state = resolve(state, decision)
    return list(state.rows)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

def _run_import(
    run_id: str,
    counters: ImportCounters,
    csv_path: Path,
    persons_path: Path | None,
    reservations_path: Path | None,
    decisions_path: Path | None,
    profile_path: Path | None,
    out_dir: Path,
    dry_run: bool,
) -> dict[str, str | None]:
    profile = load_import_profile(profile_path) if profile_path else DEFAULT_PROFILE
    persons = load_persons(persons_path)
    reservations = load_reservations(reservations_path)
    text = csv_path.read_text(encoding="utf-8-sig")

    click.echo(
        f"[{run_id}] Snapshot: {len(persons)} person(s), {len(reservations)} reservation(s); "
        f"profile {profile.version}"
    )

    # Review
    import_ids = build_import_id_set(persons, reservations)
    result = parse_form_export(text, persons, import_ids, profile=profile)
    counters.data_rows = result.total_data_rows
    counters.rows_new = len(result.new_rows)
    counters.rows_conflict = len(result.conflict_rows)
    counters.rows_skipped = len(result.skip_rows)
    _echo_review(run_id, result)

    # Conflicts
    rows = result.rows
    if result.conflict_rows:
        if decisions_path is not None:
            decisions = read_decisions(decisions_path, counters)
            rows, unused = apply_decisions(rows, decisions)
            for import_id in unused:
                counters.warnings.append(f"decision for {import_id} matched no conflict")
        else:
            rows = _prompt_conflicts(run_id, rows, {p.id: p for p in persons})
        for row in rows:
            if row.conflicts and row.resolution == RESOLUTION_KEEP:
                counters.conflicts_kept += 1
            elif row.conflicts and row.resolution == RESOLUTION_REPLACE:
                counters.conflicts_replaced += 1

    # Commit
    delta = materialize(rows, next_reservation_number(reservations), counters=counters)
    click.echo(
        f"[{run_id}] Ready to import: {len(delta.persons)} person(s), "
        f"{len(delta.reservations)} reservation(s)"
    )

    outputs: dict[str, str | None] = {
        "profile_version": profile.version,
        "profile_yaml_hash": profile.yaml_hash,
    }
    if dry_run:
        click.echo(f"[{run_id}] [dry-run] No deltas written.")
        return outputs

    persons_out = write_snapshot(out_dir / f"persons_{run_id}.json", delta.persons)
    reservations_out = write_snapshot(out_dir / f"reservations_{run_id}.json", delta.reservations)
    click.echo(f"[{run_id}] Wrote {persons_out} and {reservations_out}")
    outputs["persons_out"] = str(persons_out)
    outputs["reservations_out"] = str(reservations_out)
    return outputs


@click.command()
@click.option("--csv-path", required=True, type=click.Path(), help="Google Forms CSV export")
@click.option("--persons-path", default=None, type=click.Path(), help="JSON array of stored persons")
@click.option("--reservations-path", default=None, type=click.Path(), help="JSON array of stored reservations")
@click.option(
    "--decisions-path",
    default=None,
    type=click.Path(),
    help="CSV of conflict decisions (import_id,resolution); prompts interactively when omitted",
)
@click.option("--profile-path", default=None, type=click.Path(), help="YAML import profile")
@click.option(
    "--out-dir",
    default="./artifacts/imports",
    show_default=True,
    type=click.Path(),
    help="Directory for the persons/reservations JSON deltas",
)
@click.option(
    "--report-dir",
    default="./artifacts/reports",
    show_default=True,
    type=click.Path(),
)
@click.option("--dry-run", is_flag=True, default=False)
@click.option("--run-id", default=None, help="Override UUID for log correlation")
@click.option("--verbose", is_flag=True, default=False, help="Debug logging")
def main(
    csv_path: str,
    persons_path: str | None,
    reservations_path: str | None,
    decisions_path: str | None,
    profile_path: str | None,
    out_dir: str,
    report_dir: str,
    dry_run: bool,
    run_id: str | None,
    verbose: bool,
) -> None:
    """Import a Google Forms booking export into the resort console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_id = run_id or str(uuid.uuid4())
    started_at = datetime.now(timezone.utc).isoformat()
    counters = ImportCounters()

    click.echo(f"[{run_id}] Starting import run (dry_run={dry_run})")

    try:
        outputs = _run_import(
            run_id,
            counters,
            csv_path=Path(csv_path),
            persons_path=Path(persons_path) if persons_path else None,
            reservations_path=Path(reservations_path) if reservations_path else None,
            decisions_path=Path(decisions_path) if decisions_path else None,
            profile_path=Path(profile_path) if profile_path else None,
            out_dir=Path(out_dir),
            dry_run=dry_run,
        )
    except (OSError, ValueError, ImportWorkflowError) as e:
        click.echo(f"[{run_id}] FATAL: {e}", err=True)
        sys.exit(1)

    report_path = write_run_report(
        run_id, started_at, dry_run,
        {
            "csv_path": csv_path,
            "persons_path": persons_path,
            "reservations_path": reservations_path,
            "decisions_path": decisions_path,
            "profile_path": profile_path,
        },
        counters,
        report_dir=Path(report_dir),
        extra=outputs,
    )
    click.echo(f"[{run_id}] Run report: {report_path}")

    for warning in counters.warnings[:10]:
        click.echo(f"[{run_id}] WARNING: {warning}", err=True)


if __name__ == "__main__":
    main()
