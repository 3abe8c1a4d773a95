"""resort_import.profile

YAML import profile for the Google Forms booking import.

Responsibilities:
  - Load and validate an import profile (config/import_profile.yml)
  - Provide DEFAULT_PROFILE, used when no file is given
  - Hash YAML content for traceability in run reports

Usage:
    from pathlib import Path
    from resort_import.profile import load_import_profile

    profile = load_import_profile(Path("config/import_profile.yml"))
    parse_form_export(text, persons, import_ids, profile=profile)
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from resort_import.form_schema import MAX_TRAVELER_SLOTS

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

REQUIRED_YAML_KEYS = frozenset({
    "version",
    "max_travelers",
    "affirmative_tokens",
})

DEFAULT_AFFIRMATIVE_TOKENS = ("oui", "yes", "besoin", "need")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ImportProfileValidationError(ValueError):
    """Raised when a YAML import profile fails schema validation."""


# ---------------------------------------------------------------------------
# ImportProfile dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImportProfile:
    """Tunable heuristics of the import, validated at load time."""

    version: str = "builtin"
    max_travelers: int = MAX_TRAVELER_SLOTS
    affirmative_tokens: tuple[str, ...] = DEFAULT_AFFIRMATIVE_TOKENS
    reservation_status: str = "confirmed"
    yaml_hash: str | None = None
    raw_yaml: str = field(repr=False, default="")


DEFAULT_PROFILE = ImportProfile()


# ---------------------------------------------------------------------------
# Loader + validator
# ---------------------------------------------------------------------------

def load_import_profile(yaml_path: Path) -> ImportProfile:
    """Load, validate, and return an ImportProfile from a YAML file.

    Raises:
        ImportProfileValidationError: If any required field is missing or invalid.
        FileNotFoundError: If the YAML file does not exist.
    """
    raw = yaml_path.read_text(encoding="utf-8")
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ImportProfileValidationError(f"Invalid YAML in {yaml_path}: {exc}") from exc
    validate_import_profile(data)
    return ImportProfile(
        version=str(data["version"]),
        max_travelers=int(data["max_travelers"]),
        affirmative_tokens=tuple(str(t).lower() for t in data["affirmative_tokens"]),
        reservation_status=str(data.get("reservation_status") or "confirmed"),
        yaml_hash=hashlib.sha256(raw.encode("utf-8")).hexdigest(),
        raw_yaml=raw,
    )


def validate_import_profile(data: Any) -> None:
    """Raise ImportProfileValidationError if data does not match the schema.

    Validates:
      - Required top-level keys present
      - max_travelers is an int in [1, MAX_TRAVELER_SLOTS]
      - affirmative_tokens is a non-empty list of non-blank strings
      - reservation_status, when given, is a non-blank string
    """
    if not isinstance(data, dict):
        raise ImportProfileValidationError("YAML root must be a mapping.")

    missing_keys = REQUIRED_YAML_KEYS - set(data.keys())
    if missing_keys:
        raise ImportProfileValidationError(f"Missing required YAML keys: {sorted(missing_keys)}")

    max_travelers = data.get("max_travelers")
    if isinstance(max_travelers, bool) or not isinstance(max_travelers, int):
        raise ImportProfileValidationError(
            f"'max_travelers' value '{max_travelers}' is not an integer."
        )
    if not (1 <= max_travelers <= MAX_TRAVELER_SLOTS):
        raise ImportProfileValidationError(
            f"'max_travelers' value {max_travelers} must be in [1, {MAX_TRAVELER_SLOTS}]."
        )

    tokens = data.get("affirmative_tokens")
    if not isinstance(tokens, list) or not tokens:
        raise ImportProfileValidationError("'affirmative_tokens' must be a non-empty list.")
    for token in tokens:
        if isinstance(token, bool):
            raise ImportProfileValidationError(
                f"affirmative token {token} was read as a YAML boolean; "
                "quote tokens such as \"yes\", \"no\", \"on\"."
            )
        if not isinstance(token, str) or not token.strip():
            raise ImportProfileValidationError(
                f"affirmative token '{token}' must be a non-blank string."
            )

    status = data.get("reservation_status")
    if status is not None and (not isinstance(status, str) or not status.strip()):
        raise ImportProfileValidationError("'reservation_status' must be a non-blank string.")
