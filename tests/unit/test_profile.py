"""Unit tests for resort_import.profile."""

from __future__ import annotations

import hashlib
import textwrap
from pathlib import Path

import pytest

from resort_import.profile import (
    DEFAULT_PROFILE,
    ImportProfileValidationError,
    load_import_profile,
    validate_import_profile,
)

PROFILE_YAML = textwrap.dedent("""\
    version: "v2"
    max_travelers: 3
    affirmative_tokens:
      - Oui
      - "yes"
      - sim
    reservation_status: pending
""")


def _valid() -> dict:
    return {"version": "v1", "max_travelers": 4, "affirmative_tokens": ["oui"]}


class TestDefaultProfile:
    def test_builtin_values(self):
        assert DEFAULT_PROFILE.max_travelers == 4
        assert DEFAULT_PROFILE.affirmative_tokens == ("oui", "yes", "besoin", "need")
        assert DEFAULT_PROFILE.reservation_status == "confirmed"
        assert DEFAULT_PROFILE.yaml_hash is None


class TestLoadImportProfile:
    def test_loads(self, tmp_path: Path):
        p = tmp_path / "profile.yml"
        p.write_text(PROFILE_YAML, encoding="utf-8")
        profile = load_import_profile(p)
        assert profile.version == "v2"
        assert profile.max_travelers == 3
        assert profile.affirmative_tokens == ("oui", "yes", "sim")
        assert profile.reservation_status == "pending"
        assert profile.yaml_hash == hashlib.sha256(PROFILE_YAML.encode("utf-8")).hexdigest()

    def test_repo_profile_loads(self):
        repo_profile = Path(__file__).parent.parent.parent / "config" / "import_profile.yml"
        profile = load_import_profile(repo_profile)
        assert profile.max_travelers == 4
        assert "besoin" in profile.affirmative_tokens

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_import_profile(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        p = tmp_path / "bad.yml"
        p.write_text("version: [unclosed\n", encoding="utf-8")
        with pytest.raises(ImportProfileValidationError):
            load_import_profile(p)


class TestValidateImportProfile:
    def test_valid(self):
        validate_import_profile(_valid())

    def test_root_not_mapping(self):
        with pytest.raises(ImportProfileValidationError, match="mapping"):
            validate_import_profile(["a"])

    def test_missing_keys(self):
        with pytest.raises(ImportProfileValidationError, match="affirmative_tokens"):
            validate_import_profile({"version": "v1", "max_travelers": 4})

    @pytest.mark.parametrize("value", [0, 5, "4", True, 2.5])
    def test_bad_max_travelers(self, value):
        data = _valid() | {"max_travelers": value}
        with pytest.raises(ImportProfileValidationError, match="max_travelers"):
            validate_import_profile(data)

    @pytest.mark.parametrize("value", [[], "oui", ["oui", ""], [3]])
    def test_bad_tokens(self, value):
        data = _valid() | {"affirmative_tokens": value}
        with pytest.raises(ImportProfileValidationError):
            validate_import_profile(data)

    def test_unquoted_yaml_boolean_token(self, tmp_path: Path):
        p = tmp_path / "profile.yml"
        p.write_text(textwrap.dedent("""\
            version: "v1"
            max_travelers: 4
            affirmative_tokens:
              - oui
              - yes
        """), encoding="utf-8")
        with pytest.raises(ImportProfileValidationError, match="quote"):
            load_import_profile(p)

    def test_blank_status(self):
        data = _valid() | {"reservation_status": "  "}
        with pytest.raises(ImportProfileValidationError, match="reservation_status"):
            validate_import_profile(data)

    def test_is_value_error(self):
        assert issubclass(ImportProfileValidationError, ValueError)
