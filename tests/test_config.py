"""Tests for configuration parsing."""

import pytest

from protein_ledger.config import Settings, parse_storage_backend


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, "file"), ("", "file"), ("  FILE ", "file"), ("Supabase", "supabase")],
)
def test_parse_storage_backend(raw: str | None, expected: str) -> None:
    assert parse_storage_backend(raw) == expected


def test_parse_storage_backend_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown storage backend"):
        parse_storage_backend("sqlite")


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("DEFAULT_TARGET_PROTEIN", "120")
    monkeypatch.setenv("STORAGE_KEY", "@custom")

    settings = Settings()

    assert settings.timezone == "Europe/Berlin"
    assert settings.default_target_protein == 120
    assert settings.storage_key == "@custom"
