"""Tests for the remembered form values store."""

from __future__ import annotations

from pathlib import Path

import pytest

from expert_system.clients import PreferencesStore
from expert_system.schemas import UserPreferences


def test_empty_store_loads_blank_preferences(tmp_path: Path) -> None:
    store = PreferencesStore(str(tmp_path / "nested" / "preferences.db"))

    assert store.load() == UserPreferences()


def test_update_persists_across_instances(tmp_path: Path) -> None:
    db_path = str(tmp_path / "preferences.db")
    PreferencesStore(db_path).update(
        client_name="Acme Corp",
        consultant_name="Lucas Dias",
        transcription_api_key="key-1",
    )

    loaded = PreferencesStore(db_path).load()

    assert loaded.client_name == "Acme Corp"
    assert loaded.consultant_name == "Lucas Dias"
    assert loaded.transcription_api_key == "key-1"


def test_update_skips_none_and_clears_empty_strings(tmp_path: Path) -> None:
    store = PreferencesStore(str(tmp_path / "preferences.db"))
    store.update(client_name="Acme Corp", transcription_api_key="key-1")

    result = store.update(client_name=None, transcription_api_key="")

    assert result.client_name == "Acme Corp"
    assert result.transcription_api_key is None


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    store = PreferencesStore(str(tmp_path / "preferences.db"))

    with pytest.raises(ValueError):
        store.set("favourite_colour", "blue")
    with pytest.raises(ValueError):
        store.update(favourite_colour="blue")


def test_clear_forgets_everything(tmp_path: Path) -> None:
    store = PreferencesStore(str(tmp_path / "preferences.db"))
    store.update(client_name="Acme Corp")

    store.clear()

    assert store.get("client_name") is None
    assert store.load() == UserPreferences()
