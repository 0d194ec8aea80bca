"""
Tests for joinsound/repositories/settings.py - SettingsRepository.
"""

import sqlite3
from unittest.mock import patch

import pytest

from joinsound.models.settings import SettingsPatch


class TestSettingsRepository:
    """Tests for lazy creation and partial updates."""

    def test_get_or_create_defaults(self, settings_repository, identity, db_connection):
        settings = settings_repository.get_or_create(identity.id)

        assert settings.identity_id == identity.id
        assert settings.active_sound_id is None
        assert settings.mode == "single"

        count = db_connection.execute("SELECT COUNT(*) FROM settings").fetchone()[0]
        assert count == 1

    def test_get_or_create_is_idempotent(self, settings_repository, identity, db_connection):
        settings_repository.get_or_create(identity.id)
        settings_repository.update(identity.id, SettingsPatch(mode="random"))

        settings = settings_repository.get_or_create(identity.id)

        assert settings.mode == "random"
        count = db_connection.execute("SELECT COUNT(*) FROM settings").fetchone()[0]
        assert count == 1

    def test_get_by_id_does_not_create(self, settings_repository, identity):
        assert settings_repository.get_by_id(identity.id) is None

    def test_get_or_create_reloads_after_insert_race(self, settings_repository, identity):
        """A lost insert race returns the row the other request created."""
        settings_repository.get_or_create(identity.id)
        settings_repository.update(identity.id, SettingsPatch(mode="random"))

        original_get = settings_repository.get_by_id
        calls = []

        def miss_once(identity_id):
            calls.append(identity_id)
            if len(calls) == 1:
                return None
            return original_get(identity_id)

        with patch.object(settings_repository, "get_by_id", side_effect=miss_once):
            settings = settings_repository.get_or_create(identity.id)

        assert settings.mode == "random"

    def test_get_or_create_unknown_identity(self, settings_repository):
        with pytest.raises(sqlite3.IntegrityError):
            settings_repository.get_or_create("no-such-identity")

    def test_update_mode_only(self, settings_repository, identity, sample_sounds):
        settings_repository.update(identity.id, SettingsPatch(active_sound_id=sample_sounds[0].id))

        settings = settings_repository.update(identity.id, SettingsPatch(mode="random"))

        assert settings.mode == "random"
        assert settings.active_sound_id == sample_sounds[0].id
        assert settings_repository.get_by_id(identity.id) == settings

    def test_update_active_sound_only(self, settings_repository, identity, sample_sounds):
        settings_repository.update(identity.id, SettingsPatch(mode="random"))

        settings = settings_repository.update(identity.id, SettingsPatch(active_sound_id=sample_sounds[2].id, mode=""))

        assert settings.active_sound_id == sample_sounds[2].id
        assert settings.mode == "random"

    def test_get_by_active_sound(self, settings_repository, identity, sample_sounds):
        settings_repository.update(identity.id, SettingsPatch(active_sound_id=sample_sounds[1].id))

        assert settings_repository.get_by_active_sound(sample_sounds[1].id).identity_id == identity.id
        assert settings_repository.get_by_active_sound(sample_sounds[0].id) is None

    def test_mode_check_constraint(self, settings_repository, identity):
        """The storage layer refuses modes outside the enumerated set."""
        with pytest.raises(sqlite3.IntegrityError):
            settings_repository.update(identity.id, SettingsPatch(mode="shuffle"))

    def test_rejected_update_leaves_no_row(self, settings_repository, identity):
        """The lazy insert rolls back together with a failed update."""
        with pytest.raises(sqlite3.IntegrityError):
            settings_repository.update(identity.id, SettingsPatch(mode="shuffle"))

        assert settings_repository.get_by_id(identity.id) is None

    def test_update_creates_missing_row(self, settings_repository, identity, db_connection):
        settings = settings_repository.update(identity.id, SettingsPatch(mode="random"))

        assert settings.mode == "random"
        row = db_connection.execute("SELECT mode FROM settings WHERE identity_id = ?", (identity.id,)).fetchone()
        assert row["mode"] == "random"
