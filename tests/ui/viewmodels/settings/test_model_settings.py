"""Tests for ModelSettings persistence and bounds."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.constants import DEFAULT_MAX_TOKENS, DEFAULT_MODEL
from core.persistence import Database, SettingsRepository
from ui.viewmodels.settings import ModelSettings


@pytest.fixture
def db(tmp_path: Path):
    return Database(tmp_path / "settings.db")


@pytest.fixture
def keyring_service():
    service = MagicMock()
    service.is_available = True
    service.get_credential.return_value = None
    return service


def test_defaults(db, keyring_service):
    settings = ModelSettings(database=db, keyring_service=keyring_service)
    settings.load()

    assert settings.model == DEFAULT_MODEL
    assert settings.max_tokens == DEFAULT_MAX_TOKENS
    assert settings.has_api_key is False


def test_values_survive_reload(db, keyring_service):
    first = ModelSettings(database=db, keyring_service=keyring_service)
    first.model = "claude-3-5-haiku-20241022"
    first.max_tokens = 2048
    first.temperature = 0.3
    first.top_p = 0.9
    first.api_key = "  sk-secret  "
    first.save()

    keyring_service.store_credential.assert_called_once_with("anthropic", "sk-secret")
    keyring_service.get_credential.return_value = "sk-secret"

    second = ModelSettings(database=db, keyring_service=keyring_service)
    second.load()
    assert second.model == "claude-3-5-haiku-20241022"
    assert second.max_tokens == 2048
    assert second.temperature == pytest.approx(0.3)
    assert second.top_p == pytest.approx(0.9)
    assert second.api_key == "sk-secret"


def test_bounds_are_clamped(db, keyring_service):
    settings = ModelSettings(database=db, keyring_service=keyring_service)

    settings.max_tokens = 0
    settings.temperature = 3
    settings.top_p = -1

    assert settings.max_tokens == 1
    assert settings.temperature == 1.0
    assert settings.top_p == 0.0
    params = settings.generation_params()
    assert params.max_tokens == 1
    assert params.temperature == 1.0


def test_change_signal(db, keyring_service):
    settings = ModelSettings(database=db, keyring_service=keyring_service)
    calls = []
    settings.settings_changed.connect(lambda: calls.append(True))

    settings.temperature = 0.5
    settings.temperature = 0.5

    assert len(calls) == 1


def test_api_key_falls_back_to_database(db, keyring_service):
    keyring_service.is_available = False

    settings = ModelSettings(database=db, keyring_service=keyring_service)
    settings.api_key = "sk-plain"
    settings.save()

    keyring_service.store_credential.assert_not_called()
    assert SettingsRepository(db).get_value(ModelSettings.KEY_API_KEY) == "sk-plain"

    reloaded = ModelSettings(database=db, keyring_service=keyring_service)
    reloaded.load()
    assert reloaded.api_key == "sk-plain"
