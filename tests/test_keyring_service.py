"""
Unit tests for KeyringService and the config credential chain.

Tests credential storage using a mocked keyring backend.
"""

from unittest.mock import MagicMock, patch

import pytest
from keyring.errors import PasswordDeleteError

from core import config
from core.errors import ConfigurationError


class TestKeyringService:
    """Tests for KeyringService class."""

    @pytest.fixture
    def mock_keyring(self):
        """Mock keyring module with in-memory storage."""
        with patch("core.infrastructure.keyring_service.keyring") as keyring_mock:
            storage = {}

            def delete_password(service, name):
                if (service, name) not in storage:
                    raise PasswordDeleteError("Password not found")
                del storage[(service, name)]

            keyring_mock.get_password.side_effect = lambda s, n: storage.get((s, n))
            keyring_mock.set_password.side_effect = lambda s, n, v: storage.__setitem__((s, n), v)
            keyring_mock.delete_password.side_effect = delete_password
            keyring_mock.storage = storage
            yield keyring_mock

    @pytest.fixture
    def service(self, mock_keyring, monkeypatch):
        """Create a KeyringService with mocked backend."""
        from core.infrastructure.keyring_service import KeyringService

        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        svc = KeyringService()
        svc._available = True
        return svc

    def test_store_and_get_credential(self, service, mock_keyring):
        assert service.store_credential("anthropic", "sk-123")
        assert service.get_credential("anthropic") == "sk-123"
        assert mock_keyring.storage == {("chatdesk", "anthropic_api_key"): "sk-123"}

    def test_get_credential_not_found(self, service):
        assert service.get_credential("anthropic") is None

    def test_delete_credential(self, service):
        service.store_credential("anthropic", "sk")
        assert service.delete_credential("anthropic") is True
        assert service.has_credential("anthropic") is False
        assert service.delete_credential("anthropic") is False

    def test_env_fallback(self, service, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
        assert service.get_credential("anthropic") == "from-env"

    def test_unavailable_backend_cannot_store(self, service):
        service._available = False
        assert service.store_credential("anthropic", "sk") is False
        assert service.delete_credential("anthropic") is False

    def test_fail_backend_marks_unavailable(self, mock_keyring):
        from keyring.backends.fail import Keyring as FailKeyring

        from core.infrastructure.keyring_service import KeyringService

        mock_keyring.get_keyring.return_value = FailKeyring()
        assert KeyringService().is_available is False


class TestConfig:
    """Tests for the API key lookup chain."""

    @pytest.fixture(autouse=True)
    def fake_keyring(self, monkeypatch):
        service = MagicMock()
        service.get_credential.return_value = None
        monkeypatch.setattr(config, "_keyring_service", service)
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        yield service
        config.reset_keyring_cache()

    def test_missing_key_raises_configuration_error(self):
        with pytest.raises(ConfigurationError):
            config.get_anthropic_api_key()

    def test_keyring_value_wins(self, fake_keyring, monkeypatch):
        fake_keyring.get_credential.return_value = "from-keyring"
        monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
        assert config.get_anthropic_api_key() == "from-keyring"

    def test_env_value_used(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "from-env")
        assert config.get_api_key() == "from-env"

    def test_store_api_key(self, fake_keyring):
        fake_keyring.store_credential.return_value = True
        assert config.store_api_key("sk") is True
        fake_keyring.store_credential.assert_called_once_with("anthropic", "sk")

    def test_data_dir_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CHATDESK_HOME", str(tmp_path))
        assert config.get_data_dir() == tmp_path
