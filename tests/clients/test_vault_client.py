"""Tests for VaultClient - hvac is mocked, environment is patched."""

from unittest.mock import MagicMock, patch

import pytest
from hvac.exceptions import Forbidden, InvalidPath

import clients.vault_client as vault_module
from clients.vault_client import (
    VaultClient,
    get_email_config,
    get_recaptcha_secret,
    get_webhook_url,
)


@pytest.fixture
def vault_env(monkeypatch):
    monkeypatch.setenv("VAULT_ADDR", "https://vault.example.com")
    monkeypatch.setenv("VAULT_ROLE_ID", "role")
    monkeypatch.setenv("VAULT_SECRET_ID", "secret")
    monkeypatch.delenv("VAULT_NAMESPACE", raising=False)


@pytest.fixture
def hvac_client():
    client = MagicMock()
    client.auth.approle.login.return_value = {"auth": {"client_token": "s.token"}}
    client.is_authenticated.return_value = True
    return client


@pytest.fixture
def vault(vault_env, hvac_client):
    with patch("clients.vault_client.hvac.Client", return_value=hvac_client):
        return VaultClient()


@pytest.fixture
def fresh_cache(monkeypatch):
    monkeypatch.setattr(vault_module, "_secret_cache", {})
    monkeypatch.setattr(vault_module, "_vault_client_instance", None)


def kv(data):
    return {"data": {"data": data}}


class TestVaultClientInit:
    """Initialization and authentication."""

    def test_missing_vault_addr_raises(self, vault_env, monkeypatch):
        monkeypatch.delenv("VAULT_ADDR")
        with pytest.raises(ValueError, match="VAULT_ADDR"):
            VaultClient()

    def test_missing_approle_credentials_raises(self, vault_env, monkeypatch):
        monkeypatch.delenv("VAULT_SECRET_ID")
        with pytest.raises(ValueError, match="VAULT_ROLE_ID"):
            VaultClient()

    def test_login_failure_raises_permission_error(self, vault_env, hvac_client):
        hvac_client.auth.approle.login.side_effect = Exception("invalid role id")
        with patch("clients.vault_client.hvac.Client", return_value=hvac_client):
            with pytest.raises(PermissionError, match="AppRole authentication failed"):
                VaultClient()

    def test_token_set_after_login(self, vault, hvac_client):
        assert hvac_client.token == "s.token"


class TestGetSecret:
    """Secret retrieval - paths automatically scoped to sweethome/."""

    def test_returns_field_value(self, vault, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = kv({"url": "postgres://x"})

        assert vault.get_secret("database", "url") == "postgres://x"
        kwargs = hvac_client.secrets.kv.v2.read_secret_version.call_args.kwargs
        assert kwargs["path"] == "sweethome/database"

    def test_missing_field_raises_key_error(self, vault, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.return_value = kv({"url": "x"})
        with pytest.raises(KeyError, match="password"):
            vault.get_secret("database", "password")

    def test_missing_path_raises_permission_error(self, vault, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.side_effect = InvalidPath()
        with pytest.raises(PermissionError, match="not found"):
            vault.get_secret("nope", "x")

    def test_forbidden_raises_permission_error(self, vault, hvac_client):
        hvac_client.secrets.kv.v2.read_secret_version.side_effect = Forbidden()
        with pytest.raises(PermissionError, match="Access denied"):
            vault.get_secret("database", "url")


class TestConvenienceFunctions:

    def test_email_config_fields(self, fresh_cache, monkeypatch):
        fake = MagicMock()
        fake.get_secret.side_effect = lambda path, field: f"{path}:{field}"
        monkeypatch.setattr(vault_module, "_vault_client_instance", fake)

        assert get_email_config() == {
            "gateway_url": "email:gateway_url",
            "api_key": "email:api_key",
            "hmac_secret": "email:hmac_secret",
        }

    def test_secrets_are_cached(self, fresh_cache, monkeypatch):
        fake = MagicMock()
        fake.get_secret.return_value = "https://hooks.example.com/1"
        monkeypatch.setattr(vault_module, "_vault_client_instance", fake)

        assert get_webhook_url() == "https://hooks.example.com/1"
        assert get_webhook_url() == "https://hooks.example.com/1"
        fake.get_secret.assert_called_once_with("automation", "webhook_url")

    def test_optional_secret_absent_is_none(self, fresh_cache, monkeypatch):
        fake = MagicMock()
        fake.get_secret.side_effect = PermissionError("not found")
        monkeypatch.setattr(vault_module, "_vault_client_instance", fake)

        assert get_recaptcha_secret() is None
