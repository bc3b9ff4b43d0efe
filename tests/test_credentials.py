from __future__ import annotations

import pytest

from conftest import make_settings
from location_service import credentials as credentials_module
from location_service.credentials import get_firebase_credentials_json, load_firestore_credentials
from location_service.exceptions import ConfigurationError


def test_key_vault_secret_is_preferred(monkeypatch) -> None:
    calls = []

    def fake_fetch(vault_url, secret_name):
        calls.append((vault_url, secret_name))
        return '{"from": "vault"}'

    monkeypatch.setattr(credentials_module, "fetch_key_vault_secret", fake_fetch)
    settings = make_settings(
        KEY_VAULT_URL="https://vault.example",
        GOOGLE_APPLICATION_CREDENTIALS_CONTENT='{"from": "env"}',
    )

    assert get_firebase_credentials_json(settings) == '{"from": "vault"}'
    assert calls == [("https://vault.example", "googlellave39")]


def test_key_vault_failure_falls_back_to_environment(monkeypatch, caplog) -> None:
    def failing_fetch(vault_url, secret_name):
        raise RuntimeError("forbidden")

    monkeypatch.setattr(credentials_module, "fetch_key_vault_secret", failing_fetch)
    settings = make_settings(
        KEY_VAULT_URL="https://vault.example",
        GOOGLE_APPLICATION_CREDENTIALS_CONTENT='{"from": "env"}',
    )

    assert get_firebase_credentials_json(settings) == '{"from": "env"}'
    assert "forbidden" in caplog.text


def test_without_vault_the_environment_is_used() -> None:
    settings = make_settings(GOOGLE_APPLICATION_CREDENTIALS_CONTENT='{"from": "env"}')

    assert get_firebase_credentials_json(settings) == '{"from": "env"}'


def test_missing_credentials_fail_startup() -> None:
    with pytest.raises(ConfigurationError):
        load_firestore_credentials(make_settings())


def test_malformed_credentials_fail_startup() -> None:
    with pytest.raises(ConfigurationError):
        load_firestore_credentials(make_settings(GOOGLE_APPLICATION_CREDENTIALS_CONTENT="not json"))
