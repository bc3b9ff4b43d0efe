"""Resolution of the Firestore service-account credentials."""
from __future__ import annotations

import json
import logging
from typing import Any

from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient
from google.oauth2 import service_account

from location_service.config import Settings
from location_service.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def fetch_key_vault_secret(vault_url: str, secret_name: str) -> str | None:
    client = SecretClient(vault_url=vault_url, credential=DefaultAzureCredential())
    secret = client.get_secret(secret_name)
    return secret.value


def get_firebase_credentials_json(settings: Settings) -> str | None:
    """Return the service-account JSON, preferring Key Vault.

    A Key Vault failure is logged and the environment fallback (meant for
    local development) is used instead.
    """

    if settings.key_vault_url:
        try:
            value = fetch_key_vault_secret(settings.key_vault_url, settings.firebase_credentials_secret)
            if value:
                return value
            logger.warning("Key Vault secret '%s' is empty", settings.firebase_credentials_secret)
        except Exception as exc:
            logger.error("Failed to read credentials from Key Vault: %s", exc)

    return settings.google_credentials_content


def load_firestore_credentials(settings: Settings) -> service_account.Credentials:
    raw = get_firebase_credentials_json(settings)
    if not raw:
        raise ConfigurationError("Firestore credentials could not be resolved")

    try:
        info: dict[str, Any] = json.loads(raw)
    except ValueError as exc:
        raise ConfigurationError("Firestore credentials are not valid JSON") from exc

    return service_account.Credentials.from_service_account_info(info)
