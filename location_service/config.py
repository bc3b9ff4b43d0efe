"""Application configuration."""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment driven configuration for the location API."""

    api_host: str = Field("0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(8000, validation_alias="API_PORT")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    firestore_project_id: str | None = Field(None, validation_alias="FIRESTORE_PROJECT_ID")
    firestore_collection: str = Field("locations", validation_alias="FIRESTORE_COLLECTION")
    key_vault_url: str | None = Field(None, validation_alias="KEY_VAULT_URL")
    firebase_credentials_secret: str = Field("googlellave39", validation_alias="FIREBASE_CREDENTIALS_SECRET")
    google_credentials_content: str | None = Field(None, validation_alias="GOOGLE_APPLICATION_CREDENTIALS_CONTENT")

    sql_connection_string: str | None = Field(None, validation_alias="SQL_CONNECTION_STRING")
    sql_location_procedure: str = Field("InsertarUbicacion", validation_alias="SQL_LOCATION_PROCEDURE")

    enable_health_check: bool = Field(False, validation_alias="ENABLE_HEALTH_CHECK")
    secondary_queue_size: int = Field(1000, validation_alias="SECONDARY_QUEUE_SIZE")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def relational_configured(self) -> bool:
        return bool(self.sql_connection_string and self.sql_connection_string.strip())


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
