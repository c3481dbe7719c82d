"""Configuration settings for the EDV server."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from edv.models.enums import DatabaseType


class Settings(BaseSettings):
    """Application settings loaded from EDV_* environment variables."""

    # API Configuration
    app_name: str = "EDV"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "info"

    # Storage backend
    database_type: DatabaseType = DatabaseType.MEM
    database_url: Optional[str] = None  # CouchDB base URL, e.g. http://admin:pw@localhost:5984
    database_prefix: str = ""
    database_timeout: float = 30.0
    data_dir: str = "data"  # Root directory for the filedb backend

    # Batch processing limits
    max_batch_size: int = 500  # Max documents per batch upsert request

    model_config = SettingsConfigDict(
        env_prefix="EDV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )


settings = Settings()
