from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # MongoDB (request log sink)
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "preview_edge"
    mongo_max_pool_size: int = 10

    # Outbound page fetch
    http_timeout: float = 5.0
    http_verify_ssl: bool = True
    fallback_user_agent: str = "facebookexternalhit/1.1"
    fallback_accept_language: str = "en"

    # Request log
    log_read_token: str = ""  # empty disables GET /_logs
    log_write_max_retries: int = 2

    # Logging
    log_level: str = "INFO"


settings = Settings()
