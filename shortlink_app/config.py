from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Short Link Service"
    app_version: str = "1.0.0"
    base_url: str = "http://127.0.0.1:8000"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Table store (the whole shortcode -> record mapping lives under one key)
    table_store_backend: str = "sql"  # Options: "sql", "redis", "memory"
    database_url: str = "sqlite:///./shortlink.db"
    redis_url: str = "redis://localhost:6379/0"
    table_storage_key: str = "urlMappings"
    store_lock_timeout: int = 10  # Seconds a redis lock may be held

    # Short code generation
    short_code_strategy: str = "random"  # Options: "random", "timestamp"
    short_code_length: int = 6
    short_code_max_attempts: int = 100
    custom_code_min_length: int = 4
    custom_code_max_length: int = 10

    # Link lifecycle
    default_validity_minutes: int = 30
    max_validity_minutes: int = 10080  # One week
    max_batch_size: int = 5
    redirect_delay_seconds: int = 2
    expiring_soon_minutes: int = 60
    recent_clicks_limit: int = 10

    # Remote log sink
    log_sink_backend: str = "http"  # Options: "http", "console", "null"
    log_api_url: str = "http://20.244.56.144/evaluation-service/logs"
    log_auth_token: Optional[str] = None
    log_dev_mode: bool = False
    log_timeout: float = 5.0

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
