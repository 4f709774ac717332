from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration for the collector."""

    # Storage
    database_url: str
    db_pool_size: int = 5

    # OpenAI
    openai_api_key: str
    openai_api_base: Optional[str] = None
    openai_chat_model: str = "gpt-4o-mini"
    openai_embedding_model: str = "text-embedding-3-small"
    rewrite_temperature: float = 0.7
    rewrite_max_tokens: int = 2000

    # Deduplication
    similarity_threshold: float = 0.75
    recent_titles_hours: float = 24.0

    # Scheduling
    poll_interval_seconds: float = 300.0

    # Image reconciliation; disabled when the URL is empty
    image_api_url: Optional[str] = None
    image_api_token: Optional[str] = None
    image_api_timeout_seconds: float = 60.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # text/json

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
