"""
core/config.py
Settings for the prompt hub backend.
Reads the database URL, vendor API keys and dispatch limits from the
environment (or a .env file in the working directory).
"""
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    app_name: str = "Prompt Hub Backend"

    # Database
    database_url: str = Field("sqlite:///./prompthub.db", description="SQLAlchemy database URL")
    database_echo: bool = False
    seed_default_providers: bool = Field(True, description="Insert the built-in providers on startup")

    # HTTP
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    log_level: str = "INFO"
    configure_logging: bool = True

    # Vendor credentials
    groq_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("groq_api_key", "PROMPT_GROQ_KEY", "GROQ_API_KEY")
    )
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = Field(
        None, validation_alias=AliasChoices("huggingface_api_key", "HUGGINGFACE_API_KEY", "HF_TOKEN")
    )

    # Dispatch / versioning
    provider_timeout_seconds: float = Field(60.0, gt=0, description="Deadline for a single vendor call")
    dispatch_max_workers: int = Field(4, ge=1, description="Thread pool size for provider fan-out")
    version_allocation_retries: int = Field(3, ge=1, description="Attempts when a version number is taken")
