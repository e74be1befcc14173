"""Configuration management using pydantic-settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find the project root (where .env should be)
PROJECT_ROOT = Path(__file__).parent.parent.parent
ENV_FILE = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Slack Configuration
    slack_bot_token: str = Field(..., description="Bot user OAuth token (xoxb-)")
    slack_app_token: str = Field(..., description="App-level token for Socket Mode (xapp-)")
    slack_signing_secret: str | None = Field(default=None, description="Request signing secret")
    slack_command: str = Field(default="/leave-table", description="Slash command for queries")

    # LLM Configuration
    llm_provider: Literal["openai", "huggingface", "workflow"] = Field(default="openai")
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    llm_model: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    llm_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    llm_max_tokens: int = Field(default=1024, ge=1)
    huggingface_api_key: str | None = Field(default=None, description="Hugging Face API token")
    huggingface_model: str = Field(default="mistralai/Mistral-7B-Instruct-v0.2")

    # Workflow webhook Configuration
    workflow_url: str | None = Field(default=None, description="Default workflow webhook URL")
    workflow_classification_url: str | None = Field(default=None)
    workflow_details_url: str | None = Field(default=None)
    workflow_query_url: str | None = Field(default=None)
    workflow_timeout: float = Field(default=30.0, gt=0)

    # Database Configuration
    database_url: str = Field(..., description="SQLAlchemy async connection string")
    auto_create_tables: bool = Field(default=False, description="Create tables on start-up")

    # Redis Configuration
    cache_enabled: bool = Field(default=True)
    redis_host: str = Field(default="localhost")
    redis_port: int = Field(default=6379)
    redis_db: int = Field(default=0)
    redis_password: str | None = Field(default=None)
    redis_ttl: int = Field(default=3600, description="Default cache TTL in seconds")

    # Application Settings
    app_env: Literal["development", "staging", "production"] = Field(default="development")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_json: bool = Field(default=False)
    timezone: str = Field(default="Asia/Kolkata", description="IANA zone used for 'today'")
    ignore_unclassified: bool = Field(
        default=False, description="Skip storing messages that fit no attendance category"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
