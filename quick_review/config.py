"""Configuration for the quick-review agent."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # LLM - OpenRouter (multi-provider gateway)
    openrouter_api_key: Optional[str] = Field(default=None)
    review_model: str = Field(default="claude-sonnet-4")
    review_temperature: float = Field(default=0.0)

    # GitHub - personal token, or App installation credentials
    github_token: Optional[str] = Field(default=None)
    github_app_id: Optional[str] = Field(default=None)
    github_private_key: Optional[str] = Field(default=None)
    github_installation_id: Optional[str] = Field(default=None)
    github_base_url: str = Field(default="https://api.github.com")

    # GitLab
    gitlab_token: Optional[str] = Field(default=None)
    gitlab_url: str = Field(default="https://gitlab.com")

    # Review loop
    max_review_rounds: int = Field(default=25, ge=1)
    max_file_chars: int = Field(default=50000, ge=1)


settings = Settings()
