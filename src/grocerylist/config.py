"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Text interpretation / classification service (OpenAI-compatible)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_timeout: float = 30.0  # request timeout in seconds
    llm_temperature: float = 0.1

    # Token budgets for the batched calls
    interpretation_tokens_per_line: int = 100
    classification_tokens_per_name: int = 50
    classification_min_tokens: int = 500

    # Set to false to run the deterministic pipeline only
    use_ai: bool = True

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.openai_api_key.strip())

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
