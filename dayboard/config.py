"""
Dayboard Configuration

Loads settings from environment variables. The database URL is required:
the service refuses to start without one.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


DEFAULT_DEV_USER_ID = "29a03cc5-4c65-4ef8-a48b-f5cfe83a4c79"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database (no default, startup fails when missing)
    database_url: str = Field(..., alias="DATABASE_URL")
    store_timeout_seconds: float = Field(default=10.0, alias="STORE_TIMEOUT_SECONDS")

    # Identity
    user_id_header: str = Field(default="X-User-Id", alias="USER_ID_HEADER")
    dev_user_id: str = Field(default=DEFAULT_DEV_USER_ID, alias="DEV_USER_ID")
    allow_dev_identity: bool = Field(default=True, alias="ALLOW_DEV_IDENTITY")

    # LiteLLM / AI
    litellm_api_key: str = Field(default="", alias="LITELLM_API_KEY")
    litellm_model: str = Field(default="gpt-4o-mini", alias="LITELLM_MODEL")
    ai_timeout_seconds: float = Field(default=15.0, alias="AI_TIMEOUT_SECONDS")

    # Direct API keys (optional, LiteLLM can use these)
    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8080, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def get_ai_api_key(self) -> str:
        """Get the best available API key for LiteLLM."""
        if self.litellm_api_key:
            return self.litellm_api_key
        if self.anthropic_api_key:
            return self.anthropic_api_key
        if self.openai_api_key:
            return self.openai_api_key
        return ""


# Global settings instance
settings = Settings()
