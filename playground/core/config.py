"""Configuration management for the Kit Playground backend."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Serverless runtimes may not ship a readable .env
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Checked per request so a missing value is reported to the caller
    # instead of preventing the app from booting.
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    KB_URL: str | None = Field(default=None, description="URL of the knowledge base JSON document")

    # Comma-separated list of allowed origin prefixes (empty = allow any origin)
    ALLOWED_ORIGIN: str = Field(default="", description="Allowed CORS origin prefixes")

    # Environment
    PLAYGROUND_ENV: str = Field(default="dev", description="Environment: dev, preview, prod")

    # Chat generation
    CHAT_MODEL: str = Field(default="gpt-4o-mini", description="Model for chat replies")
    CHAT_TEMPERATURE: float = Field(default=0.4, description="Sampling temperature for chat replies")
    CHAT_MAX_TOKENS: int = Field(default=700, description="Max tokens per chat reply")
    MAX_HISTORY_TURNS: int = Field(
        default=8, description="Most recent history turns forwarded to the model"
    )

    # Image generation
    IMAGE_MODEL: str = Field(default="gpt-image-1", description="Model for image generation")
    IMAGE_SIZE: str = Field(default="1024x1024", description="Generated image size")

    # Knowledge base fetch (None = wait indefinitely)
    KB_FETCH_TIMEOUT: float | None = Field(
        default=None, description="Timeout in seconds for the knowledge base fetch"
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parsed, non-empty origin prefixes."""
        return [o.strip() for o in self.ALLOWED_ORIGIN.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()
