"""Application configuration using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.constants import DEFAULT_TARGET_SCORE, MIN_PLAYERS, ROOM_CODE_LENGTH


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")
    environment: str = Field(default="development", description="Environment")
    frontend_url: str = Field(default="http://localhost:5173", description="Frontend URL")
    log_level: str = Field(default="INFO", description="Root log level for the app loggers")

    # Game Configuration
    default_target_score: int = Field(
        default=DEFAULT_TARGET_SCORE, ge=1, description="Score that ends a game"
    )
    room_code_length: int = Field(
        default=ROOM_CODE_LENGTH, ge=4, le=12, description="Characters in a room code"
    )
    min_players: int = Field(default=MIN_PLAYERS, ge=2, description="Players needed to start")

    @property
    def cors_origins(self) -> list[str]:
        """Origins allowed to open sockets and call the API."""
        if self.environment == "development":
            return [self.frontend_url, "http://localhost:5173", "http://localhost:3000"]
        return [self.frontend_url]


# Global settings instance
settings = Settings()
