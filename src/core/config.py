"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Profile Service API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    # Credential store
    store_backend: str = Field(
        default="json",
        description="Credential store backend: 'json' (flat file) or 'sql'",
    )
    users_file: Path = Field(
        default=Path("users.json"),
        description="Path of the JSON user collection (json backend)",
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./users.db",
        description="SQLAlchemy async URL (sql backend)",
    )

    # Sessions
    session_backend: str = Field(
        default="file",
        description="Session store backend: 'file' or 'memory'",
    )
    sessions_dir: Path = Field(default=Path("sessions"))
    session_ttl_seconds: int = Field(default=86400)
    session_cookie_name: str = Field(default="sid")
    session_sweep_interval_seconds: int = Field(default=3600)

    # Avatars
    avatar_dir: Path = Field(default=Path("uploads"))
    avatar_url_prefix: str = Field(default="/uploads/")
    avatar_max_bytes: int = Field(default=2 * 1024 * 1024)
    avatar_allowed_types: str = Field(
        default="image/jpeg,image/png,image/webp",
        description="Comma-separated list of accepted avatar MIME types",
    )
    avatar_cleanup_max_attempts: int = Field(default=3)
    avatar_cleanup_retry_delay: float = Field(default=1.0)

    # CORS
    cors_origins: str = Field(
        default="http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def avatar_allowed_types_list(self) -> list[str]:
        """Parse accepted avatar MIME types into a list."""
        return [
            mime.strip().lower()
            for mime in self.avatar_allowed_types.split(",")
            if mime.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
