"""Application configuration settings."""

from datetime import timedelta, timezone
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "School Counseling Records"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"
    CORS_ORIGINS: list[str] = ["*"]

    # Local store (single counselor, single file)
    DATABASE_URL: str = "sqlite:///./counseling.db"

    # Upload Settings
    MAX_UPLOAD_SIZE_MB: int = 10
    ALLOWED_EXTENSIONS: list[str] = [".xlsx"]

    # Reports
    INSTITUTION_LOGO_URL: str | None = None
    HONOR_BOARD_SIZE: int = 10

    # School clock (fixed offset, Algeria has no DST)
    SCHOOL_UTC_OFFSET_MINUTES: int = 60

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured store is a SQLite file or memory database."""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def school_timezone(self) -> timezone:
        """Fixed-offset timezone that log timestamps and period days are read in."""
        return timezone(timedelta(minutes=self.SCHOOL_UTC_OFFSET_MINUTES))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
