from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SAMPLE_LOG = Path(__file__).resolve().parent.parent / "data" / "sample.log"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # CORS
    cors_origins: str = "http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    # Uploads
    max_upload_bytes: int = 10 * 1024 * 1024
    sample_log_path: str = str(DEFAULT_SAMPLE_LOG)

    # Hotspot analysis
    gap_threshold_seconds: float = 5.0
    min_gap_threshold_seconds: float = 0.1
    max_gap_threshold_seconds: float = 3600.0
    hotspot_limit: int = 5

    # Query console
    query_row_limit: int = 1000

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    def clamp_gap_threshold(self, seconds: float) -> float:
        """Keep a requested gap threshold inside the configured bounds."""
        return min(self.max_gap_threshold_seconds, max(self.min_gap_threshold_seconds, seconds))


settings = Settings()
