from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Paths ──────────────────────────────────────────────────
    output_dir: Path = Path("output")

    # ── API ────────────────────────────────────────────────────
    api_base_url: str = "http://localhost:3333/api/1.0.0/"
    request_timeout: float = 5.0  # seconds, same as httpx's default

    # ── Background publishing ──────────────────────────────────
    publish_interval_seconds: float = 60.0
    publish_max_interval_seconds: float = 900.0

    # ── App ────────────────────────────────────────────────────
    log_level: str = "INFO"

    @property
    def store_path(self) -> Path:
        """SQLite file shared by the foreground CLI and the background publisher."""
        return self.output_dir / "spacebook.db"


settings = Settings()
