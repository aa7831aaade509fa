"""Application configuration pulled from environment variables via pydantic."""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

DEFAULT_API_BASE_URL = "https://www.api-couleur-tempo.fr/api"
_ROOT_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Environment-driven configuration for the Tempo tray application."""
    model_config = SettingsConfigDict(env_prefix="TEMPO_", extra="ignore")

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = 10.0
    cache_ttl_seconds: float = 30 * 60
    timezone: str | None = None  # None: local time of the machine
    assets_dir: Path = _ROOT_DIR / "assets"
    log_file: Path | None = _ROOT_DIR / "tempo_tray.log"
    log_level: str = "INFO"
    refresh_workers: int = 3
    app_name: str = "Tempo EDF"
    autostart_value_name: str = "TempoEDF"

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("request_timeout_seconds", "cache_ttl_seconds", mode="after")
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        """Reject zero or negative durations."""
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("refresh_workers", mode="after")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        """A refresh needs at least one worker thread."""
        if v < 1:
            raise ValueError("must be >= 1")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
