"""Application configuration helpers."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """Centralized configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=str(BASE_DIR / ".env"), env_file_encoding="utf-8")

    app_name: str = "FreightDesk"
    environment: str = "dev"
    log_level: str = "INFO"

    # Database connection pieces (fallback to local sqlite for dev/testing)
    database_url: Optional[str] = None
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "freightdesk"
    db_user: str = "freightdesk"
    db_password: str = "secret"
    db_sslmode: str = "prefer"

    # Bearer tokens are issued elsewhere; we only verify them
    jwt_secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"

    # "log" writes pushes to the application log, "memory" keeps them for inspection
    notification_backend: str = "log"

    # Cost deltas at or below this are float noise, not a charge
    shipping_cost_epsilon: Decimal = Decimal("0.01")

    # API behavior
    allow_origins: List[str] = ["http://localhost:5173", "http://localhost:3000", "*"]

    def get_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}?sslmode={self.db_sslmode}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
