"""Application settings, read from the environment and ``.env``."""
from __future__ import annotations
from pathlib import Path
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    DATABASE_URL: str = "sqlite:///data/tippool.db"
    LOG_LEVEL: str = "INFO"

    # Payout provider
    STRIPE_SECRET_KEY: SecretStr | None = None
    CURRENCY: str = "usd"

    # Cut lifecycle
    ROSTER_DELIMITER: str = ","
    SETTLEMENT_MAX_WORKERS: int = 1

    # Published CSV of the cuts sheet, used by `tippool import-cuts`
    CUTS_CSV_URL: str | None = None

    @property
    def data_dir(self) -> Path:
        """Directory holding the SQLite file (``data/`` for the default URL)."""
        prefix = "sqlite:///"
        if self.DATABASE_URL.startswith(prefix):
            return Path(self.DATABASE_URL[len(prefix):]).parent
        return Path("data")


settings = Settings()
