# backend/kitrent/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # project root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/kitrent.db"
    redis_url: str = "redis://localhost:6379/0"

    # Seconds a SQLite writer waits for the lock before giving up
    sqlite_busy_timeout: float = 5.0

    # Comma-separated client refs with admin rights
    admin_client_refs: str = ""

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite path -> absolute, anchored at the project root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def admin_refs(self) -> frozenset[str]:
        return frozenset(
            ref.strip() for ref in self.admin_client_refs.split(",") if ref.strip()
        )


settings = Settings()
