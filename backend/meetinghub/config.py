from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings


def _default_home() -> Path:
    return Path.home() / ".meetinghub"


class Settings(BaseSettings):
    app_name: str = "MeetingHub"
    environment: Literal["development", "production"] = "development"

    data_dir: Path = Field(default_factory=lambda: _default_home() / "data")
    logs_dir: Path = Field(default_factory=lambda: _default_home() / "logs")

    # Empty -> SQLite file under data_dir
    database_url: str = ""
    storage_backend: Literal["sql", "memory"] = "sql"

    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    bot_service_url: str = "http://localhost:3000/api/v1"
    bot_service_timeout: float = 15.0

    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )
    recent_meetings_limit: int = 6

    class Config:
        env_prefix = "MH_"
        case_sensitive = False

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir / 'meetinghub.db'}"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def ensure_dirs(self) -> None:
        for d in [self.data_dir, self.logs_dir]:
            d.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    return Settings()
