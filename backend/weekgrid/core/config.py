from functools import lru_cache
import json
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

OverflowPolicy = Literal["reject", "partial"]


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="WEEKGRID_",
        extra="ignore",
    )

    project_name: str = "WeekGrid API"
    api_prefix: str = "/api"

    database_url: str = "sqlite:///./weekgrid.db"

    theory_repetitions: int = Field(default=2, ge=1, le=6)
    max_theory_courses: int = Field(default=5, ge=1, le=50)
    max_lab_courses: int = Field(default=5, ge=1, le=50)
    max_faculty: int = Field(default=25, ge=1, le=500)
    max_venues: int = Field(default=20, ge=1, le=500)
    synthetic_batch_count: int = Field(default=4, ge=1, le=12)
    default_branch: str = "CSE"

    random_seed: int | None = None
    deterministic: bool = False
    overflow_policy: OverflowPolicy = "reject"

    external_generation_enabled: bool = False

    max_request_size_bytes: int = 10 * 1024 * 1024
    security_enable_hsts: bool = False
    security_hsts_max_age_seconds: int = 31536000

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:3001",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:4200",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
