from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Any
from pathlib import Path
import os

from ..utils.server_timing import PrefixMode


def _default_env_file() -> str:
    return os.getenv("ENV_FILE", str(Path(__file__).resolve().parents[3] / ".env"))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=True,
    )

    # Emit the Server-Timing header at all. Useful to switch off in
    # production when internal latency breakdowns should stay private.
    SERVER_TIMING_ENABLED: bool = True

    # Ordering prefix: "none", "index" (00_name) or "description" ("1: desc")
    SERVER_TIMING_PREFIX: PrefixMode = PrefixMode.NONE

    # Whole-request metric recorded by the middleware; empty disables it
    SERVER_TIMING_TOTAL_METRIC: str = "total"
    SERVER_TIMING_TOTAL_DESC: str = ""

    LOG_LEVEL: str = "INFO"

    @field_validator("SERVER_TIMING_PREFIX", mode="before")
    def normalize_prefix(cls, v: Any) -> Any:
        """Accept any casing/whitespace; unknown values fail validation."""
        if isinstance(v, str):
            return v.strip().lower() or PrefixMode.NONE.value
        return v

    @field_validator(
        "SERVER_TIMING_TOTAL_METRIC",
        "SERVER_TIMING_TOTAL_DESC",
        "LOG_LEVEL",
        mode="before",
    )
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


def load_settings() -> "Settings":
    return Settings(_env_file=_default_env_file())


settings = load_settings()
