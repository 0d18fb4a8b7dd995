"""Application settings loaded from environment variables and an optional .env file."""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Searches the current dir and its parents for a .env file
load_dotenv()

DEFAULT_MAX_BODY_SIZE = 1 * 1024 * 1024  # 1MB limit


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the expenses API."""
    api_prefix: str = "/api"
    log_level: str = "INFO"
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    rate_limit: Optional[str] = None  # slowapi limit string, e.g. "15/minute"
    seed_example_expenses: bool = True
    host: str = "0.0.0.0"
    port: int = 8000

    def __post_init__(self):
        if self.max_body_size <= 0:
            raise ValueError("max_body_size must be > 0")
        if self.api_prefix and not self.api_prefix.startswith("/"):
            raise ValueError("api_prefix must start with '/'")


def get_settings() -> Settings:
    """Builds Settings from the current environment."""
    return Settings(
        api_prefix=os.getenv("API_PREFIX", "/api").rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        max_body_size=_env_int("MAX_BODY_SIZE", DEFAULT_MAX_BODY_SIZE),
        rate_limit=os.getenv("RATE_LIMIT") or None,
        seed_example_expenses=_env_bool("SEED_EXAMPLE_EXPENSES", True),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_env_int("PORT", 8000),
    )
