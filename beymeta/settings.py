from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env() -> None:
    env_path = PROJECT_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_key: str
    db_path: str
    log_level: str
    http_timeout_seconds: int
    web_host: str
    web_port: int

    @property
    def use_hosted_store(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def log_level_value(self) -> int:
        level = getattr(logging, self.log_level, None)
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            supabase_url=os.getenv("SUPABASE_URL", "").strip().rstrip("/"),
            supabase_key=os.getenv("SUPABASE_KEY", "").strip(),
            db_path=os.getenv("BEYMETA_DB_PATH", "data/beymeta.db"),
            log_level=os.getenv("BEYMETA_LOG_LEVEL", "INFO").strip().upper(),
            http_timeout_seconds=_int_env("BEYMETA_HTTP_TIMEOUT", 20),
            web_host=os.getenv("BEYMETA_WEB_HOST", "127.0.0.1"),
            web_port=_int_env("BEYMETA_WEB_PORT", 5000),
        )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
