from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

Clock = Callable[[], date]


def system_clock() -> date:
    return date.today()


@dataclass(frozen=True)
class Settings:
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "sales_dashboard"
    default_year: Optional[int] = None
    table_limit: int = 50
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    log_level: str = "INFO"


def _as_int(value: Optional[str], default: Optional[int]) -> Optional[int]:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer setting value %r", value)
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from ``env`` (defaults to ``os.environ`` after loading ``.env``)."""
    if env is None:
        load_dotenv()
        env = os.environ
    defaults = Settings()
    origins = env.get("SALESBOARD_CORS_ORIGINS")
    return Settings(
        mongodb_uri=env.get("MONGODB_URI") or defaults.mongodb_uri,
        mongodb_db_name=env.get("MONGODB_DB_NAME") or defaults.mongodb_db_name,
        default_year=_as_int(env.get("SALESBOARD_DEFAULT_YEAR"), None),
        table_limit=max(1, _as_int(env.get("SALESBOARD_TABLE_LIMIT"), defaults.table_limit) or 0),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] if origins else list(defaults.cors_origins),
        log_level=(env.get("LOG_LEVEL") or defaults.log_level).upper(),
    )
