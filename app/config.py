# app/config.py
# Role: Application settings loaded from environment variables (and .env).
#       One cached Settings object is shared by the routes, the Plaid client,
#       and the transaction table pipeline.

import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

from app.services.formatting import PENDING_THRESHOLD_DAYS
from app.services.pagination import PAGE_SIZE


_ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")
load_dotenv(dotenv_path=_ENV_PATH, override=False)

# Project root (one level above app/)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _get_env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _get_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _get_list(name: str, default: str) -> List[str]:
    raw = _get_env(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _default_database_url() -> str:
    db_dir = os.path.join(BASE_DIR, "database")
    os.makedirs(db_dir, exist_ok=True)
    return f"sqlite:///{os.path.join(db_dir, 'bank_dashboard.db')}"


class Settings(BaseModel):
    APP_ENV: str
    DATABASE_URL: str
    PLAID_CLIENT_ID: str
    PLAID_SECRET: str
    PLAID_ENV: str                 # sandbox | development | production
    PLAID_COUNTRY_CODES: List[str]
    PLAID_PRODUCTS: List[str]
    PLAID_TIMEOUT_SECONDS: int
    PAGE_SIZE: int
    PENDING_THRESHOLD_DAYS: int
    CURRENCY_CODE: str
    REFERENCE_TIMEZONE: str
    SESSION_COOKIE_NAME: str
    LOG_LEVEL: str

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL") or _default_database_url()
    return Settings(
        APP_ENV=_get_env("APP_ENV", "development"),
        DATABASE_URL=database_url,
        PLAID_CLIENT_ID=_get_env("PLAID_CLIENT_ID", ""),
        PLAID_SECRET=_get_env("PLAID_SECRET", ""),
        PLAID_ENV=_get_env("PLAID_ENV", "sandbox"),
        PLAID_COUNTRY_CODES=_get_list("PLAID_COUNTRY_CODES", "US"),
        PLAID_PRODUCTS=_get_list("PLAID_PRODUCTS", "auth,transactions"),
        PLAID_TIMEOUT_SECONDS=_get_int("PLAID_TIMEOUT_SECONDS", 30),
        PAGE_SIZE=_get_int("PAGE_SIZE", PAGE_SIZE),
        PENDING_THRESHOLD_DAYS=_get_int("PENDING_THRESHOLD_DAYS", PENDING_THRESHOLD_DAYS),
        CURRENCY_CODE=_get_env("CURRENCY_CODE", "USD"),
        REFERENCE_TIMEZONE=_get_env("REFERENCE_TIMEZONE", "UTC"),
        SESSION_COOKIE_NAME=_get_env("SESSION_COOKIE_NAME", "bank-session"),
        LOG_LEVEL=_get_env("LOG_LEVEL", "INFO"),
    )
