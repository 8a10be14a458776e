# app/deps.py
# Role: Shared application-level dependencies.
#       Provides the Jinja2 templates loader, the SQLAlchemy session dependency,
#       settings, the Plaid client, and the request-scoped session/user lookups.

"""
Shared dependencies for the bank dashboard app.
"""

import os
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.services.formatting import format_amount
from app.services.plaid_client import PlaidClient
from app.services.user_actions import get_logged_in_user
from db import SessionLocal
from models import User

APP_DIR = os.path.dirname(os.path.abspath(__file__))

# -------------------------------------------------------------------
# Templates
# -------------------------------------------------------------------

# Jinja2 templates loader (used by all HTML-rendering routes)
templates = Jinja2Templates(directory=os.path.join(APP_DIR, "templates"))

# {{ value | money("USD") }} for balances outside the transactions table
templates.env.filters["money"] = format_amount

# -------------------------------------------------------------------
# Database dependency
# -------------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it is closed.

    Typical usage in routes:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# -------------------------------------------------------------------
# Settings & provider client
# -------------------------------------------------------------------

def get_app_settings() -> Settings:
    return get_settings()


def get_plaid_client(settings: Settings = Depends(get_app_settings)) -> PlaidClient:
    return PlaidClient.from_settings(settings)

# -------------------------------------------------------------------
# Session & current user
# -------------------------------------------------------------------

def get_session_secret(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> Optional[str]:
    """
    The session secret from the request cookie (None when signed out).
    """
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_user(
    secret: Optional[str] = Depends(get_session_secret),
    db: Session = Depends(get_db),
) -> Optional[User]:
    return get_logged_in_user(db, secret)
