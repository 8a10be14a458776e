# db.py
# Role: Database bootstrap for the bank dashboard.
#       Defines the SQLAlchemy engine, session factory, and declarative Base.
#       Users, sessions, and linked banks live here; transactions are never stored.

"""
Database setup for the bank dashboard.

- Uses DATABASE_URL from settings (defaults to <project_root>/database/bank_dashboard.db).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from app.config import get_settings

# SQLAlchemy connection URL
DATABASE_URL = get_settings().DATABASE_URL

# For SQLite, we need check_same_thread=False for FastAPI (threaded request handling)
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
)

# Standard session factory used via dependency injection (see app/deps.py:get_db)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Declarative base class for ORM models
Base = declarative_base()
