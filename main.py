# main.py
# Role: Application entry point for the bank dashboard.
#       Configures logging, creates database tables, mounts static assets,
#       and registers all route modules.

"""
Main FastAPI app for the bank dashboard.

Here we only:
- configure logging
- create the FastAPI app
- set up static files
- create DB tables
- include route modules
"""

import os

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

import models  # noqa: F401  (registers tables on Base.metadata)
from app.config import get_settings
from app.logging_setup import configure_logging
from app.routes_auth import router as auth_router
from app.routes_banks import router as banks_router
from app.routes_root import router as root_router
from db import Base, engine


# -------------------------------------------------------------------
# App & DB setup
# -------------------------------------------------------------------

configure_logging(get_settings().LOG_LEVEL)

# Create database tables (only if they don't exist yet).
Base.metadata.create_all(bind=engine)

# FastAPI application instance
app = FastAPI(title="Bank Dashboard")

# Serve static files (CSS) from /static
STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "app", "static")
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# -------------------------------------------------------------------
# Include routers
# -------------------------------------------------------------------

# Home page (balances, recent transactions) and health check
app.include_router(root_router)

# Sign in / sign up / logout
app.include_router(auth_router)

# Bank linking (link token + public token exchange)
app.include_router(banks_router)
