"""Pytest fixtures for the bank dashboard.

Every test gets its own SQLite file and a fake Plaid API served through
``httpx.MockTransport``, so nothing leaves the process and no test sees
another test's users or banks.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import date, timedelta
from typing import Any

# Point the import-time engine at a scratch DB before main/db are imported.
_IMPORT_DB_DIR = tempfile.mkdtemp(prefix="bank-dashboard-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_IMPORT_DB_DIR, 'import.db')}")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("PLAID_CLIENT_ID", "test-client-id")
os.environ.setdefault("PLAID_SECRET", "test-secret")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.deps import get_db, get_plaid_client  # noqa: E402
from app.services.plaid_client import PlaidClient  # noqa: E402
from db import Base  # noqa: E402
from main import app  # noqa: E402


# ---------------------------------------------------------------------------
# Raw provider payload builders
# ---------------------------------------------------------------------------


def raw_transaction(**overrides: Any) -> dict[str, Any]:
    """A transactions/sync ``added`` entry with sensible defaults."""
    tx: dict[str, Any] = {
        "transaction_id": "tx-1",
        "account_id": "acc-1",
        "name": "Coffee Shop",
        "amount": -4.5,
        "date": (date.today() - timedelta(days=10)).isoformat(),
        "datetime": None,
        "payment_channel": "in store",
        "pending": False,
        "category": ["Food and Drink", "Coffee"],
        "personal_finance_category": {"primary": "FOOD_AND_DRINK", "detailed": "FOOD_AND_DRINK_COFFEE"},
        "logo_url": None,
    }
    tx.update(overrides)
    return tx


def raw_account(**overrides: Any) -> dict[str, Any]:
    acc: dict[str, Any] = {
        "account_id": "acc-1",
        "balances": {"available": 100.0, "current": 110.0, "iso_currency_code": "USD"},
        "mask": "0000",
        "name": "Plaid Checking",
        "official_name": "Plaid Gold Standard 0% Interest Checking",
        "type": "depository",
        "subtype": "checking",
    }
    acc.update(overrides)
    return acc


# ---------------------------------------------------------------------------
# Fake Plaid API
# ---------------------------------------------------------------------------


class FakePlaid:
    """In-memory stand-in for the handful of Plaid endpoints we call."""

    def __init__(self) -> None:
        self.items: dict[str, dict[str, Any]] = {}
        self.institutions: dict[str, dict[str, Any]] = {
            "ins_1": {"institution_id": "ins_1", "name": "First Platypus Bank"},
        }
        self.public_tokens: dict[str, tuple[str, str]] = {}
        self.failures: dict[str, tuple[int, dict[str, Any]]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.link_token = "link-sandbox-abc123"

    def add_item(
        self,
        access_token: str,
        accounts: list[dict[str, Any]] | None = None,
        transaction_pages: list[list[dict[str, Any]]] | None = None,
        institution_id: str = "ins_1",
        item_id: str = "item-1",
    ) -> None:
        self.items[access_token] = {
            "accounts": accounts if accounts is not None else [raw_account()],
            "pages": transaction_pages if transaction_pages is not None else [[]],
            "institution_id": institution_id,
            "item_id": item_id,
        }

    def fail(self, path: str, status: int = 400, error_code: str = "ITEM_LOGIN_REQUIRED") -> None:
        self.failures[path] = (
            status,
            {
                "error_type": "ITEM_ERROR",
                "error_code": error_code,
                "error_message": "the login details of this item have changed",
                "request_id": "req-fail",
            },
        )

    def calls_to(self, path: str) -> list[dict[str, Any]]:
        return [body for p, body in self.calls if p == path]

    @staticmethod
    def _error(code: str, message: str, status: int = 400) -> httpx.Response:
        return httpx.Response(
            status,
            json={"error_type": "INVALID_INPUT", "error_code": code, "error_message": message},
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        body = json.loads(request.content or b"{}")
        self.calls.append((path, body))

        if path in self.failures:
            status, payload = self.failures[path]
            return httpx.Response(status, json=payload)

        if path == "/accounts/get":
            item = self.items.get(body.get("access_token"))
            if item is None:
                return self._error("INVALID_ACCESS_TOKEN", "provided access token is in an invalid format")
            return httpx.Response(
                200,
                json={
                    "accounts": item["accounts"],
                    "item": {"item_id": item["item_id"], "institution_id": item["institution_id"]},
                    "request_id": "req-accounts",
                },
            )

        if path == "/institutions/get_by_id":
            inst = self.institutions.get(body.get("institution_id"))
            if inst is None:
                return self._error("INVALID_INSTITUTION", "invalid institution_id provided")
            return httpx.Response(200, json={"institution": inst, "request_id": "req-inst"})

        if path == "/transactions/sync":
            item = self.items.get(body.get("access_token"))
            if item is None:
                return self._error("INVALID_ACCESS_TOKEN", "provided access token is in an invalid format")
            cursor = body.get("cursor")
            index = int(cursor.split("-")[1]) if cursor else 0
            pages = item["pages"]
            return httpx.Response(
                200,
                json={
                    "added": pages[index],
                    "modified": [],
                    "removed": [],
                    "next_cursor": f"cursor-{index + 1}",
                    "has_more": index + 1 < len(pages),
                    "request_id": "req-sync",
                },
            )

        if path == "/link/token/create":
            return httpx.Response(200, json={"link_token": self.link_token, "expiration": "2030-01-01T00:00:00Z"})

        if path == "/item/public_token/exchange":
            mapped = self.public_tokens.get(body.get("public_token"))
            if mapped is None:
                return self._error("INVALID_PUBLIC_TOKEN", "provided public token is expired")
            access_token, item_id = mapped
            return httpx.Response(200, json={"access_token": access_token, "item_id": item_id})

        return httpx.Response(404, json={"error_message": f"unknown path {path}"})

    def client(self) -> PlaidClient:
        return PlaidClient(
            "test-client-id",
            "test-secret",
            "sandbox",
            transport=httpx.MockTransport(self.handler),
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_plaid() -> FakePlaid:
    return FakePlaid()


@pytest.fixture()
def plaid_client(fake_plaid: FakePlaid) -> PlaidClient:
    return fake_plaid.client()


@pytest.fixture()
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory, plaid_client):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_plaid_client] = lambda: plaid_client
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
