# app/services/plaid_client.py
"""
Minimal async client for the Plaid REST API.

Only the endpoints the dashboard needs are wrapped. Every call is a single
POST with client_id/secret in the JSON body; there are no retries here.
A non-2xx answer (or a transport failure) raises PlaidError.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings
from app.logging_setup import get_logger

logger = get_logger(__name__)

PLAID_ENVIRONMENTS = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}


class PlaidError(Exception):
    """An error response (or no response at all) from the Plaid API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        error_code: Optional[str] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.error_message = message
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code
        self.request_id = request_id

    def __str__(self) -> str:
        parts = [self.error_message]
        if self.error_type or self.error_code:
            parts.append(f"({self.error_type}/{self.error_code})")
        if self.status_code is not None:
            parts.append(f"[HTTP {self.status_code}]")
        return " ".join(parts)


class PlaidClient:
    def __init__(
        self,
        client_id: str,
        secret: str,
        env: str = "sandbox",
        *,
        country_codes: Optional[List[str]] = None,
        products: Optional[List[str]] = None,
        timeout: float = 30,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if base_url is None:
            if env not in PLAID_ENVIRONMENTS:
                raise ValueError(f"unknown Plaid environment: {env!r}")
            base_url = PLAID_ENVIRONMENTS[env]

        self.client_id = client_id
        self.secret = secret
        self.base_url = base_url.rstrip("/")
        self.country_codes = list(country_codes or ["US"])
        self.products = list(products or ["auth", "transactions"])
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "PlaidClient":
        return cls(
            settings.PLAID_CLIENT_ID,
            settings.PLAID_SECRET,
            settings.PLAID_ENV,
            country_codes=settings.PLAID_COUNTRY_CODES,
            products=settings.PLAID_PRODUCTS,
            timeout=settings.PLAID_TIMEOUT_SECONDS,
            **kwargs,
        )

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = {"client_id": self.client_id, "secret": self.secret, **payload}

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(path, json=body)
        except httpx.HTTPError as e:
            raise PlaidError(f"request to {path} failed: {e!r}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.is_error:
            data = data if isinstance(data, dict) else {}
            raise PlaidError(
                data.get("error_message") or f"{path} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                error_type=data.get("error_type"),
                error_code=data.get("error_code"),
                request_id=data.get("request_id"),
            )

        if not isinstance(data, dict):
            raise PlaidError(f"{path} returned a non-JSON body", status_code=resp.status_code)

        return data

    # -------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------

    async def accounts_get(self, access_token: str) -> Dict[str, Any]:
        return await self._post("/accounts/get", {"access_token": access_token})

    async def institutions_get_by_id(self, institution_id: str) -> Dict[str, Any]:
        return await self._post(
            "/institutions/get_by_id",
            {"institution_id": institution_id, "country_codes": self.country_codes},
        )

    async def transactions_sync(
        self,
        access_token: str,
        cursor: Optional[str] = None,
        count: int = 100,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"access_token": access_token, "count": count}
        if cursor:
            payload["cursor"] = cursor
        return await self._post("/transactions/sync", payload)

    async def link_token_create(self, client_user_id: str, client_name: str) -> Dict[str, Any]:
        return await self._post(
            "/link/token/create",
            {
                "user": {"client_user_id": client_user_id},
                "client_name": client_name,
                "products": self.products,
                "country_codes": self.country_codes,
                "language": "en",
            },
        )

    async def item_public_token_exchange(self, public_token: str) -> Dict[str, Any]:
        return await self._post("/item/public_token/exchange", {"public_token": public_token})
