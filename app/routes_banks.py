# routes_banks.py
"""
JSON endpoints used by the bank-linking widget.

Flow: POST /banks/link-token -> provider Link UI -> public token ->
POST /banks/exchange-public-token -> Bank row stored for the user.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.deps import get_current_user, get_db, get_plaid_client
from app.services.bank_actions import create_link_token, exchange_public_token
from app.services.plaid_client import PlaidClient
from models import User

router = APIRouter(prefix="/banks")


class PublicTokenExchange(BaseModel):
    public_token: str


def _unauthorized() -> JSONResponse:
    return JSONResponse({"error": "Not signed in"}, status_code=401)


@router.post("/link-token")
async def link_token(
    user: Optional[User] = Depends(get_current_user),
    client: PlaidClient = Depends(get_plaid_client),
):
    if user is None:
        return _unauthorized()

    token = await create_link_token(client, user)
    if token is None:
        return JSONResponse({"error": "Could not create a link token"}, status_code=502)
    return {"link_token": token}


@router.post("/exchange-public-token")
async def exchange_token(
    payload: PublicTokenExchange,
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(get_plaid_client),
):
    if user is None:
        return _unauthorized()

    bank = await exchange_public_token(db, client, user, payload.public_token)
    if bank is None:
        return JSONResponse({"error": "Could not link the bank"}, status_code=502)
    return {"status": "linked", "bank_id": bank.id, "sharable_id": bank.sharable_id}
