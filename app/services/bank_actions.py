# app/services/bank_actions.py
"""
Bank actions: everything the pages need from the aggregation provider.

This is the boundary where provider failures stop. Callers never see a
PlaidError: they get None, an empty list, or an AccountResult carrying an
error message, and render an empty / error state from that.

Public API:
    get_accounts(db, client, user_id)              -> AccountsSummary | None
    get_account(db, client, bank_id, user_id=None) -> AccountResult
    get_institution(client, institution_id)        -> dict | None
    get_transactions(client, access_token)         -> list[Transaction]
    create_link_token(client, user)                -> str | None
    exchange_public_token(db, client, user, token) -> Bank | None
"""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.logging_setup import get_logger
from app.services.formatting import TzLike
from app.services.normalize import (
    Account,
    AccountsSummary,
    Transaction,
    normalize_account,
    normalize_transactions,
    summarize_accounts,
)
from app.services.plaid_client import PlaidClient, PlaidError
from models import Bank, User

logger = get_logger(__name__)

LINK_CLIENT_NAME = "Bank Dashboard"

# Errors that mean "this upstream fetch failed" rather than a bug in our code
_FETCH_ERRORS = (PlaidError, SQLAlchemyError, KeyError, IndexError, ValueError)


@dataclass(frozen=True)
class AccountResult:
    data: Optional[Account] = None
    transactions: List[Transaction] = field(default_factory=list)
    error: Optional[str] = None


def encrypt_id(value: str) -> str:
    """URL-safe public id for an account (reversible, not a secret)."""
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


# -------------------------------------------------------------------
# Database access (blocking, always run in the threadpool)
# -------------------------------------------------------------------

def _load_banks(db: Session, user_id: int) -> List[Bank]:
    return db.query(Bank).filter(Bank.user_id == user_id).order_by(Bank.id).all()


def _load_bank(db: Session, bank_id: int) -> Optional[Bank]:
    return db.get(Bank, bank_id)


def _save_bank(db: Session, bank: Bank) -> Bank:
    try:
        db.add(bank)
        db.commit()
        db.refresh(bank)
    except SQLAlchemyError:
        db.rollback()
        raise
    return bank


async def _gather_all(*aws: Any) -> List[Any]:
    """
    Await every fetch, then raise the first failure (if any).

    Later failures are logged so none of them go unreported.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    failures = [r for r in results if isinstance(r, BaseException)]
    for extra in failures[1:]:
        logger.error("Concurrent fetch also failed: %s", extra)
    if failures:
        raise failures[0]
    return results


# -------------------------------------------------------------------
# Institutions & accounts
# -------------------------------------------------------------------

async def get_institution(client: PlaidClient, institution_id: str) -> Optional[Dict[str, Any]]:
    try:
        response = await client.institutions_get_by_id(institution_id)
    except PlaidError as e:
        logger.error("An error occurred while getting institution %s: %s", institution_id, e)
        return None
    return response.get("institution")


async def _fetch_account(client: PlaidClient, bank: Bank) -> Account:
    """
    Fetch the account a Bank row points at (first account of the item when
    the stored id is no longer returned) and resolve its institution.
    """
    response = await client.accounts_get(bank.access_token)
    accounts = response.get("accounts") or []
    if not accounts:
        raise PlaidError(f"no accounts returned for bank {bank.id}")

    account_data = next(
        (a for a in accounts if a.get("account_id") == bank.account_id),
        accounts[0],
    )

    institution_id = (response.get("item") or {}).get("institution_id")
    if institution_id:
        institution = await get_institution(client, institution_id)
        if institution:
            institution_id = institution.get("institution_id", institution_id)

    return normalize_account(account_data, institution_id, bank)


async def get_accounts(db: Session, client: PlaidClient, user_id: int) -> Optional[AccountsSummary]:
    """
    All linked accounts of a user, fetched concurrently, with balance totals.

    Returns None when any fetch fails.
    """
    try:
        banks = await run_in_threadpool(_load_banks, db, user_id)
        accounts = await _gather_all(*(_fetch_account(client, bank) for bank in banks))
    except _FETCH_ERRORS as e:
        logger.error("An error occurred while getting the accounts: %s", e)
        return None

    return summarize_accounts(accounts)


async def get_account(
    db: Session,
    client: PlaidClient,
    bank_id: int,
    user_id: Optional[int] = None,
    tz: TzLike = None,
) -> AccountResult:
    """
    One linked account plus all of its transactions.

    When user_id is given, banks owned by someone else count as not found.
    """
    try:
        bank = await run_in_threadpool(_load_bank, db, bank_id)
    except SQLAlchemyError as e:
        logger.error("An error occurred while loading bank %s: %s", bank_id, e)
        return AccountResult(error="Failed to fetch account")

    if bank is None or (user_id is not None and bank.user_id != user_id):
        return AccountResult(error=f"Bank not found for id: {bank_id}")

    try:
        account, transactions = await _gather_all(
            _fetch_account(client, bank),
            get_transactions(client, bank.access_token, tz),
        )
    except _FETCH_ERRORS as e:
        logger.error("An error occurred while getting the account: %s", e)
        return AccountResult(error="Failed to fetch account")

    return AccountResult(data=account, transactions=transactions)


# -------------------------------------------------------------------
# Transactions
# -------------------------------------------------------------------

async def get_transactions(client: PlaidClient, access_token: str, tz: TzLike = None) -> List[Transaction]:
    """
    Pull every added transaction via transactions/sync, newest first.

    Follows next_cursor until has_more is false. Any failure gives [].
    """
    added: List[Dict[str, Any]] = []
    cursor: Optional[str] = None

    try:
        while True:
            data = await client.transactions_sync(access_token, cursor=cursor)
            added.extend(data.get("added") or [])

            if not data.get("has_more"):
                break

            next_cursor = data.get("next_cursor")
            if not next_cursor or next_cursor == cursor:
                raise PlaidError("transactions/sync reported has_more without a new cursor")
            cursor = next_cursor
    except PlaidError as e:
        logger.error("Plaid transactionsSync error: %s", e)
        return []

    transactions = normalize_transactions(added, tz)
    transactions.sort(key=lambda t: t.date, reverse=True)
    return transactions


# -------------------------------------------------------------------
# Linking
# -------------------------------------------------------------------

async def create_link_token(client: PlaidClient, user: User) -> Optional[str]:
    try:
        response = await client.link_token_create(str(user.id), LINK_CLIENT_NAME)
    except PlaidError as e:
        logger.error("An error occurred while creating a link token: %s", e)
        return None
    return response.get("link_token")


async def exchange_public_token(
    db: Session,
    client: PlaidClient,
    user: User,
    public_token: str,
) -> Optional[Bank]:
    """
    Exchange a Link public token and store the resulting bank for the user.
    """
    try:
        exchange = await client.item_public_token_exchange(public_token)
        access_token = exchange["access_token"]
        item_id = exchange["item_id"]

        accounts_response = await client.accounts_get(access_token)
        account_id = accounts_response["accounts"][0]["account_id"]
    except (PlaidError, KeyError, IndexError) as e:
        logger.error("An error occurred while exchanging the public token: %s", e)
        return None

    bank = Bank(
        user_id=user.id,
        item_id=item_id,
        account_id=account_id,
        access_token=access_token,
        sharable_id=encrypt_id(account_id),
    )
    try:
        bank = await run_in_threadpool(_save_bank, db, bank)
    except SQLAlchemyError as e:
        logger.error("An error occurred while saving the bank: %s", e)
        return None

    logger.info("Linked bank %s (item %s) for user %s", bank.id, item_id, user.id)
    return bank
