# routes_root.py
"""
Home page (balances + recent transactions) and the health check.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from app.config import Settings
from app.deps import get_app_settings, get_current_user, get_db, get_plaid_client, templates
from app.logging_setup import get_logger
from app.services.bank_actions import AccountResult, get_account, get_accounts
from app.services.pagination import parse_page
from app.services.plaid_client import PlaidClient
from app.services.transactions_table import build_transactions_view
from models import User

logger = get_logger(__name__)

router = APIRouter()


def parse_bank_id(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/", response_class=HTMLResponse)
async def home_page(
    request: Request,
    id: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    user: Optional[User] = Depends(get_current_user),
    db: Session = Depends(get_db),
    client: PlaidClient = Depends(get_plaid_client),
    settings: Settings = Depends(get_app_settings),
):
    """
    Greeting, total balance, and the selected bank's transactions.

    ?id= picks a linked bank (defaults to the first one), ?page= the table page.
    """
    if user is None:
        return RedirectResponse(url="/sign-in", status_code=303)

    current_page = parse_page(page)

    accounts = await get_accounts(db, client, user.id)
    accounts_data = accounts.data if accounts is not None else []

    # Only fetch a specific account if we actually have banks
    account_result: Optional[AccountResult] = None
    selected_bank_id: Optional[int] = None

    if accounts_data:
        if id:
            selected_bank_id = parse_bank_id(id)
        else:
            selected_bank_id = accounts_data[0].bank_id

        if selected_bank_id is None:
            account_result = AccountResult(error=f"Bank not found for id: {id}")
        else:
            account_result = await get_account(
                db,
                client,
                selected_bank_id,
                user_id=user.id,
                tz=settings.REFERENCE_TIMEZONE,
            )

    transactions = account_result.transactions if account_result is not None else []
    page_view, rows = build_transactions_view(
        transactions,
        current_page,
        page_size=settings.PAGE_SIZE,
        threshold_days=settings.PENDING_THRESHOLD_DAYS,
        currency=settings.CURRENCY_CODE,
        tz=settings.REFERENCE_TIMEZONE,
    )

    logger.debug(
        "Home for user %s: %d accounts, bank %s, page %d/%d",
        user.id, len(accounts_data), selected_bank_id, page_view.number, page_view.total_pages,
    )

    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "user": user,
            "accounts": accounts,
            "accounts_data": accounts_data,
            "sidebar_banks": accounts_data[:2],
            "selected_account": account_result.data if account_result is not None else None,
            "account_error": account_result.error if account_result is not None else None,
            "selected_bank_id": selected_bank_id,
            "page": page_view,
            "rows": rows,
            "currency": settings.CURRENCY_CODE,
        },
    )
