# app/services/transactions_table.py
#
# Transactions Table Rows
# Combines the normalized transactions with status, category styles, and
# formatted labels, then cuts out the requested page for the template.

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from app.services.categories import CategoryStyle, classify
from app.services.formatting import (
    PENDING_THRESHOLD_DAYS,
    FormattedDateTime,
    TransactionStatus,
    TzLike,
    format_amount,
    format_date_time,
    get_transaction_status,
    remove_special_characters,
)
from app.services.normalize import Transaction
from app.services.pagination import PAGE_SIZE, Page, get_page


@dataclass(frozen=True)
class TransactionRow:
    transaction: Transaction
    display_name: str
    amount_text: str
    is_debit: bool
    status: TransactionStatus
    status_style: CategoryStyle
    category_style: CategoryStyle
    formatted: FormattedDateTime


def build_row(
    tx: Transaction,
    now: Optional[datetime] = None,
    threshold_days: int = PENDING_THRESHOLD_DAYS,
    currency: Optional[str] = None,
    tz: TzLike = None,
) -> TransactionRow:
    formatted = format_date_time(tx.date, tz)
    status = get_transaction_status(formatted.timestamp, now=now, threshold_days=threshold_days, tz=tz)
    amount_text = format_amount(tx.amount, currency)

    return TransactionRow(
        transaction=tx,
        display_name=remove_special_characters(tx.name),
        amount_text=amount_text,
        is_debit=amount_text.startswith("-"),
        status=status,
        status_style=classify(status.value, kind="status"),
        category_style=classify(tx.category, kind="category"),
        formatted=formatted,
    )


def build_rows(
    transactions: Iterable[Transaction],
    now: Optional[datetime] = None,
    threshold_days: int = PENDING_THRESHOLD_DAYS,
    currency: Optional[str] = None,
    tz: TzLike = None,
) -> List[TransactionRow]:
    return [build_row(tx, now, threshold_days, currency, tz) for tx in transactions]


def build_transactions_view(
    transactions: Sequence[Transaction],
    page: int,
    now: Optional[datetime] = None,
    page_size: int = PAGE_SIZE,
    threshold_days: int = PENDING_THRESHOLD_DAYS,
    currency: Optional[str] = None,
    tz: TzLike = None,
) -> Tuple[Page, List[TransactionRow]]:
    """
    Paginate first, then format only the rows that will be shown.
    """
    current = get_page(transactions, page, page_size)
    rows = build_rows(current.items, now, threshold_days, currency, tz)
    return current, rows
