from datetime import datetime, timedelta, timezone
from decimal import Decimal

from conftest import raw_transaction

from app.services.categories import CATEGORY_STYLES, StyleBucket
from app.services.formatting import TransactionStatus
from app.services.normalize import normalize_transaction, normalize_transactions
from app.services.transactions_table import build_row, build_rows, build_transactions_view

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_coffee_shop_end_to_end():
    tx = normalize_transaction(
        raw_transaction(
            amount="-42.50",
            type="debit",
            name="Coffee Shop!!",
            personal_finance_category=None,
            category=["Food and Drink", "Coffee"],
            date="2024-06-01",
        )
    )
    row = build_row(tx, now=NOW)

    assert tx.amount == Decimal("-42.50")
    assert row.display_name == "Coffee Shop"
    assert row.amount_text == "-$42.50"
    assert row.is_debit
    assert row.category_style == CATEGORY_STYLES[StyleBucket.FOOD_AND_DRINK]
    assert row.status is TransactionStatus.PROCESSED
    assert row.status_style == CATEGORY_STYLES[StyleBucket.PROCESSED]
    assert row.formatted.date_only == "Jun 1, 2024"


def test_recent_credit_row_is_pending():
    tx = normalize_transaction(
        raw_transaction(amount=1500, name="Payroll", personal_finance_category={"primary": "INCOME"},
                        date=(NOW - timedelta(days=1)).date().isoformat())
    )
    row = build_row(tx, now=NOW)

    assert row.amount_text == "$1,500.00"
    assert not row.is_debit
    assert row.status is TransactionStatus.PENDING
    assert row.status_style == CATEGORY_STYLES[StyleBucket.PENDING]
    assert row.category_style == CATEGORY_STYLES[StyleBucket.INCOME]


def test_rows_use_configured_currency_and_threshold():
    tx = normalize_transaction(raw_transaction(amount=-5, date="2024-06-10"))
    (row,) = build_rows([tx], now=NOW, threshold_days=10, currency="EUR")
    assert row.amount_text == "-€5.00"
    assert row.status is TransactionStatus.PENDING


def test_transactions_view_paginates_before_formatting():
    txs = normalize_transactions(
        [raw_transaction(transaction_id=f"t{i}", date="2024-06-01") for i in range(25)]
    )

    page, rows = build_transactions_view(txs, 3, now=NOW)
    assert page.number == 3
    assert page.total_pages == 3
    assert [r.transaction.id for r in rows] == ["t20", "t21", "t22", "t23", "t24"]

    page, rows = build_transactions_view(txs, 4, now=NOW)
    assert rows == []
    assert page.total_pages == 3


def test_transactions_view_page_size_override():
    txs = normalize_transactions([raw_transaction(transaction_id=f"t{i}") for i in range(5)])
    page, rows = build_transactions_view(txs, 1, now=NOW, page_size=2)
    assert len(rows) == 2
    assert page.total_pages == 3
