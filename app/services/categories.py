# filename: app/services/categories.py
"""
Category and status badge styles for the transactions table.

Every category string (free text like "Food and Drink" or provider
enumerations like "BANK_FEES") is folded into one of a fixed set of style
buckets. Status values ("Processed", "Pending") are looked up directly.

Nothing here raises for an unknown value: anything we can't place gets the
DEFAULT style.

Public API:
    category_bucket(category) -> StyleBucket
    classify(value, kind="category") -> CategoryStyle
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class StyleBucket(str, Enum):
    # Category buckets
    INCOME = "Income"
    TRANSFER = "Transfer"
    FOOD_AND_DRINK = "Food and drink"
    BANK_FEES = "Bank Fees"
    PAYMENT = "Payment"
    TRAVEL = "Travel"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"

    # Status buckets
    PROCESSED = "Processed"
    PENDING = "Pending"

    DEFAULT = "default"


@dataclass(frozen=True)
class CategoryStyle:
    border_color: str
    background_color: str
    text_color: str
    chip_background_color: str


# Ordered: the first rule whose substring appears in the category wins.
# e.g. "Transfer for payment" is a Transfer, "Loan payment" is Income.
CATEGORY_RULES: Tuple[Tuple[StyleBucket, Tuple[str, ...]], ...] = (
    (StyleBucket.INCOME, ("income", "loan")),
    (StyleBucket.TRANSFER, ("transfer",)),
    (StyleBucket.FOOD_AND_DRINK, ("food", "drink")),
    (StyleBucket.BANK_FEES, ("bank fee",)),
    (StyleBucket.PAYMENT, ("payment",)),
    (StyleBucket.TRAVEL, ("travel",)),
    (StyleBucket.TRANSPORTATION, ("transport",)),
    (StyleBucket.ENTERTAINMENT, ("entertain",)),
)

CATEGORY_STYLES: Mapping[StyleBucket, CategoryStyle] = MappingProxyType({
    StyleBucket.INCOME: CategoryStyle("#12B76A", "#12B76A", "#027A48", "#ECFDF3"),
    StyleBucket.TRANSFER: CategoryStyle("#B42318", "#B42318", "#B42318", "#FEF3F2"),
    StyleBucket.FOOD_AND_DRINK: CategoryStyle("#DD2590", "#EE46BC", "#C11574", "#FDF2FA"),
    StyleBucket.BANK_FEES: CategoryStyle("#039855", "#16A34A", "#027A48", "#FFFFFF"),
    StyleBucket.PAYMENT: CategoryStyle("#039855", "#16A34A", "#027A48", "#FFFFFF"),
    StyleBucket.TRAVEL: CategoryStyle("#0047AB", "#3B82F6", "#1D4ED8", "#EFF8FF"),
    StyleBucket.TRANSPORTATION: CategoryStyle("#6938EF", "#7A5AF8", "#5925DC", "#F4F3FF"),
    StyleBucket.ENTERTAINMENT: CategoryStyle("#DC6803", "#F79009", "#B54708", "#FFFAEB"),
    StyleBucket.PROCESSED: CategoryStyle("#12B76A", "#12B76A", "#027A48", "#ECFDF3"),
    StyleBucket.PENDING: CategoryStyle("#F2F4F7", "#667085", "#344054", "#F2F4F7"),
    StyleBucket.DEFAULT: CategoryStyle("#D0D5DD", "#3B82F6", "#1D4ED8", "#FFFFFF"),
})

_BUCKETS_BY_VALUE = {bucket.value: bucket for bucket in StyleBucket}


def category_bucket(category: str | None) -> StyleBucket:
    """Infer the style bucket of a category by ordered substring rules."""
    lower = str(category or "").lower().replace("_", " ")
    for bucket, needles in CATEGORY_RULES:
        if any(needle in lower for needle in needles):
            return bucket
    return StyleBucket.DEFAULT


def status_bucket(status: str | None) -> StyleBucket:
    """Exact lookup; no substring inference for statuses."""
    key = getattr(status, "value", status)
    if not isinstance(key, str):
        return StyleBucket.DEFAULT
    return _BUCKETS_BY_VALUE.get(key, StyleBucket.DEFAULT)


def classify(value: str | None, kind: str = "category") -> CategoryStyle:
    """
    Return the badge style for a category (kind="category") or a status
    (kind="status").
    """
    if kind == "category":
        bucket = category_bucket(value)
    elif kind == "status":
        bucket = status_bucket(value)
    else:
        raise ValueError(f"unknown badge kind: {kind!r}")
    return CATEGORY_STYLES.get(bucket, CATEGORY_STYLES[StyleBucket.DEFAULT])
