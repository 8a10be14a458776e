# app/services/normalize.py
#
# Normalization of Provider Payloads
# Converts raw aggregation-provider records (accounts/get, transactions/sync)
# into the canonical read-only shapes used by the rest of the app.
# Nothing here does I/O.

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.logging_setup import get_logger
from app.services.formatting import TzLike, parse_timestamp, to_decimal

logger = get_logger(__name__)

UNCATEGORIZED = "Uncategorized"

DEBIT = "debit"
CREDIT = "credit"


class TransactionValidationError(ValueError):
    """A raw transaction record is missing or has malformed mandatory fields."""


# ---- Canonical shapes ----

@dataclass(frozen=True)
class Transaction:
    id: str
    name: str
    amount: Decimal                    # negative = money out, positive = money in
    date: datetime                     # aware, reference timezone
    payment_channel: str
    type: str
    category: str
    pending: bool = False
    account_id: Optional[str] = None
    image: Optional[str] = None


@dataclass(frozen=True)
class Account:
    id: str
    available_balance: Optional[Decimal]
    current_balance: Optional[Decimal]
    institution_id: Optional[str]
    name: str
    official_name: Optional[str]
    mask: Optional[str]
    type: str
    subtype: Optional[str]
    bank_id: Optional[int] = None
    sharable_id: Optional[str] = None


@dataclass(frozen=True)
class AccountsSummary:
    data: List[Account] = field(default_factory=list)
    total_banks: int = 0
    total_current_balance: Decimal = Decimal("0")


# ---- Transactions ----

def resolve_category(raw: Mapping[str, Any]) -> str:
    """
    Pick the single category label for a raw transaction.

    Priority: personal_finance_category.primary, then the first entry of the
    legacy category list, then "Uncategorized".
    """
    pfc = raw.get("personal_finance_category")
    if isinstance(pfc, Mapping):
        primary = pfc.get("primary")
        if isinstance(primary, str) and primary.strip():
            return primary

    legacy = raw.get("category")
    if isinstance(legacy, (list, tuple)) and legacy:
        first = legacy[0]
        if isinstance(first, str) and first.strip():
            return first

    return UNCATEGORIZED


def _require(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    raise TransactionValidationError(f"missing required field {keys[0]!r}")


def reconcile_amount(amount: Decimal, flag: Optional[str]) -> Decimal:
    """
    Apply a debit/credit flag to an amount.

    Without a flag the amount is trusted as already signed. With one, the
    magnitude is kept and the sign comes from the flag.
    """
    if flag == DEBIT:
        return amount.copy_abs().copy_negate()
    if flag == CREDIT:
        return amount.copy_abs()
    return amount


def normalize_transaction(raw: Mapping[str, Any], tz: TzLike = None) -> Transaction:
    """
    Convert one raw provider transaction into a Transaction.

    Raises TransactionValidationError when id, amount, or date is missing or
    cannot be parsed.
    """
    if not isinstance(raw, Mapping):
        raise TransactionValidationError(f"expected a record, got {type(raw).__name__}")

    tx_id = str(_require(raw, "transaction_id", "id"))
    raw_amount = _require(raw, "amount")
    raw_date = _require(raw, "datetime", "date")

    try:
        amount = to_decimal(raw_amount)
    except ValueError as e:
        raise TransactionValidationError(f"transaction {tx_id}: {e}") from e

    try:
        when = parse_timestamp(raw_date, tz)
    except ValueError as e:
        raise TransactionValidationError(f"transaction {tx_id}: {e}") from e

    channel = str(raw.get("payment_channel") or "other")

    flag = raw.get("type")
    flag = flag.strip().lower() if isinstance(flag, str) else None
    if flag not in (DEBIT, CREDIT):
        flag = None

    return Transaction(
        id=tx_id,
        name=str(raw.get("name") or raw.get("merchant_name") or ""),
        amount=reconcile_amount(amount, flag),
        date=when,
        payment_channel=channel,
        type=flag or channel,
        category=resolve_category(raw),
        pending=bool(raw.get("pending", False)),
        account_id=raw.get("account_id"),
        image=raw.get("logo_url") or raw.get("image"),
    )


def normalize_transactions(raws: Iterable[Mapping[str, Any]], tz: TzLike = None) -> List[Transaction]:
    """
    Normalize a list of raw transactions, skipping (and logging) bad records.
    """
    out: List[Transaction] = []
    for i, raw in enumerate(raws):
        try:
            out.append(normalize_transaction(raw, tz))
        except TransactionValidationError as e:
            logger.warning("Skipping malformed transaction #%d: %s", i, e)
    return out


# ---- Accounts ----

def _optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value)


def normalize_account(
    account_data: Mapping[str, Any],
    institution_id: Optional[str],
    bank: Any = None,
) -> Account:
    """
    Build an Account from one entry of an accounts/get response.

    `bank` is the locally linked Bank row the account was fetched through.
    """
    balances: Dict[str, Any] = account_data.get("balances") or {}

    return Account(
        id=str(account_data["account_id"]),
        available_balance=_optional_decimal(balances.get("available")),
        current_balance=_optional_decimal(balances.get("current")),
        institution_id=institution_id,
        name=str(account_data.get("name") or ""),
        official_name=account_data.get("official_name"),
        mask=account_data.get("mask"),
        type=str(account_data.get("type") or ""),
        subtype=account_data.get("subtype"),
        bank_id=getattr(bank, "id", None),
        sharable_id=getattr(bank, "sharable_id", None),
    )


def summarize_accounts(accounts: Iterable[Account]) -> AccountsSummary:
    data = list(accounts)
    total = sum((a.current_balance or Decimal("0") for a in data), Decimal("0"))
    return AccountsSummary(data=data, total_banks=len(data), total_current_balance=total)
