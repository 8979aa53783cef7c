"""
Ingestion boundary: the only place raw extracted rows become Transactions.

Everything downstream (categorizer, aggregation) trusts its input, so
malformed rows are rejected here and never reach the collection.
"""
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, List, Optional

import pandas as pd

from finance_dashboard.categorization.categories import CategorySet
from finance_dashboard.domain.enums import TransactionSource, TransactionType
from finance_dashboard.domain.models import Transaction
from finance_dashboard.ingestion.analyzer import AnalyzedTransaction, DocumentAnalysisResponse
from finance_dashboard.logging_setup import get_logger

logger = get_logger(__name__)

UNKNOWN_MERCHANT = "Unknown Merchant"

# 1,234 or 12,345,678.90; any other comma is ambiguous
THOUSANDS_PATTERN = re.compile(r"[+-]?\d{1,3}(,\d{3})+(\.\d+)?")


class RejectedRowError(ValueError):
    """Raised when an extracted row cannot become a valid transaction."""
    pass


@dataclass
class IngestionResult:
    """Valid transactions plus what was rejected on the way"""
    transactions: List[Transaction] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)


def canonical_date(value: Any, today: Callable[[], date] = date.today) -> str:
    """
    Render a date as YYYY-MM-DD.

    Missing dates default to today. Strings in other formats are parsed
    with pandas.

    Raises:
        RejectedRowError: If the value is not a recognisable date
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass

    try:
        parsed = pd.to_datetime(text)
    except (ValueError, TypeError, OverflowError) as e:
        raise RejectedRowError(f"Unreadable date {value!r}") from e
    if pd.isna(parsed):
        raise RejectedRowError(f"Unreadable date {value!r}")
    return parsed.date().isoformat()


def validate_amount(value: Any) -> Decimal:
    """
    Convert an extracted amount to a non-negative Decimal.

    Raises:
        RejectedRowError: For missing, non-numeric, NaN, infinite or negative amounts
    """
    if value is None or isinstance(value, bool):
        raise RejectedRowError(f"Missing amount {value!r}")

    text = str(value).strip()
    if "," in text:
        if not THOUSANDS_PATTERN.fullmatch(text):
            raise RejectedRowError(f"Ambiguous comma in amount {value!r}")
        text = text.replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation as e:
        raise RejectedRowError(f"Non-numeric amount {value!r}") from e

    if not amount.is_finite():
        raise RejectedRowError(f"Non-finite amount {value!r}")
    if amount < 0:
        raise RejectedRowError(f"Negative amount {value!r}")
    return amount


def parse_type(value: Any) -> TransactionType:
    try:
        return TransactionType(str(value).strip().upper())
    except ValueError as e:
        raise RejectedRowError(f"Unknown transaction type {value!r}") from e


def build_transaction(
    row: AnalyzedTransaction,
    categories: CategorySet,
    source: Optional[TransactionSource] = None,
    currency: Optional[str] = None,
    today: Callable[[], date] = date.today,
) -> Transaction:
    """
    Turn one extracted row into a Transaction with a fresh id.

    The category is checked against the category set; names outside it
    fall back to "Uncategorized".
    """
    merchant = (row.merchant or "").strip() or UNKNOWN_MERCHANT
    return Transaction(
        id=str(uuid.uuid4()),
        date=canonical_date(row.date, today),
        merchant=merchant,
        amount=validate_amount(row.amount),
        category=categories.normalize(row.category),
        type=parse_type(row.type),
        sub_category=row.sub_category or None,
        original_source=source,
        detected_currency=currency,
    )


def build_transactions(
    response: DocumentAnalysisResponse,
    categories: CategorySet,
    source: Optional[TransactionSource] = None,
    today: Callable[[], date] = date.today,
) -> IngestionResult:
    """
    Validate every row of an analyzer response.

    Rejected rows are logged and reported; they never produce a partial
    Transaction.
    """
    result = IngestionResult()

    for index, row in enumerate(response.transactions):
        try:
            result.transactions.append(
                build_transaction(row, categories, source, response.detected_currency_code, today)
            )
        except RejectedRowError as e:
            logger.warning("Skipping row %d: %s", index, e)
            result.rejected.append(f"row {index}: {e}")

    logger.info(
        "Ingested %d transactions (%d rejected)",
        len(result.transactions), result.rejected_count,
    )
    return result
