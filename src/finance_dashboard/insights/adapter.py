"""
Boundary to the external insight generator.

The generator itself (an LLM call) lives outside this package. The
adapter decides when to ask, what to send, and turns any failure into an
empty result: insights are nice to have and never block the dashboard.
"""
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Protocol, Sequence, Union

from finance_dashboard.domain.enums import Severity
from finance_dashboard.domain.models import Insight, Transaction
from finance_dashboard.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_INSIGHT_THRESHOLD = 5


class InvalidInsightError(ValueError):
    """Raised when a generator response item cannot be read as an Insight."""
    pass


@dataclass(frozen=True)
class InsightRecord:
    """Reduced projection of a transaction sent to the generator"""
    date: str
    merchant: str
    amount: Decimal
    category: str

    @classmethod
    def from_transaction(cls, txn: Transaction) -> "InsightRecord":
        return cls(date=txn.date, merchant=txn.merchant, amount=txn.amount, category=txn.category)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "merchant": self.merchant,
            "amount": str(self.amount),
            "category": self.category,
        }


InsightPayload = Union[Insight, Mapping[str, Any]]


class InsightGenerator(Protocol):
    """Anything that can turn a transaction history into insights"""

    async def generate(self, records: Sequence[InsightRecord]) -> Sequence[InsightPayload]:
        ...


def parse_insight(payload: InsightPayload) -> Insight:
    """
    Coerce one generator response item into an Insight.

    Raises:
        InvalidInsightError: If a field is missing or the severity is unknown
    """
    if isinstance(payload, Insight):
        return payload

    try:
        title = payload["title"]
        message = payload["message"]
        severity = Severity(payload["severity"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidInsightError(f"Malformed insight {payload!r}: {e}") from e

    return Insight(
        id=str(payload.get("id") or uuid.uuid4()),
        title=str(title),
        message=str(message),
        severity=severity,
    )


class InsightAdapter:
    """
    Requests insights for a collection, degrading silently on failure.

    Usage:
        adapter = InsightAdapter(generator)
        insights = await adapter.fetch_insights(transactions)
    """

    def __init__(
        self,
        generator: InsightGenerator,
        threshold: int = DEFAULT_INSIGHT_THRESHOLD,
    ):
        self.generator = generator
        self.threshold = threshold

    def should_request(self, transactions: Sequence[Transaction]) -> bool:
        """Only collections larger than the threshold are worth analysing"""
        return len(transactions) > self.threshold

    async def fetch_insights(self, transactions: Sequence[Transaction]) -> List[Insight]:
        """
        Ask the generator for insights about the collection.

        Returns:
            Parsed insights, or an empty list when the collection is too small,
            the generator fails, or its response is malformed
        """
        if not self.should_request(transactions):
            return []

        records = [InsightRecord.from_transaction(t) for t in transactions]

        try:
            response = await self.generator.generate(records)
            return [parse_insight(item) for item in (response or [])]
        except Exception as e:
            logger.warning("Insight generation failed: %s", e)
            return []
