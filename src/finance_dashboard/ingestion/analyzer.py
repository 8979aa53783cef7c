"""
Data contract of the external document analyzer.

The analyzer (OCR / LLM extraction) is not part of this package; these
types describe what goes in and what comes back.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from finance_dashboard.domain.enums import TransactionSource

CSV_MIME_TYPES = {"text/csv", "text/plain"}


class AnalysisFailedError(Exception):
    """Raised when a document could not be turned into transactions."""
    pass


@dataclass(frozen=True)
class DocumentAnalysisRequest:
    content: Union[bytes, str]
    mime_type: str
    known_categories: Sequence[str] = ()
    source_name: str = "default"


@dataclass(frozen=True)
class AnalyzedTransaction:
    """A transaction row as extracted, before any validation"""
    merchant: Optional[str]
    date: Optional[Any]
    amount: Optional[Any]
    category: Optional[str]
    type: Optional[str]
    sub_category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalyzedTransaction":
        return cls(
            merchant=data.get("merchant"),
            date=data.get("date"),
            amount=data.get("amount"),
            category=data.get("category"),
            type=data.get("type"),
            sub_category=data.get("subCategory", data.get("sub_category")),
        )


@dataclass(frozen=True)
class DocumentAnalysisResponse:
    transactions: List[AnalyzedTransaction] = field(default_factory=list)
    detected_currency_code: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DocumentAnalysisResponse":
        """
        Read the analyzer's JSON shape:
        {"transactions": [{merchant, date, amount, category, type}], "detectedCurrencyCode": "USD"}
        """
        rows = data.get("transactions") or []
        return cls(
            transactions=[AnalyzedTransaction.from_dict(row) for row in rows],
            detected_currency_code=data.get("detectedCurrencyCode", data.get("detected_currency_code")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactions": [
                {
                    "merchant": t.merchant,
                    "date": t.date,
                    "amount": t.amount,
                    "category": t.category,
                    "type": t.type,
                }
                for t in self.transactions
            ],
            "detectedCurrencyCode": self.detected_currency_code,
        }


class DocumentAnalyzer(Protocol):
    """Extracts transactions from a statement document"""

    async def analyze(self, request: DocumentAnalysisRequest) -> DocumentAnalysisResponse:
        ...


def source_for_mime_type(mime_type: str) -> TransactionSource:
    """Text exports count as CSV imports, everything else (PDF, images) as scans"""
    if mime_type in CSV_MIME_TYPES:
        return TransactionSource.CSV
    return TransactionSource.SCAN
