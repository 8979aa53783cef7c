from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Optional, Dict, Any
from finance_dashboard.domain.enums import TransactionType, TransactionSource, Severity

@dataclass(frozen=True)
class Transaction:
    """Core domain model representing a single transaction"""
    id: str
    date: str # YYYY-MM-DD
    merchant: str
    amount: Decimal
    category: str
    type: TransactionType
    sub_category: Optional[str] = None
    flagged: Optional[bool] = None
    original_source: Optional[TransactionSource] = None
    detected_currency: Optional[str] = None

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Return amount with sign for net calculations"""
        return self.amount if self.is_income else -self.amount

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data representation, enums flattened to their values"""
        data = asdict(self)
        data["amount"] = str(self.amount)
        data["type"] = self.type.value
        data["original_source"] = self.original_source.value if self.original_source else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        source = data.get("original_source")
        return cls(
            id=str(data["id"]),
            date=data["date"],
            merchant=data["merchant"],
            amount=Decimal(str(data["amount"])),
            category=data["category"],
            type=TransactionType(data["type"]),
            sub_category=data.get("sub_category"),
            flagged=data.get("flagged"),
            original_source=TransactionSource(source) if source else None,
            detected_currency=data.get("detected_currency"),
        )

    def __repr__(self):
        sign = "+" if self.is_income else "-"
        return f"Transaction({self.date}, {self.merchant[:30]}, {sign}{self.amount}, {self.category})"


@dataclass(frozen=True)
class CategorizationRule:
    """
    User-defined keyword -> category mapping.

    Rules are kept in an ordered list; the position in that list is the
    rule's priority.
    """
    id: str
    keyword: str
    category: str
    sub_category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategorizationRule":
        return cls(
            id=str(data["id"]),
            keyword=data["keyword"],
            category=data["category"],
            sub_category=data.get("sub_category"),
        )


@dataclass(frozen=True)
class CategoryMatch:
    """Outcome of a successful rule match"""
    category: str
    sub_category: Optional[str] = None


@dataclass(frozen=True)
class Insight:
    """A single observation returned by the insight generator"""
    id: str
    title: str
    message: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "severity": self.severity.value,
        }
