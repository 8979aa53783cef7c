"""
Derived analytics views.

Plain value objects produced by the aggregation engine, ready to be
handed to any consumer (CLI tables, charts, JSON export).
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List

from finance_dashboard.domain.models import Transaction


@dataclass(frozen=True)
class Summaries:
    """Income, expense and net flow over a collection"""
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    net_flow: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_income": str(self.total_income),
            "total_expense": str(self.total_expense),
            "net_flow": str(self.net_flow),
        }


@dataclass(frozen=True)
class CategoryTotal:
    """One slice of the category distribution"""
    name: str
    value: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": str(self.value)}


@dataclass(frozen=True)
class CategoryShare:
    """One row of the category ranking"""
    name: str
    value: Decimal
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": str(self.value), "percent": self.percent}


@dataclass(frozen=True)
class BalancePoint:
    """Cumulative balance at the end of one day"""
    date: str
    balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "balance": str(self.balance)}


@dataclass
class DashboardViews:
    """Every derived view of a collection, computed together"""
    summaries: Summaries
    category_distribution: List[CategoryTotal] = field(default_factory=list)
    balance_trend: List[BalancePoint] = field(default_factory=list)
    top_expenses: List[Transaction] = field(default_factory=list)
    category_ranking: List[CategoryShare] = field(default_factory=list)

    @property
    def trend_is_positive(self) -> bool:
        """Presentational flag: final balance >= 0"""
        from finance_dashboard.analytics.aggregation import trend_is_positive
        return trend_is_positive(self.balance_trend)

    @property
    def is_empty(self) -> bool:
        return not self.balance_trend

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summaries": self.summaries.to_dict(),
            "category_distribution": [c.to_dict() for c in self.category_distribution],
            "balance_trend": [p.to_dict() for p in self.balance_trend],
            "top_expenses": [t.to_dict() for t in self.top_expenses],
            "category_ranking": [c.to_dict() for c in self.category_ranking],
            "trend_is_positive": self.trend_is_positive,
        }
