"""
Aggregation engine: derived views over a transaction collection.

Every function is pure and recomputes from the full collection it is
given. Amounts are summed nominally; transactions in different detected
currencies are never converted.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Sequence

from finance_dashboard.analytics.models import (
    BalancePoint,
    CategoryShare,
    CategoryTotal,
    DashboardViews,
    Summaries,
)
from finance_dashboard.domain.models import Transaction

DEFAULT_DISTRIBUTION_TOP_N = 5
DEFAULT_TOP_EXPENSES_N = 10
MIN_MINOR_UNIT_DIGITS = 2


def _amount(txn: Transaction) -> Decimal:
    if isinstance(txn.amount, Decimal):
        return txn.amount
    return Decimal(str(txn.amount))


def _expenses(transactions: Sequence[Transaction]) -> List[Transaction]:
    return [t for t in transactions if t.is_expense]


def _totals_by_category(expenses: Sequence[Transaction]) -> Dict[str, Decimal]:
    """Sum per category, keyed in first-encountered order"""
    totals: Dict[str, Decimal] = defaultdict(Decimal)
    for txn in expenses:
        totals[txn.category] += _amount(txn)
    return dict(totals)


def _sorted_by_value(totals: Dict[str, Decimal]) -> List[tuple]:
    # sorted() is stable, so equal sums keep first-encountered order
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def summarize(transactions: Sequence[Transaction]) -> Summaries:
    """
    Total income, total expense and their difference.

    net_flow is computed from the two totals, so
    total_income - total_expense == net_flow holds exactly.
    """
    total_income = sum((_amount(t) for t in transactions if t.is_income), Decimal("0"))
    total_expense = sum((_amount(t) for t in transactions if t.is_expense), Decimal("0"))
    return Summaries(
        total_income=total_income,
        total_expense=total_expense,
        net_flow=total_income - total_expense,
    )


def category_distribution(
    transactions: Sequence[Transaction],
    top_n: int = DEFAULT_DISTRIBUTION_TOP_N,
) -> List[CategoryTotal]:
    """Top-N expense categories by summed amount, largest first"""
    totals = _totals_by_category(_expenses(transactions))
    return [
        CategoryTotal(name=name, value=value)
        for name, value in _sorted_by_value(totals)[:top_n]
    ]


def _minor_unit_digits(transactions: Sequence[Transaction]) -> int:
    """Smallest number of fractional digits that represents every amount exactly"""
    digits = MIN_MINOR_UNIT_DIGITS
    for txn in transactions:
        exponent = _amount(txn).as_tuple().exponent
        if isinstance(exponent, int) and -exponent > digits:
            digits = -exponent
    return digits


def _to_minor_units(amount: Decimal, digits: int) -> int:
    return int(amount.scaleb(digits))


def _from_minor_units(units: int, digits: int) -> Decimal:
    return Decimal(units).scaleb(-digits)


def balance_trend(transactions: Sequence[Transaction]) -> List[BalancePoint]:
    """
    Running balance, one point per distinct date, oldest first.

    Dates are compared as YYYY-MM-DD strings. Same-day transactions collapse
    into a single point. The running balance is accumulated in integer minor
    units and only converted back to Decimal per emitted point.

    Example:
        ```
        # +100 and -30 on 2024-01-01, -20 on 2024-01-02
        [BalancePoint("2024-01-01", 70), BalancePoint("2024-01-02", 50)]
        ```
    """
    if not transactions:
        return []

    digits = _minor_unit_digits(transactions)
    ordered = sorted(transactions, key=lambda t: t.date)

    daily_impact: Dict[str, int] = {}
    for txn in ordered:
        units = _to_minor_units(_amount(txn), digits)
        impact = units if txn.is_income else -units
        daily_impact[txn.date] = daily_impact.get(txn.date, 0) + impact

    points = []
    running = 0
    for day, impact in daily_impact.items():
        running += impact
        points.append(BalancePoint(date=day, balance=_from_minor_units(running, digits)))

    return points


def trend_is_positive(points: Sequence[BalancePoint]) -> bool:
    """True when the final cumulative balance is >= 0 (or there is no trend)"""
    if not points:
        return True
    return points[-1].balance >= 0


def top_expenses(
    transactions: Sequence[Transaction],
    n: int = DEFAULT_TOP_EXPENSES_N,
) -> List[Transaction]:
    """Largest N expenses, ties in input order"""
    return sorted(_expenses(transactions), key=_amount, reverse=True)[:n]


def category_ranking(transactions: Sequence[Transaction]) -> List[CategoryShare]:
    """
    Every expense category with its share of total expense.

    percent is 0 for every entry when total expense is 0.
    """
    expenses = _expenses(transactions)
    total_expense = sum((_amount(t) for t in expenses), Decimal("0"))
    totals = _totals_by_category(expenses)

    ranking = []
    for name, value in _sorted_by_value(totals):
        percent = float(value / total_expense * 100) if total_expense > 0 else 0.0
        ranking.append(CategoryShare(name=name, value=value, percent=percent))
    return ranking


def build_dashboard(
    transactions: Sequence[Transaction],
    top_n: int = DEFAULT_DISTRIBUTION_TOP_N,
    top_expenses_n: int = DEFAULT_TOP_EXPENSES_N,
) -> DashboardViews:
    """Compute all views from one snapshot of the collection"""
    snapshot = list(transactions)
    return DashboardViews(
        summaries=summarize(snapshot),
        category_distribution=category_distribution(snapshot, top_n),
        balance_trend=balance_trend(snapshot),
        top_expenses=top_expenses(snapshot, top_expenses_n),
        category_ranking=category_ranking(snapshot),
    )
