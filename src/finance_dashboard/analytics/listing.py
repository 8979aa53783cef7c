"""Search and grouping for the transaction list view."""
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence

from finance_dashboard.domain.models import Transaction


def filter_transactions(
    transactions: Sequence[Transaction],
    query: str = "",
) -> List[Transaction]:
    """
    Transactions whose merchant, category or sub-category contains query
    (case-insensitive), newest first.
    """
    needle = query.lower()

    def _hit(txn: Transaction) -> bool:
        return (
            needle in txn.merchant.lower()
            or needle in txn.category.lower()
            or (txn.sub_category is not None and needle in txn.sub_category.lower())
        )

    return sorted(
        (t for t in transactions if _hit(t)),
        key=lambda t: t.date,
        reverse=True,
    )


def group_by_category(
    transactions: Sequence[Transaction],
    categories: Iterable[str],
) -> Dict[str, List[Transaction]]:
    """
    Group transactions by category.

    Groups follow the order of the category set; categories that are not
    in the set (renamed or removed ones) come last, alphabetically.
    """
    order = {name: index for index, name in enumerate(categories)}

    groups: Dict[str, List[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.category, []).append(txn)

    ranked = sorted(
        groups,
        key=lambda name: (name not in order, order.get(name, 0), name),
    )
    return {name: groups[name] for name in ranked}


def group_net_total(transactions: Iterable[Transaction]) -> Decimal:
    """Income minus expense within a group"""
    return sum((t.signed_amount for t in transactions), Decimal("0"))
