from typing import List, Optional, Sequence

from finance_dashboard.categorization.categories import CategorySet
from finance_dashboard.domain.models import CategorizationRule, Transaction
from finance_dashboard.repositories.base import FinanceStore


class InMemoryStore(FinanceStore):
    """
    Process-local store.

    Used by tests and dry runs; every read returns a copy so callers
    can never mutate the stored collection in place.
    """

    def __init__(
        self,
        transactions: Optional[Sequence[Transaction]] = None,
        rules: Optional[Sequence[CategorizationRule]] = None,
        categories: Optional[CategorySet] = None,
        default_categories: Optional[Sequence[str]] = None,
    ):
        self._transactions: List[Transaction] = list(transactions or [])
        self._rules: List[CategorizationRule] = list(rules or [])
        self._default_categories = list(default_categories) if default_categories else None
        self._categories: Optional[List[str]] = categories.names if categories is not None else None

    def get_all(self) -> List[Transaction]:
        return list(self._transactions)

    def add_many(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        known = {t.id for t in self._transactions}
        added = []
        for txn in transactions:
            if txn.id in known:
                continue
            known.add(txn.id)
            added.append(txn)
        self._transactions = self._transactions + added
        return added

    def replace_all(self, transactions: Sequence[Transaction]) -> None:
        self._transactions = list(transactions)

    def count(self) -> int:
        return len(self._transactions)

    def clear(self) -> None:
        self._transactions = []

    def get_rules(self) -> List[CategorizationRule]:
        return list(self._rules)

    def save_rules(self, rules: Sequence[CategorizationRule]) -> None:
        self._rules = list(rules)

    def get_categories(self) -> CategorySet:
        if self._categories is None:
            return CategorySet(self._default_categories)
        return CategorySet(self._categories)

    def save_categories(self, categories: CategorySet) -> None:
        self._categories = categories.names

    def reset_categories(self) -> None:
        self._categories = None
