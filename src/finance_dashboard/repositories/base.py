from abc import ABC, abstractmethod
from typing import List, Sequence

from finance_dashboard.categorization.categories import CategorySet
from finance_dashboard.domain.models import CategorizationRule, Transaction


class TransactionRepository(ABC):
    """
    Abstract repository for the transaction collection.

    The collection is append-only apart from wholesale replacement after
    retroactive categorization; there is no per-field edit path.
    """

    @abstractmethod
    def get_all(self) -> List[Transaction]:
        """
        Snapshot of the whole collection, in insertion order.
        """
        pass

    @abstractmethod
    def add_many(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        """
        Append transactions in a single operation.

        Transactions whose id is already stored are skipped.

        Returns:
            The transactions that were actually added
        """
        pass

    @abstractmethod
    def replace_all(self, transactions: Sequence[Transaction]) -> None:
        """
        Atomically swap the whole collection for a new one.
        """
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class RuleRepository(ABC):
    """
    Abstract repository for the ordered categorization rule list.

    List order is rule priority and is preserved on save.
    """

    @abstractmethod
    def get_rules(self) -> List[CategorizationRule]:
        pass

    @abstractmethod
    def save_rules(self, rules: Sequence[CategorizationRule]) -> None:
        """Replace the stored rule list"""
        pass

    def add_rule(self, rule: CategorizationRule) -> None:
        """Append a rule at the lowest priority"""
        self.save_rules([*self.get_rules(), rule])

    def clear_rules(self) -> None:
        self.save_rules([])

    def delete_rule(self, rule_id: str) -> bool:
        """
        Remove a rule by id.

        Returns:
            True if deleted, False if not found
        """
        rules = self.get_rules()
        remaining = [r for r in rules if r.id != rule_id]
        if len(remaining) == len(rules):
            return False
        self.save_rules(remaining)
        return True


class CategoryRepository(ABC):
    """Abstract repository for the user's category set."""

    @abstractmethod
    def get_categories(self) -> CategorySet:
        """The saved category set, or the defaults if none was ever saved"""
        pass

    @abstractmethod
    def save_categories(self, categories: CategorySet) -> None:
        pass

    @abstractmethod
    def reset_categories(self) -> None:
        """Forget the saved set so the defaults apply again"""
        pass


class FinanceStore(TransactionRepository, RuleRepository, CategoryRepository):
    """One backend holding transactions, rules and categories together."""
    pass
