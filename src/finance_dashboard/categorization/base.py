from abc import ABC, abstractmethod
from typing import Optional

from finance_dashboard.domain.models import CategoryMatch, Transaction

class MatchRule(ABC):
    """
    Abstract base class for all links of a categorization chain.

    Implements Chain of Responsibility:
    - Each rule tries to categorize a transaction
    - If it can't it passes to the next rule
    - Rules are tried in priority order

    Usage:
        ```
        first = KeywordRule(rule_a)
        first.set_next(KeywordRule(rule_b)).set_next(KeywordRule(rule_c))

        match = first.match(transaction)
        ```
    """

    def __init__(self):
        self._next_rule: Optional['MatchRule'] = None

    @property
    def next_rule(self) -> Optional['MatchRule']:
        return self._next_rule

    def set_next(self, rule: 'MatchRule') -> 'MatchRule':
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)
        """
        self._next_rule = rule
        return rule

    @abstractmethod
    def _matches(self, transaction: Transaction) -> bool:
        """
        Check if this rule matches the transaction.

        Args:
            transaction: Transaction to check

        Returns:
            True if this rule can categorize this transaction
        """
        pass

    @abstractmethod
    def _get_match(self, transaction: Transaction) -> CategoryMatch:
        """
        Get the category for the transaction.

        Called only if _matches() returns True.
        """
        pass

    def match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        """
        Walk the chain starting at this rule.

        Returns:
            The first match found, or None if no rule in the chain matched
        """
        current: Optional[MatchRule] = self
        while current is not None:
            if current._matches(transaction):
                return current._get_match(transaction)
            current = current._next_rule
        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
