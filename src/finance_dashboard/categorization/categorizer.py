from dataclasses import replace
from typing import List, Sequence

from finance_dashboard.categorization.engine import RuleEngine
from finance_dashboard.domain.models import CategorizationRule, Transaction
from finance_dashboard.logging_setup import get_logger

logger = get_logger(__name__)


class Categorizer:
    """
    Applies a rule snapshot over a batch of transactions.

    Used at two call sites:
        - import time, over the freshly fetched batch only
        - retroactively, over the whole collection (the result replaces it)

    Usage:
        categorizer = Categorizer(rules)
        categorized = categorizer.apply(transactions)
    """

    def __init__(self, rules: Sequence[CategorizationRule]):
        self.engine = RuleEngine(rules)

    def apply(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        """
        Categorize a batch of transactions.

        On a match, category and sub_category are replaced together: a rule
        without a sub_category clears the existing one. Unmatched transactions
        pass through untouched and keep their current category.

        Returns:
            A new list, same length and order as the input
        """
        categorized = []
        changed = 0

        for txn in transactions:
            found = self.engine.match(txn)
            if found is None:
                categorized.append(txn)
                continue

            if (found.category, found.sub_category) != (txn.category, txn.sub_category):
                changed += 1
            categorized.append(
                replace(txn, category=found.category, sub_category=found.sub_category)
            )

        logger.debug(
            "Categorized %d transactions with %d rules (%d changed)",
            len(categorized), len(self.engine), changed,
        )
        return categorized


def apply_rules(
    transactions: Sequence[Transaction],
    rules: Sequence[CategorizationRule],
) -> List[Transaction]:
    """
    Re-categorize transactions with an ordered rule list.

    Idempotent: apply_rules(apply_rules(t, r), r) == apply_rules(t, r).
    """
    return Categorizer(rules).apply(transactions)
