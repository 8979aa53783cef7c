from typing import Optional, Sequence

from finance_dashboard.categorization.base import MatchRule
from finance_dashboard.categorization.rules import KeywordRule
from finance_dashboard.domain.models import CategorizationRule, CategoryMatch, Transaction
from finance_dashboard.logging_setup import get_logger

logger = get_logger(__name__)


def build_rule_chain(rules: Sequence[CategorizationRule]) -> Optional[MatchRule]:
    """
    Build a chain of keyword rules in list order.

    Rules with an empty keyword would match every merchant, so they are
    skipped and never take part in matching.

    Returns:
        Head of the chain, or None when no usable rule remains
    """
    head: Optional[MatchRule] = None
    tail: Optional[MatchRule] = None

    for rule in rules:
        if not rule.keyword:
            logger.warning("Ignoring rule %s with empty keyword", rule.id)
            continue

        link = KeywordRule(rule)
        if tail is None:
            head = link
        else:
            tail.set_next(link)
        tail = link

    return head


def match(
    transaction: Transaction,
    rules: Sequence[CategorizationRule],
) -> Optional[CategoryMatch]:
    """
    Select a category for one transaction.

    The first rule (in the given order) whose keyword is a case-insensitive
    substring of the merchant wins, regardless of keyword length.

    Example:
        ```
        >>> match(txn_uber_eats, [CategorizationRule("1", "uber", "Transport")])
        CategoryMatch(category='Transport', sub_category=None)
        ```
    """
    return RuleEngine(rules).match(transaction)


class RuleEngine:
    """
    Matches transactions against an ordered rule snapshot.

    The rule list is copied on construction, so later edits to the caller's
    list do not change what this engine matches.
    """

    def __init__(self, rules: Sequence[CategorizationRule]):
        self.rules = tuple(rules)
        self._rule_chain = build_rule_chain(self.rules)

    def match(self, transaction: Transaction) -> Optional[CategoryMatch]:
        if self._rule_chain is None:
            return None
        return self._rule_chain.match(transaction)

    def get_rule_chain_info(self) -> str:
        """
        Describe the active chain, one rule per line in priority order.

        Useful for debugging which rules are active.
        """
        if self._rule_chain is None:
            return "No rules loaded"

        lines = []
        current: Optional[MatchRule] = self._rule_chain
        priority = 1
        while current:
            lines.append(f"{priority}. {current}")
            current = current.next_rule
            priority += 1

        return "\n".join(lines)

    def __len__(self) -> int:
        count = 0
        current = self._rule_chain
        while current:
            count += 1
            current = current.next_rule
        return count

    def __repr__(self) -> str:
        return f"RuleEngine({len(self)} rules in chain)"
