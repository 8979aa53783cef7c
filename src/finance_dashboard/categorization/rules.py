from finance_dashboard.categorization.base import MatchRule
from finance_dashboard.domain.models import CategorizationRule, CategoryMatch, Transaction


class EmptyKeywordError(ValueError):
    """Raised when a rule without a keyword is turned into a chain link."""
    pass


class KeywordRule(MatchRule):
    """
    Chain link for a single user-defined categorization rule.

    Matches when the rule keyword appears anywhere in the merchant name,
    compared case-insensitively. The keyword is used exactly as stored:
    no trimming or tokenization.

    Example:
        ```
        # "uber" -> "Transport" matches "UBER EATS"
        rule = KeywordRule(CategorizationRule("1", "uber", "Transport"))
        ```
    """

    def __init__(self, rule: CategorizationRule):
        super().__init__()
        if not rule.keyword:
            raise EmptyKeywordError(f"Rule {rule.id!r} has an empty keyword")
        self.rule = rule
        self._keyword = rule.keyword.lower()

    def _matches(self, transaction: Transaction) -> bool:
        return self._keyword in transaction.merchant.lower()

    def _get_match(self, transaction: Transaction) -> CategoryMatch:
        return CategoryMatch(
            category=self.rule.category,
            sub_category=self.rule.sub_category,
        )

    def __repr__(self):
        return f"KeywordRule({self.rule.keyword!r} -> {self.rule.category!r})"
