"""
Categorization system for the finance dashboard.

Transactions are matched against an ordered list of user keyword rules
using a chain of responsibility; the first matching rule wins.

Quick Start:
    >>> from finance_dashboard.categorization import apply_rules
    >>>
    >>> categorized = apply_rules(transactions, rules)
"""
from finance_dashboard.categorization.base import MatchRule
from finance_dashboard.categorization.rules import KeywordRule, EmptyKeywordError
from finance_dashboard.categorization.engine import RuleEngine, match, build_rule_chain
from finance_dashboard.categorization.categorizer import Categorizer, apply_rules
from finance_dashboard.categorization.categories import (
    CategorySet,
    DEFAULT_CATEGORIES,
    UNCATEGORIZED,
)

__all__ = [
    "MatchRule",
    "KeywordRule",
    "EmptyKeywordError",
    "RuleEngine",
    "match",
    "build_rule_chain",
    "Categorizer",
    "apply_rules",
    "CategorySet",
    "DEFAULT_CATEGORIES",
    "UNCATEGORIZED",
]
