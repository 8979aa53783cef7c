"""Rule-based transaction categorization and cash-flow analytics."""

__version__ = "0.1.0"
