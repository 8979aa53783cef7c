import sqlite3
from decimal import Decimal
from typing import List, Optional, Sequence

from finance_dashboard.categorization.categories import CategorySet
from finance_dashboard.database.connection import DatabaseManager
from finance_dashboard.domain.enums import TransactionSource, TransactionType
from finance_dashboard.domain.models import CategorizationRule, Transaction
from finance_dashboard.logging_setup import get_logger
from finance_dashboard.repositories.base import FinanceStore

logger = get_logger(__name__)

CATEGORIES_SAVED_KEY = "categories_saved"

INSERT_TRANSACTION = """
    INSERT INTO transactions (
        id, date, merchant, amount, category, sub_category,
        type, flagged, original_source, detected_currency
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class SQLiteStore(FinanceStore):
    """
    SQLite implementation of the finance store.

    Handles all database operations using raw SQL. Multi-row writes run
    inside one database transaction so a collection swap is all-or-nothing.
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        default_categories: Optional[Sequence[str]] = None,
        initialize: bool = True,
    ):
        self.db = db_manager
        self._default_categories = list(default_categories) if default_categories else None
        if initialize:
            self.db.initialize()

    # Transactions

    def get_all(self) -> List[Transaction]:
        conn = self.db.get_connection()
        rows = conn.execute("SELECT * FROM transactions ORDER BY position").fetchall()
        return [self._row_to_transaction(row) for row in rows]

    def add_many(self, transactions: Sequence[Transaction]) -> List[Transaction]:
        """Append transactions, skipping ids that are already stored"""
        added = []

        with self.db.transaction() as conn:
            for txn in transactions:
                exists = conn.execute(
                    "SELECT 1 FROM transactions WHERE id = ?", (txn.id,)
                ).fetchone()
                if exists:
                    logger.debug("Skipping duplicate transaction %s", txn.id)
                    continue

                conn.execute(INSERT_TRANSACTION, self._transaction_params(txn))
                added.append(txn)

        return added

    def replace_all(self, transactions: Sequence[Transaction]) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM transactions")
            conn.executemany(
                INSERT_TRANSACTION,
                [self._transaction_params(txn) for txn in transactions],
            )

    def count(self) -> int:
        conn = self.db.get_connection()
        return conn.execute("SELECT COUNT(*) FROM transactions").fetchone()[0]

    def clear(self) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM transactions")

    # Rules

    def get_rules(self) -> List[CategorizationRule]:
        conn = self.db.get_connection()
        rows = conn.execute("SELECT * FROM rules ORDER BY position").fetchall()
        return [
            CategorizationRule(
                id=row["id"],
                keyword=row["keyword"],
                category=row["category"],
                sub_category=row["sub_category"],
            )
            for row in rows
        ]

    def save_rules(self, rules: Sequence[CategorizationRule]) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM rules")
            conn.executemany(
                """
                INSERT INTO rules (id, position, keyword, category, sub_category)
                VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (rule.id, position, rule.keyword, rule.category, rule.sub_category)
                    for position, rule in enumerate(rules)
                ],
            )

    # Categories

    def get_categories(self) -> CategorySet:
        conn = self.db.get_connection()
        saved = conn.execute(
            "SELECT value FROM store_meta WHERE key = ?", (CATEGORIES_SAVED_KEY,)
        ).fetchone()
        if saved is None:
            return CategorySet(self._default_categories)

        rows = conn.execute("SELECT name FROM categories ORDER BY position").fetchall()
        return CategorySet(row["name"] for row in rows)

    def save_categories(self, categories: CategorySet) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM categories")
            conn.executemany(
                "INSERT INTO categories (name, position) VALUES (?, ?)",
                [(name, position) for position, name in enumerate(categories)],
            )
            conn.execute(
                "INSERT OR REPLACE INTO store_meta (key, value) VALUES (?, ?)",
                (CATEGORIES_SAVED_KEY, "1"),
            )

    def reset_categories(self) -> None:
        with self.db.transaction() as conn:
            conn.execute("DELETE FROM categories")
            conn.execute("DELETE FROM store_meta WHERE key = ?", (CATEGORIES_SAVED_KEY,))

    def _transaction_params(self, txn: Transaction) -> tuple:
        return (
            txn.id,
            txn.date,
            txn.merchant,
            str(txn.amount), # Store as string for precision
            txn.category,
            txn.sub_category,
            txn.type.value,
            None if txn.flagged is None else int(txn.flagged),
            txn.original_source.value if txn.original_source else None,
            txn.detected_currency,
        )

    def _row_to_transaction(self, row: sqlite3.Row) -> Transaction:
        """Convert database row to Transaction object."""
        return Transaction(
            id=row["id"],
            date=row["date"],
            merchant=row["merchant"],
            amount=Decimal(row["amount"]),
            category=row["category"],
            type=TransactionType(row["type"]),
            sub_category=row["sub_category"],
            flagged=None if row["flagged"] is None else bool(row["flagged"]),
            original_source=TransactionSource(row["original_source"]) if row["original_source"] else None,
            detected_currency=row["detected_currency"],
        )
