import uuid
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from finance_dashboard.analytics.aggregation import build_dashboard
from finance_dashboard.analytics.listing import filter_transactions, group_by_category
from finance_dashboard.analytics.models import DashboardViews
from finance_dashboard.categorization.categorizer import apply_rules
from finance_dashboard.categorization.categories import CategorySet
from finance_dashboard.config.settings import Settings
from finance_dashboard.domain.enums import TransactionSource
from finance_dashboard.domain.models import CategorizationRule, Insight, Transaction
from finance_dashboard.ingestion.analyzer import (
    DocumentAnalysisRequest,
    DocumentAnalysisResponse,
    DocumentAnalyzer,
    source_for_mime_type,
)
from finance_dashboard.ingestion.boundary import build_transactions
from finance_dashboard.insights.adapter import InsightAdapter, InsightGenerator
from finance_dashboard.logging_setup import get_logger
from finance_dashboard.parsers.base import StatementParseError
from finance_dashboard.parsers.factory import ParserFactory
from finance_dashboard.repositories.base import (
    CategoryRepository,
    RuleRepository,
    TransactionRepository,
)
from finance_dashboard.services.models import ANALYSIS_FAILED_MESSAGE, ImportResult

logger = get_logger(__name__)


class AnalysisInProgressError(RuntimeError):
    """Raised when a second analysis is started for a source that is still busy."""
    pass


class DashboardService:
    """
    Orchestrates imports, categorization and the dashboard views.

    Storage is injected: the engines underneath never touch it and work
    only on the snapshots handed to them. When a single store implements
    every repository interface, pass it once as `repository`.
    """

    def __init__(
        self,
        repository: TransactionRepository,
        rule_repository: Optional[RuleRepository] = None,
        category_repository: Optional[CategoryRepository] = None,
        analyzer: Optional[DocumentAnalyzer] = None,
        insight_adapter: Optional[InsightAdapter] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.rule_repository = rule_repository or self._as(repository, RuleRepository)
        self.category_repository = category_repository or self._as(repository, CategoryRepository)
        self.analyzer = analyzer
        self.insight_adapter = insight_adapter
        self.settings = settings or Settings()

        self._in_flight: Set[str] = set()
        self._insights: List[Insight] = []
        self._insights_count: Optional[int] = None

    @staticmethod
    def _as(repository, interface):
        if not isinstance(repository, interface):
            raise TypeError(f"{type(repository).__name__} does not implement {interface.__name__}")
        return repository

    # Imports

    def import_transactions(
        self,
        transactions: List[Transaction],
        source: str = "manual",
        dry_run: bool = False,
    ) -> ImportResult:
        """
        Categorize a new batch with the current rules and merge it.

        Only the new batch is categorized; the existing collection is left
        as it is.
        """
        rules = self.rule_repository.get_rules()
        categorized = apply_rules(transactions, rules)

        if dry_run:
            known = {t.id for t in self.repository.get_all()}
            imported = []
            for txn in categorized:
                if txn.id in known:
                    continue
                known.add(txn.id)
                imported.append(txn)
        else:
            imported = self.repository.add_many(categorized)

        pending = Counter(t.id for t in imported)
        duplicates = []
        for txn in categorized:
            if pending[txn.id]:
                pending[txn.id] -= 1
            else:
                duplicates.append(txn)

        return ImportResult(
            source=source,
            total_parsed=len(transactions),
            imported=imported,
            duplicates=duplicates,
            dry_run=dry_run,
        )

    def import_response(
        self,
        response: DocumentAnalysisResponse,
        source: Optional[TransactionSource] = None,
        source_name: str = "default",
        dry_run: bool = False,
    ) -> ImportResult:
        """Validate analyzer output at the ingestion boundary, then import it"""
        ingestion = build_transactions(
            response,
            self.category_repository.get_categories(),
            source=source,
        )
        result = self.import_transactions(ingestion.transactions, source=source_name, dry_run=dry_run)
        result.total_parsed = len(response.transactions)
        result.rejected = ingestion.rejected
        result.detected_currency = response.detected_currency_code
        return result

    async def import_document(
        self,
        content: Union[bytes, str],
        mime_type: str,
        source_name: str = "default",
    ) -> ImportResult:
        """
        Send a document to the analyzer and import what it finds.

        Only one analysis per source may be in flight. A failing analyzer
        yields an ImportResult carrying ANALYSIS_FAILED_MESSAGE and commits
        nothing.

        Raises:
            AnalysisInProgressError: If an analysis for source_name is still running
        """
        if self.analyzer is None:
            raise RuntimeError("No document analyzer configured")

        if source_name in self._in_flight:
            raise AnalysisInProgressError(f"An analysis for '{source_name}' is already running")

        self._in_flight.add(source_name)
        try:
            request = DocumentAnalysisRequest(
                content=content,
                mime_type=mime_type,
                known_categories=self.category_repository.get_categories().names,
                source_name=source_name,
            )
            try:
                response = await self.analyzer.analyze(request)
            except Exception as e:
                logger.error("Document analysis for %s failed: %s", source_name, e)
                return ImportResult(source=source_name, error=ANALYSIS_FAILED_MESSAGE)

            return self.import_response(
                response,
                source=source_for_mime_type(mime_type),
                source_name=source_name,
            )
        finally:
            self._in_flight.discard(source_name)

    def import_statement(
        self,
        filepath: Path,
        fmt: Optional[str] = None,
        dry_run: bool = False,
    ) -> ImportResult:
        """
        Import a local statement file.

        A file the parser cannot read yields an ImportResult carrying the
        parse error; nothing is committed.

        Args:
            filepath: The path to the statement file
            fmt: Parser format; defaults to the file extension
            dry_run: Preview without saving
        """
        filepath = Path(filepath)
        parser = ParserFactory.create_parser(fmt or filepath.suffix)
        try:
            response = parser.parse(filepath)
        except StatementParseError as e:
            logger.error("Could not parse %s: %s", filepath, e)
            return ImportResult(source=str(filepath), error=str(e), dry_run=dry_run)

        return self.import_response(
            response,
            source=parser.source,
            source_name=str(filepath),
            dry_run=dry_run,
        )

    # Categorization

    def apply_rules_retroactively(self) -> int:
        """
        Re-categorize the entire collection with the current rules.

        The result replaces the stored collection in one swap.

        Returns:
            Number of transactions whose category changed
        """
        transactions = self.repository.get_all()
        rules = self.rule_repository.get_rules()
        if not transactions:
            return 0

        updated = apply_rules(transactions, rules)
        changed = sum(
            1 for before, after in zip(transactions, updated)
            if (before.category, before.sub_category) != (after.category, after.sub_category)
        )

        self.repository.replace_all(updated)
        logger.info("Re-applied %d rules, %d transactions changed", len(rules), changed)
        return changed

    def get_rules(self) -> List[CategorizationRule]:
        return self.rule_repository.get_rules()

    def add_rule(
        self,
        keyword: str,
        category: str,
        sub_category: Optional[str] = None,
    ) -> CategorizationRule:
        """
        Append a rule at the lowest priority.

        Raises:
            ValueError: If the keyword is empty
        """
        keyword = keyword.strip()
        if not keyword:
            raise ValueError("Rule keyword must not be empty")

        rule = CategorizationRule(
            id=str(uuid.uuid4()),
            keyword=keyword,
            category=category,
            sub_category=(sub_category or "").strip() or None,
        )
        self.rule_repository.add_rule(rule)
        return rule

    def delete_rule(self, rule_id: str) -> bool:
        return self.rule_repository.delete_rule(rule_id)

    # Categories

    def get_categories(self) -> CategorySet:
        return self.category_repository.get_categories()

    def add_category(self, name: str) -> bool:
        categories = self.category_repository.get_categories()
        if not categories.add(name):
            return False
        self.category_repository.save_categories(categories)
        return True

    def rename_category(self, old: str, new: str) -> bool:
        """Rename in the set only; stored transactions keep the old label"""
        categories = self.category_repository.get_categories()
        if not categories.rename(old, new):
            return False
        self.category_repository.save_categories(categories)
        return True

    def remove_category(self, name: str) -> bool:
        categories = self.category_repository.get_categories()
        if not categories.remove(name):
            return False
        self.category_repository.save_categories(categories)
        return True

    # Views

    def get_transactions(self, query: str = "") -> List[Transaction]:
        """Search the collection, newest first"""
        return filter_transactions(self.repository.get_all(), query)

    def get_grouped_transactions(self, query: str = "") -> Dict[str, List[Transaction]]:
        return group_by_category(self.get_transactions(query), self.get_categories())

    def get_dashboard(self) -> DashboardViews:
        return build_dashboard(
            self.repository.get_all(),
            top_n=self.settings.distribution_top_n,
            top_expenses_n=self.settings.top_expenses_n,
        )

    def use_insight_generator(self, generator: InsightGenerator) -> InsightAdapter:
        """Wrap a generator in an adapter using the configured threshold"""
        self.insight_adapter = InsightAdapter(generator, threshold=self.settings.insight_threshold)
        self._insights_count = None
        return self.insight_adapter

    @property
    def insights(self) -> List[Insight]:
        return list(self._insights)

    async def refresh_insights(self, force: bool = False) -> List[Insight]:
        """
        Regenerate insights when the number of stored transactions changed.

        Call after an import has committed. Never raises on generator
        failure: the adapter degrades to an empty list.
        """
        if self.insight_adapter is None:
            return []

        transactions = self.repository.get_all()
        if not force and len(transactions) == self._insights_count:
            return self.insights

        self._insights_count = len(transactions)
        self._insights = await self.insight_adapter.fetch_insights(transactions)
        return self.insights

    def clear_data(self) -> None:
        """Drop transactions and rules, and restore the default categories"""
        self.repository.clear()
        self.rule_repository.clear_rules()
        self.category_repository.reset_categories()
        self._insights = []
        self._insights_count = None
