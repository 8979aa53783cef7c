import asyncio
import pytest
from decimal import Decimal

from finance_dashboard.categorization.categories import UNCATEGORIZED
from finance_dashboard.domain.enums import TransactionSource
from finance_dashboard.ingestion.analyzer import (
    AnalysisFailedError,
    AnalyzedTransaction,
    DocumentAnalysisResponse,
)
from finance_dashboard.insights.adapter import InsightAdapter
from finance_dashboard.repositories.memory import InMemoryStore
from finance_dashboard.services.dashboard_service import AnalysisInProgressError, DashboardService
from finance_dashboard.services.models import ANALYSIS_FAILED_MESSAGE

from tests.factories import expense, income, rule


def analyzed(merchant, amount, type="EXPENSE", category="Other", date="2024-01-01"):
    return AnalyzedTransaction(merchant=merchant, date=date, amount=amount, category=category, type=type)


class FakeAnalyzer:
    """Analyzer double; optionally blocks until released"""

    def __init__(self, response=None, error=None):
        self.response = response or DocumentAnalysisResponse()
        self.error = error
        self.requests = []
        self.release = None

    async def analyze(self, request):
        self.requests.append(request)
        if self.release is not None:
            await self.release.wait()
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def service(store: InMemoryStore) -> DashboardService:
    return DashboardService(store)


@pytest.mark.unit
class TestImportTransactions:
    """Import-time categorization"""

    def test_rules_applied_to_new_batch_only(self, store: InMemoryStore, service: DashboardService):
        # Arrange
        existing = expense("UBER OLD", "5.00", "Other")
        store.add_many([existing])
        store.save_rules([rule("uber", "Transport")])

        # Act
        result = service.import_transactions([expense("UBER NEW", "7.00", "Other")])

        # Assert
        categories = {t.merchant: t.category for t in store.get_all()}
        assert categories == {"UBER OLD": "Other", "UBER NEW": "Transport"}
        assert result.new_transactions == 1

    def test_dry_run_does_not_save(self, store: InMemoryStore, service: DashboardService):
        result = service.import_transactions([expense("A", "1")], dry_run=True)

        assert result.new_transactions == 1
        assert store.count() == 0

    def test_duplicates_reported(self, store: InMemoryStore, service: DashboardService):
        txn = expense("A", "1")
        store.add_many([txn])

        result = service.import_transactions([txn])

        assert result.duplicates_skipped == 1
        assert result.new_transactions == 0

    @pytest.mark.parametrize("dry_run", [True, False])
    def test_ids_repeated_within_batch_count_once(self, store: InMemoryStore, service: DashboardService, dry_run):
        store.add_many([expense("Stored", "1", id="dup-stored")])
        batch = [
            expense("A", "1", id="dup-a"),
            expense("A again", "1", id="dup-a"),
            expense("Stored", "1", id="dup-stored"),
        ]

        result = service.import_transactions(batch, dry_run=dry_run)

        assert result.new_transactions == 1
        assert result.duplicates_skipped == 2

    def test_import_response_validates_and_normalizes(self, store: InMemoryStore, service: DashboardService):
        store.save_rules([rule("uber", "Transport", "Rides")])
        response = DocumentAnalysisResponse(
            transactions=[
                analyzed("Uber", 24),
                analyzed("Gadget Store", 99.99, category="Gadgets"),
                analyzed("Broken", -3),
            ],
            detected_currency_code="NGN",
        )

        result = service.import_response(response, source=TransactionSource.SCAN)

        stored = {t.merchant: t for t in store.get_all()}
        assert stored["Uber"].category == "Transport"
        assert stored["Uber"].sub_category == "Rides"
        assert stored["Gadget Store"].category == UNCATEGORIZED
        assert "Broken" not in stored
        assert result.total_parsed == 3
        assert len(result.rejected) == 1
        assert result.partial_success
        assert result.detected_currency == "NGN"


@pytest.mark.unit
@pytest.mark.asyncio
class TestImportDocument:
    """Document analyzer call site"""

    async def test_passes_known_categories(self, store: InMemoryStore):
        analyzer = FakeAnalyzer(DocumentAnalysisResponse([analyzed("Shop", 10)]))
        service = DashboardService(store, analyzer=analyzer)

        result = await service.import_document("csv text", "text/csv")

        assert result.success
        assert analyzer.requests[0].known_categories == store.get_categories().names
        assert store.get_all()[0].original_source == TransactionSource.CSV

    @pytest.mark.parametrize("error", [AnalysisFailedError("unreadable"), RuntimeError("LLM down")])
    async def test_failure_commits_nothing(self, store: InMemoryStore, error):
        service = DashboardService(store, analyzer=FakeAnalyzer(error=error))

        result = await service.import_document(b"%PDF", "application/pdf")

        assert not result.success
        assert result.error == ANALYSIS_FAILED_MESSAGE
        assert store.count() == 0

    async def test_second_analysis_for_same_source_is_refused(self, store: InMemoryStore):
        analyzer = FakeAnalyzer(DocumentAnalysisResponse([analyzed("Shop", 10)]))
        analyzer.release = asyncio.Event()
        service = DashboardService(store, analyzer=analyzer)

        first = asyncio.ensure_future(service.import_document("a", "text/csv", source_name="upload"))
        await asyncio.sleep(0)

        with pytest.raises(AnalysisInProgressError):
            await service.import_document("b", "text/csv", source_name="upload")

        analyzer.release.set()
        result = await first
        assert result.new_transactions == 1

        # The lock is released once the first call finishes
        again = await service.import_document("c", "text/csv", source_name="upload")
        assert again.success

    async def test_different_sources_may_run_together(self, store: InMemoryStore):
        analyzer = FakeAnalyzer(DocumentAnalysisResponse([analyzed("Shop", 10)]))
        service = DashboardService(store, analyzer=analyzer)

        results = await asyncio.gather(
            service.import_document("a", "text/csv", source_name="one"),
            service.import_document("b", "text/csv", source_name="two"),
        )

        assert all(r.success for r in results)
        assert store.count() == 2

    async def test_requires_analyzer(self, service: DashboardService):
        with pytest.raises(RuntimeError):
            await service.import_document("a", "text/csv")


@pytest.mark.unit
class TestRetroactiveRules:

    def test_whole_collection_is_recategorized(self, store: InMemoryStore, service: DashboardService):
        store.add_many([
            expense("UBER", "5", "Other", sub_category="Misc"),
            expense("Bakery", "3", "Food & Drink"),
        ])
        store.save_rules([rule("uber", "Transport")])

        changed = service.apply_rules_retroactively()

        by_merchant = {t.merchant: t for t in store.get_all()}
        assert changed == 1
        assert by_merchant["UBER"].category == "Transport"
        assert by_merchant["UBER"].sub_category is None
        assert by_merchant["Bakery"].category == "Food & Drink"

    def test_reapplying_changes_nothing(self, store: InMemoryStore, service: DashboardService):
        store.add_many([expense("UBER", "5", "Other")])
        store.save_rules([rule("uber", "Transport")])

        service.apply_rules_retroactively()

        assert service.apply_rules_retroactively() == 0

    def test_uses_replace_all(self, mocker):
        repository = mocker.Mock()
        repository.get_all.return_value = [expense("UBER", "5", "Other")]
        repository.get_rules.return_value = [rule("uber", "Transport")]
        service = DashboardService(repository, rule_repository=repository, category_repository=repository)

        service.apply_rules_retroactively()

        replaced = repository.replace_all.call_args.args[0]
        assert replaced[0].category == "Transport"

    def test_empty_collection(self, service: DashboardService):
        assert service.apply_rules_retroactively() == 0


@pytest.mark.unit
class TestRulesAndCategories:

    def test_add_rule_rejects_blank_keyword(self, service: DashboardService):
        with pytest.raises(ValueError):
            service.add_rule("   ", "Transport")

    def test_add_rule_appends(self, service: DashboardService):
        service.add_rule("uber", "Transport")
        service.add_rule("rent", "Housing", "Monthly")

        rules = service.get_rules()
        assert [r.keyword for r in rules] == ["uber", "rent"]
        assert rules[1].sub_category == "Monthly"

    def test_delete_rule(self, service: DashboardService):
        created = service.add_rule("uber", "Transport")

        assert service.delete_rule(created.id)
        assert service.get_rules() == []

    def test_rename_does_not_rewrite_transactions(self, store: InMemoryStore, service: DashboardService):
        store.add_many([expense("Bus", "2", "Transport")])

        assert service.rename_category("Transport", "Travel")

        assert "Travel" in service.get_categories()
        assert store.get_all()[0].category == "Transport"

    def test_add_and_remove_category(self, service: DashboardService):
        assert service.add_category("Pets")
        assert not service.add_category("Pets")
        assert service.remove_category("Pets")
        assert not service.remove_category("Pets")

    def test_requires_rule_repository(self, mocker):
        with pytest.raises(TypeError):
            DashboardService(mocker.Mock(spec=[]))


@pytest.mark.unit
class TestViews:

    def test_dashboard_uses_settings(self, store: InMemoryStore, sample_transactions):
        from finance_dashboard.config.settings import Settings
        store.add_many(sample_transactions)
        service = DashboardService(store, settings=Settings(distribution_top_n=2, top_expenses_n=1))

        views = service.get_dashboard()

        assert len(views.category_distribution) == 2
        assert len(views.top_expenses) == 1
        assert views.summaries.net_flow == Decimal("1870.31")

    def test_grouped_transactions(self, store: InMemoryStore, service: DashboardService, sample_transactions):
        store.add_many(sample_transactions)

        groups = service.get_grouped_transactions()

        assert list(groups)[:2] == ["Food & Drink", "Transport"]

    def test_clear_data(self, store: InMemoryStore, service: DashboardService):
        store.add_many([expense("A", "1")])
        service.add_rule("a", "Other")
        service.add_category("Pets")

        service.clear_data()

        assert store.count() == 0
        assert service.get_rules() == []
        assert "Pets" not in service.get_categories()


@pytest.mark.unit
@pytest.mark.asyncio
class TestRefreshInsights:

    async def test_only_regenerates_when_count_changes(self, store: InMemoryStore, mocker):
        adapter = mocker.Mock(spec=InsightAdapter)
        adapter.fetch_insights = mocker.AsyncMock(return_value=[])
        service = DashboardService(store, insight_adapter=adapter)
        store.add_many([income(f"I{i}", "1") for i in range(6)])

        await service.refresh_insights()
        await service.refresh_insights()
        service.import_transactions([expense("New", "1")])
        await service.refresh_insights()

        assert adapter.fetch_insights.await_count == 2

    async def test_without_adapter(self, service: DashboardService):
        assert await service.refresh_insights() == []

    async def test_generator_uses_configured_threshold(self, store: InMemoryStore):
        from finance_dashboard.config.settings import Settings

        class CountingGenerator:
            calls = 0

            async def generate(self, records):
                CountingGenerator.calls += 1
                return [{"title": "Busy month", "message": "Lots of spending", "severity": "info"}]

        service = DashboardService(store, settings=Settings(insight_threshold=1))
        adapter = service.use_insight_generator(CountingGenerator())
        store.add_many([expense("A", "1"), expense("B", "2")])

        insights = await service.refresh_insights()

        assert adapter.threshold == 1
        assert CountingGenerator.calls == 1
        assert insights[0].title == "Busy month"
