import pytest

from finance_dashboard.domain.enums import Severity
from finance_dashboard.domain.models import Insight
from finance_dashboard.insights.adapter import (
    InsightAdapter,
    InsightRecord,
    InvalidInsightError,
    parse_insight,
)

from tests.factories import expense


class RecordingGenerator:
    """Generator double that remembers what it was sent"""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else []
        self.error = error
        self.calls = []

    async def generate(self, records):
        self.calls.append(list(records))
        if self.error:
            raise self.error
        return self.response


def collection(size):
    return [expense(f"Merchant {i}", "10.00", "Shopping", date="2024-01-0%d" % (i % 9 + 1)) for i in range(size)]


@pytest.mark.unit
@pytest.mark.asyncio
class TestInsightAdapter:
    """Test the insight generator boundary"""

    async def test_small_collections_do_not_call_generator(self):
        generator = RecordingGenerator()
        adapter = InsightAdapter(generator)

        result = await adapter.fetch_insights(collection(5))

        assert result == []
        assert generator.calls == []

    async def test_sends_reduced_projection(self):
        generator = RecordingGenerator()
        adapter = InsightAdapter(generator)
        txns = collection(6)

        await adapter.fetch_insights(txns)

        sent = generator.calls[0]
        assert len(sent) == 6
        assert sent[0] == InsightRecord(
            date=txns[0].date,
            merchant=txns[0].merchant,
            amount=txns[0].amount,
            category=txns[0].category,
        )
        assert set(sent[0].to_dict()) == {"date", "merchant", "amount", "category"}

    async def test_parses_response(self):
        generator = RecordingGenerator(response=[
            {"title": "Duplicate charge", "message": "Netflix billed twice", "severity": "warning"},
            {"title": "Nice", "message": "Spending is down", "severity": "info"},
        ])
        adapter = InsightAdapter(generator)

        result = await adapter.fetch_insights(collection(6))

        assert [i.severity for i in result] == [Severity.WARNING, Severity.INFO]
        assert result[0].title == "Duplicate charge"
        assert result[0].id

    async def test_generator_failure_degrades_to_empty(self, caplog):
        adapter = InsightAdapter(RecordingGenerator(error=TimeoutError("model unavailable")))

        with caplog.at_level("WARNING"):
            result = await adapter.fetch_insights(collection(10))

        assert result == []
        assert "model unavailable" in caplog.text

    async def test_malformed_response_degrades_to_empty(self):
        adapter = InsightAdapter(RecordingGenerator(response=[
            {"title": "Ok", "message": "fine", "severity": "info"},
            {"title": "Bad", "message": "unknown level", "severity": "apocalyptic"},
        ]))

        assert await adapter.fetch_insights(collection(6)) == []

    async def test_none_response_is_empty(self):
        adapter = InsightAdapter(RecordingGenerator(response=None))
        adapter.generator.response = None

        assert await adapter.fetch_insights(collection(6)) == []

    async def test_custom_threshold(self):
        generator = RecordingGenerator()
        adapter = InsightAdapter(generator, threshold=1)

        await adapter.fetch_insights(collection(2))

        assert len(generator.calls) == 1


@pytest.mark.unit
class TestParseInsight:

    def test_insight_objects_pass_through(self):
        insight = Insight(id="1", title="t", message="m", severity=Severity.CRITICAL)

        assert parse_insight(insight) is insight

    def test_missing_field(self):
        with pytest.raises(InvalidInsightError):
            parse_insight({"title": "no message", "severity": "info"})

    def test_keeps_given_id(self):
        assert parse_insight({"id": "abc", "title": "t", "message": "m", "severity": "critical"}).id == "abc"
