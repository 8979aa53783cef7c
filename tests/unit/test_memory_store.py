import pytest

from finance_dashboard.categorization.categories import CategorySet, DEFAULT_CATEGORIES
from finance_dashboard.repositories.memory import InMemoryStore

from tests.factories import expense, rule


@pytest.mark.unit
class TestInMemoryStore:

    def test_reads_are_copies(self, store: InMemoryStore):
        store.add_many([expense("A", "1")])

        store.get_all().clear()

        assert store.count() == 1

    def test_duplicate_ids_skipped(self, store: InMemoryStore):
        txn = expense("A", "1")

        store.add_many([txn])
        added = store.add_many([txn])

        assert added == []
        assert store.count() == 1

    def test_rules_roundtrip_and_delete(self, store: InMemoryStore):
        store.save_rules([rule("a", "X"), rule("b", "Y")])

        assert store.delete_rule("rule-a")
        assert [r.keyword for r in store.get_rules()] == ["b"]

    def test_categories(self, store: InMemoryStore):
        assert store.get_categories().names == DEFAULT_CATEGORIES

        store.save_categories(CategorySet(["Mine"]))
        assert store.get_categories().names == ["Mine"]

        store.reset_categories()
        assert store.get_categories().names == DEFAULT_CATEGORIES

    def test_categories_are_copies(self, store: InMemoryStore):
        store.get_categories().add("Sneaky")

        assert "Sneaky" not in store.get_categories()
