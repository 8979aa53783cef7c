import pytest
from decimal import Decimal

from finance_dashboard.domain.enums import TransactionSource, TransactionType
from finance_dashboard.domain.models import CategorizationRule, Transaction

from tests.factories import expense, income


@pytest.mark.unit
class TestTransaction:

    def test_signed_amount(self):
        assert income("Salary", "100.00").signed_amount == Decimal("100.00")
        assert expense("Rent", "40.00").signed_amount == Decimal("-40.00")

    def test_to_dict_flattens_enums(self):
        txn = Transaction(
            id="t1",
            date="2024-01-01",
            merchant="Shop",
            amount=Decimal("9.90"),
            category="Shopping",
            type=TransactionType.EXPENSE,
            original_source=TransactionSource.SCAN,
        )

        data = txn.to_dict()

        assert data["amount"] == "9.90"
        assert data["type"] == TransactionType.EXPENSE.value
        assert data["original_source"] == TransactionSource.SCAN.value
        assert Transaction.from_dict(data) == txn

    def test_from_dict_accepts_numeric_amount(self):
        txn = Transaction.from_dict({
            "id": 7,
            "date": "2024-01-01",
            "merchant": "Shop",
            "amount": 12.5,
            "category": "Other",
            "type": TransactionType.INCOME.value,
        })

        assert txn.id == "7"
        assert txn.amount == Decimal("12.5")
        assert txn.original_source is None

    def test_is_immutable(self):
        txn = expense("Shop", "1.00")

        with pytest.raises(AttributeError):
            txn.category = "Food & Drink"


@pytest.mark.unit
class TestCategorizationRule:

    def test_from_dict_defaults_sub_category(self):
        rule = CategorizationRule.from_dict({"id": "r1", "keyword": "uber", "category": "Transport"})

        assert rule.sub_category is None
        assert rule.to_dict()["keyword"] == "uber"
