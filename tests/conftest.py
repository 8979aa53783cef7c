import pytest
from pathlib import Path

from finance_dashboard.repositories.memory import InMemoryStore

from tests.factories import expense, income

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_transactions():
    """A small month of activity"""
    return [
        income("Salary", "3200.00", date="2023-10-02"),
        expense("Coffee Shop", "5.50", "Food & Drink", date="2023-10-01"),
        expense("UBER TRIP", "24.00", "Transport", date="2023-10-03"),
        expense("Rent October", "1200.00", "Housing", date="2023-10-01"),
        expense("Grocery Mart", "84.20", "Food & Drink", date="2023-10-05"),
        expense("Netflix", "15.99", "Entertainment", date="2023-10-05"),
    ]


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR
