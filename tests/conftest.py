"""
Shared fixtures: every test gets a freshly built app with its own in-memory store.
"""
import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.expense_store import ExpenseStore
from utils.settings import Settings


@pytest.fixture
def settings():
    return Settings(rate_limit=None, seed_example_expenses=True)


@pytest.fixture
def store():
    return ExpenseStore.with_examples()


@pytest.fixture
def app(settings, store):
    return create_app(settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_payload():
    return {
        "amount": 42.5,
        "description": "Book",
        "category": "Leisure",
        "date": "2023-12-05",
    }
