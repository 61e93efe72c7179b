"""
Shared fixtures: an in-memory spreadsheet and an API client bound to it.
"""
import pytest
from fastapi.testclient import TestClient

from expensebot.core.config import settings
from expensebot.db.memory import InMemoryTableStore
from expensebot.db.session import get_store
from expensebot.main import app
from expensebot.models import EXPENSE_HEADER
from expensebot.services.budget_service import BudgetRepository
from expensebot.services.expense_service import ExpenseRepository


@pytest.fixture
def store():
    return InMemoryTableStore({settings.EXPENSE_WORKSHEET: [list(EXPENSE_HEADER)]})


@pytest.fixture
def expenses(store):
    return ExpenseRepository(store)


@pytest.fixture
def budgets(store):
    return BudgetRepository(store)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
