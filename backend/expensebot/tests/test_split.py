"""
Tests for splitting an expense between users.
"""
import asyncio
import pytest
from datetime import datetime
from decimal import Decimal

from expensebot.core.config import settings
from expensebot.core.exceptions import InsufficientParticipants, InvalidAmount, StoreUnavailable
from expensebot.db.memory import InMemoryTableStore
from expensebot.services.expense_service import ExpenseRepository
from expensebot.services.split_service import allocate_split, per_person_amount, split_expense

TIMESTAMP = "2026-10-18 12:00:00"


def test_split_deduplicates_participants():
    records = allocate_split(Decimal(100), "Dinner", ["alice", "bob", "alice"], TIMESTAMP, "Food")

    assert [r.username for r in records] == ["alice", "bob"]
    assert all(r.amount == Decimal("50.00") for r in records)
    assert all(r.description == "Dinner (Split 2 ways)" for r in records)
    assert all(r.timestamp == TIMESTAMP and r.category == "Food" for r in records)


def test_split_rounds_persisted_share_only():
    records = allocate_split(Decimal(100), "Taxi", ["alice", "bob", "carol"], TIMESTAMP)

    assert per_person_amount(Decimal(100), 3) == Decimal(100) / 3
    assert [r.amount for r in records] == [Decimal("33.33")] * 3
    assert records[0].category == "Split"


def test_split_needs_two_distinct_participants():
    with pytest.raises(InsufficientParticipants):
        allocate_split(Decimal(100), "Solo", ["alice"], TIMESTAMP)
    with pytest.raises(InsufficientParticipants):
        allocate_split(Decimal(100), "Solo", ["alice", "alice"], TIMESTAMP)


@pytest.mark.parametrize("amount", [Decimal(0), Decimal(-5)])
def test_split_rejects_non_positive_amount(amount):
    with pytest.raises(InvalidAmount):
        allocate_split(amount, "Nothing", ["alice", "bob"], TIMESTAMP)


@pytest.mark.asyncio
async def test_split_expense_appends_one_row_per_user(store, expenses):
    records = await split_expense(
        expenses, Decimal("90"), "Groceries", ["alice", "bob", "carol"], now=datetime(2026, 10, 18, 12, 0)
    )

    rows = store.worksheets[settings.EXPENSE_WORKSHEET][1:]
    assert len(records) == 3
    assert sorted(row[1] for row in rows) == ["alice", "bob", "carol"]
    assert all(row[0] == TIMESTAMP and row[2] == 30.0 for row in rows)


class FlakyStore(InMemoryTableStore):
    """Fails the append for one user after yielding to the event loop."""

    def __init__(self, failing_user):
        super().__init__({settings.EXPENSE_WORKSHEET: []})
        self.failing_user = failing_user
        self.in_flight = 0
        self.max_in_flight = 0

    async def append_row(self, worksheet, row):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        if row[1] == self.failing_user:
            raise StoreUnavailable("rate limited")
        await super().append_row(worksheet, row)


@pytest.mark.asyncio
async def test_split_appends_run_concurrently():
    store = FlakyStore(failing_user=None)

    await split_expense(ExpenseRepository(store), Decimal(40), "Cab", ["a", "b", "c", "d"])

    assert store.max_in_flight == 4


@pytest.mark.asyncio
async def test_partial_split_is_not_rolled_back():
    store = FlakyStore(failing_user="bob")

    with pytest.raises(StoreUnavailable, match="2 of 3"):
        await split_expense(ExpenseRepository(store), Decimal(30), "Cab", ["alice", "bob", "carol"])

    persisted = [row[1] for row in store.worksheets[settings.EXPENSE_WORKSHEET]]
    assert sorted(persisted) == ["alice", "carol"]
