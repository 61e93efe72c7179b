"""
Expense service: row store adapter and filtering over expense records.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from expensebot.core.config import settings
from expensebot.core.dates import format_timestamp, to_local_naive
from expensebot.core.exceptions import InvalidAmount
from expensebot.db.base import TableStore
from expensebot.models.expense import EXPENSE_HEADER, ExpenseRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpenseFilter:
    """In-memory predicate. All present conditions are ANDed."""
    category: Optional[str] = None
    username: Optional[str] = None
    from_date: Optional[datetime] = None

    def __post_init__(self):
        if self.from_date is not None:
            object.__setattr__(self, "from_date", to_local_naive(self.from_date))

    def matches(self, record: ExpenseRecord) -> bool:
        if self.username and record.username.lower() != self.username.lower():
            return False
        if self.category and record.category.lower() != self.category.lower():
            return False
        if self.from_date is not None:
            occurred_at = record.occurred_at
            if occurred_at is None or occurred_at < self.from_date:
                return False
        return True


def filter_expenses(records: Iterable[ExpenseRecord], filters: Optional[ExpenseFilter] = None) -> List[ExpenseRecord]:
    """Apply a filter to records, keeping their order."""
    if filters is None:
        return list(records)
    return [record for record in records if filters.matches(record)]


def sort_recent(records: Iterable[ExpenseRecord]) -> List[ExpenseRecord]:
    """Newest first; records with unparseable timestamps go last."""
    return sorted(
        records,
        key=lambda r: (r.occurred_at is not None, r.occurred_at or datetime.min),
        reverse=True
    )


class ExpenseRepository:
    """Reads and appends expense rows in the expense worksheet."""

    def __init__(self, store: TableStore, worksheet: Optional[str] = None):
        self.store = store
        self.worksheet = worksheet or settings.EXPENSE_WORKSHEET

    async def fetch_all(self) -> List[ExpenseRecord]:
        """Read the whole worksheet. Rows with an invalid amount are skipped and logged."""
        rows = await self.store.read_rows(self.worksheet, len(EXPENSE_HEADER))
        records = []
        # Row 1 is the header
        for row_number, row in enumerate(rows[1:], start=2):
            if not any(str(cell).strip() for cell in row if cell is not None):
                continue
            try:
                records.append(ExpenseRecord.from_row(row))
            except ValueError as e:
                logger.warning(f"Skipping row {row_number} of '{self.worksheet}': {e}")
        return records

    async def get_expenses(self, filters: Optional[ExpenseFilter] = None) -> List[ExpenseRecord]:
        """Fetch all records and apply the filter in memory."""
        return filter_expenses(await self.fetch_all(), filters)

    async def append(self, record: ExpenseRecord) -> None:
        """Append one record. Not idempotent: a retried append may duplicate the row."""
        await self.store.append_row(self.worksheet, record.to_row())


def new_expense(
    username: str,
    amount: Decimal,
    category: str,
    description: str,
    now: Optional[datetime] = None
) -> ExpenseRecord:
    """Build a record stamped with the current local time."""
    amount = Decimal(str(amount))
    if amount <= 0:
        raise InvalidAmount("Amount must be greater than 0.")
    return ExpenseRecord(
        timestamp=format_timestamp(now or datetime.now()),
        username=username,
        amount=amount,
        category=category,
        description=description
    )


async def add_expense(
    repository: ExpenseRepository,
    username: str,
    amount: Decimal,
    category: str,
    description: str
) -> ExpenseRecord:
    """Record a new expense and return it."""
    record = new_expense(username, amount, category, description)
    await repository.append(record)
    logger.info(f"Recorded expense of {record.amount} in '{category}' for {username}")
    return record


async def list_recent_expenses(
    repository: ExpenseRepository,
    filters: Optional[ExpenseFilter] = None,
    limit: int = 10
) -> List[ExpenseRecord]:
    """Most recent matching expenses, newest first."""
    expenses = await repository.get_expenses(filters)
    return sort_recent(expenses)[:limit]
