"""
Summary service: per-category and per-user totals over a period.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from expensebot.core.dates import Period, parse_period, period_start
from expensebot.models.expense import ExpenseRecord
from expensebot.services.expense_service import ExpenseFilter, ExpenseRepository

UNCATEGORIZED = "Uncategorized"


def _by_total(totals: Dict[str, Decimal]) -> List[Tuple[str, Decimal]]:
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


@dataclass
class SummaryResult:
    """Aggregation of one period. Derived on every query, never persisted."""
    period: Period
    start_date: datetime
    end_date: datetime
    total_amount: Decimal = Decimal(0)
    category_totals: Dict[str, Decimal] = field(default_factory=dict)
    user_totals: Dict[str, Decimal] = field(default_factory=dict)
    expense_count: int = 0

    def sorted_categories(self) -> List[Tuple[str, Decimal]]:
        """Category totals, largest first."""
        return _by_total(self.category_totals)

    def sorted_users(self) -> List[Tuple[str, Decimal]]:
        """User totals, largest first."""
        return _by_total(self.user_totals)


def summarize(records: Iterable[ExpenseRecord], period, now: Optional[datetime] = None) -> SummaryResult:
    """
    Reduce already-filtered records to a summary of the current period.

    The period bound is an additional condition on top of whatever filter
    produced `records`. Records whose timestamp cannot be parsed are outside
    every period.
    """
    period = parse_period(period)
    now = now or datetime.now()
    start = period_start(period, now)

    summary = SummaryResult(period=period, start_date=start, end_date=now)
    for record in records:
        occurred_at = record.occurred_at
        if occurred_at is None or occurred_at < start:
            continue

        category = record.category or UNCATEGORIZED
        summary.category_totals[category] = summary.category_totals.get(category, Decimal(0)) + record.amount
        summary.user_totals[record.username] = summary.user_totals.get(record.username, Decimal(0)) + record.amount
        summary.total_amount += record.amount
        summary.expense_count += 1

    return summary


async def get_summary(
    repository: ExpenseRepository,
    period,
    filters: Optional[ExpenseFilter] = None,
    now: Optional[datetime] = None
) -> SummaryResult:
    """Fetch, filter and summarize the current period."""
    period = parse_period(period)
    expenses = await repository.get_expenses(filters)
    return summarize(expenses, period, now)
