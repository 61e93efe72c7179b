"""
Budget service: per-user budget storage and overage evaluation.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from expensebot.core.config import settings
from expensebot.core.dates import Period
from expensebot.core.utils import format_currency
from expensebot.db.base import TableStore
from expensebot.models.budget import BUDGET_HEADER, Budget
from expensebot.services.expense_service import ExpenseFilter, ExpenseRepository
from expensebot.services.summary_service import SummaryResult, get_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetAlert:
    """Spending above a budget. `category` is None for the overall monthly budget."""
    category: Optional[str]
    limit: Decimal
    spent: Decimal

    @property
    def title(self) -> str:
        if self.category is None:
            return "⚠️ Budget Alert"
        return f"⚠️ {self.category} Budget Alert"

    @property
    def message(self) -> str:
        if self.category is None:
            return (
                f"You've exceeded your monthly budget of {format_currency(self.limit)}. "
                f"Current spending: {format_currency(self.spent)}."
            )
        return (
            f"You've exceeded your {self.category} budget of {format_currency(self.limit)}. "
            f"Current {self.category} spending: {format_currency(self.spent)}."
        )


def evaluate_budget(month_summary: SummaryResult, budget: Optional[Budget]) -> List[BudgetAlert]:
    """
    Compare a month summary with a budget.

    Alerts fire only on strictly greater spending. The overall alert comes
    first, then category alerts in the summary's category order. Categories
    missing on either side never alert.
    """
    if budget is None:
        return []

    alerts = []
    if month_summary.total_amount > budget.monthly_budget:
        alerts.append(BudgetAlert(None, budget.monthly_budget, month_summary.total_amount))

    for category, spent in month_summary.category_totals.items():
        limit = budget.categories.get(category)
        if limit is not None and spent > limit:
            alerts.append(BudgetAlert(category, limit, spent))

    return alerts


class BudgetRepository:
    """One budget row per user in the budget worksheet."""

    def __init__(self, store: TableStore, worksheet: Optional[str] = None):
        self.store = store
        self.worksheet = worksheet or settings.BUDGET_WORKSHEET

    async def _find(self, username: str) -> Tuple[Optional[int], Optional[list]]:
        """Return (1-based row number, row) for the user, or (None, None)."""
        rows = await self.store.read_rows(self.worksheet, len(BUDGET_HEADER))
        for row_number, row in enumerate(rows[1:], start=2):
            if row and row[0] and str(row[0]).lower() == username.lower():
                return row_number, row
        return None, None

    async def get(self, username: str) -> Optional[Budget]:
        """Budget for the user (case-insensitive), None when absent."""
        if not await self.store.worksheet_exists(self.worksheet):
            return None
        _, row = await self._find(username)
        if row is None:
            return None
        return Budget.from_row(row)

    async def set(self, budget: Budget) -> Budget:
        """
        Insert or update the user's budget row.

        Find-then-update is not atomic; two overlapping calls for the same
        user may both append.
        """
        if await self.store.ensure_worksheet(self.worksheet, BUDGET_HEADER):
            logger.info(f"Created budget worksheet '{self.worksheet}'")

        row_number, _ = await self._find(budget.username)
        if row_number is not None:
            await self.store.update_row(self.worksheet, row_number, budget.to_row())
            logger.info(f"Updated budget for {budget.username}")
        else:
            await self.store.append_row(self.worksheet, budget.to_row())
            logger.info(f"Added budget for {budget.username}")
        return budget


async def check_budget(
    expenses: ExpenseRepository,
    budgets: BudgetRepository,
    username: str,
    now: Optional[datetime] = None
) -> Tuple[Optional[Budget], SummaryResult, List[BudgetAlert]]:
    """Month-to-date summary for a user evaluated against their budget."""
    budget = await budgets.get(username)
    month_summary = await get_summary(expenses, Period.MONTH, ExpenseFilter(username=username), now)
    return budget, month_summary, evaluate_budget(month_summary, budget)
