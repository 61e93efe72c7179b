"""Models package - row mappings for the expense and budget worksheets."""
from expensebot.models.expense import ExpenseRecord, EXPENSE_HEADER
from expensebot.models.budget import Budget, BUDGET_HEADER

__all__ = [
    "ExpenseRecord",
    "EXPENSE_HEADER",
    "Budget",
    "BUDGET_HEADER",
]
