"""
Route dependencies.
"""
from fastapi import Depends

from expensebot.db.base import TableStore
from expensebot.db.session import get_store
from expensebot.services.budget_service import BudgetRepository
from expensebot.services.command_service import CommandService
from expensebot.services.expense_service import ExpenseRepository


def get_expense_repository(store: TableStore = Depends(get_store)) -> ExpenseRepository:
    """Expense worksheet access bound to the application's store."""
    return ExpenseRepository(store)


def get_budget_repository(store: TableStore = Depends(get_store)) -> BudgetRepository:
    """Budget worksheet access bound to the application's store."""
    return BudgetRepository(store)


def get_command_service(
    expenses: ExpenseRepository = Depends(get_expense_repository),
    budgets: BudgetRepository = Depends(get_budget_repository)
) -> CommandService:
    return CommandService(expenses, budgets)
