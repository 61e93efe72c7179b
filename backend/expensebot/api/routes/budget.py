"""
Budget management routes.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from expensebot.api.dependencies import get_budget_repository, get_expense_repository
from expensebot.models.budget import Budget
from expensebot.schemas.budget import BudgetAlertResponse, BudgetCreate, BudgetResponse, BudgetStatus
from expensebot.services.budget_service import BudgetRepository, check_budget
from expensebot.services.expense_service import ExpenseRepository

router = APIRouter(prefix="/budget", tags=["budget"])


@router.get("/{username}", response_model=BudgetResponse)
async def get_budget(
    username: str,
    budgets: BudgetRepository = Depends(get_budget_repository)
):
    """Get the budget of a user."""
    budget = await budgets.get(username)

    if not budget:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Budget not found"
        )

    return budget


@router.post("/{username}", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_or_update_budget(
    username: str,
    budget_data: BudgetCreate,
    budgets: BudgetRepository = Depends(get_budget_repository)
):
    """Set or replace the budget of a user."""
    budget = Budget(
        username=username,
        monthly_budget=budget_data.monthly_budget,
        categories=dict(budget_data.categories)
    )
    return await budgets.set(budget)


@router.get("/{username}/status", response_model=BudgetStatus)
async def get_budget_status(
    username: str,
    expenses: ExpenseRepository = Depends(get_expense_repository),
    budgets: BudgetRepository = Depends(get_budget_repository)
):
    """Month-to-date spending of a user compared with their budget."""
    budget, month_summary, alerts = await check_budget(expenses, budgets, username)

    return BudgetStatus(
        username=username,
        budget=BudgetResponse.model_validate(budget) if budget else None,
        total_spent=month_summary.total_amount,
        remaining=budget.monthly_budget - month_summary.total_amount if budget else None,
        category_totals=month_summary.category_totals,
        alerts=[BudgetAlertResponse.model_validate(alert) for alert in alerts]
    )
