"""
Expense management routes.
"""
import logging
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from typing import Optional
from datetime import datetime
from decimal import Decimal

from expensebot.api.dependencies import get_budget_repository, get_expense_repository
from expensebot.core.config import settings
from expensebot.schemas.budget import BudgetAlertResponse
from expensebot.schemas.expense import (
    ExpenseCreate, ExpenseCreateResponse, ExpenseListResponse, ExpenseResponse, SplitCreate, SplitResponse
)
from expensebot.services.budget_service import BudgetRepository, check_budget
from expensebot.services.expense_service import (
    ExpenseFilter, ExpenseRepository, add_expense, list_recent_expenses, sort_recent
)
from expensebot.services.export_service import export_filename, export_label, export_start, expenses_to_csv
from expensebot.services.split_service import split_expense

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.post("", response_model=ExpenseCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    expenses: ExpenseRepository = Depends(get_expense_repository),
    budgets: BudgetRepository = Depends(get_budget_repository)
):
    """Record a new expense and report any budget it pushes over."""
    record = await add_expense(
        expenses,
        username=expense_data.username,
        amount=expense_data.amount,
        category=expense_data.category,
        description=expense_data.description
    )

    alerts = []
    if settings.ENABLE_BUDGET_ALERTS:
        _, _, alerts = await check_budget(expenses, budgets, record.username)

    return ExpenseCreateResponse(
        expense=ExpenseResponse.model_validate(record),
        alerts=[BudgetAlertResponse.model_validate(alert) for alert in alerts]
    )


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    category: Optional[str] = None,
    username: Optional[str] = None,
    from_date: Optional[datetime] = None,
    limit: int = Query(10, ge=1, le=25),
    expenses: ExpenseRepository = Depends(get_expense_repository)
):
    """List recent expenses, newest first."""
    filters = ExpenseFilter(category=category, username=username, from_date=from_date)
    records = await list_recent_expenses(expenses, filters, limit)

    return ExpenseListResponse(
        expenses=[ExpenseResponse.model_validate(record) for record in records],
        total_amount=sum((record.amount for record in records), Decimal(0))
    )


@router.post("/split", response_model=SplitResponse, status_code=status.HTTP_201_CREATED)
async def create_split(
    split_data: SplitCreate,
    expenses: ExpenseRepository = Depends(get_expense_repository)
):
    """Split an expense evenly between users, one row per user."""
    records = await split_expense(
        expenses,
        total_amount=split_data.amount,
        description=split_data.description,
        participants=split_data.participants,
        category=split_data.category
    )

    return SplitResponse(
        total_amount=split_data.amount,
        per_person_amount=records[0].amount,
        participants=[record.username for record in records],
        expenses=[ExpenseResponse.model_validate(record) for record in records]
    )


@router.get("/export")
async def export_expenses(
    period: str = Query("all", pattern="^(all|week|month)$"),
    category: Optional[str] = None,
    username: Optional[str] = None,
    expenses: ExpenseRepository = Depends(get_expense_repository)
):
    """Export matching expenses as a CSV file."""
    filters = ExpenseFilter(category=category, username=username, from_date=export_start(period))
    records = sort_recent(await expenses.get_expenses(filters))
    logger.info(f"Exporting {len(records)} expenses ({export_label(period)})")

    return Response(
        content=expenses_to_csv(records),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(period)}"'}
    )
