"""
Expense summary routes.
"""
from fastapi import APIRouter, Depends
from typing import Optional

from expensebot.api.dependencies import get_expense_repository
from expensebot.schemas.summary import SummaryResponse, TotalItem
from expensebot.services.expense_service import ExpenseFilter, ExpenseRepository
from expensebot.services.summary_service import get_summary

router = APIRouter(prefix="/summary", tags=["summary"])


@router.get("/{period}", response_model=SummaryResponse)
async def get_period_summary(
    period: str,
    category: Optional[str] = None,
    username: Optional[str] = None,
    expenses: ExpenseRepository = Depends(get_expense_repository)
):
    """Totals for this week or this month, with category and user breakdowns."""
    result = await get_summary(expenses, period, ExpenseFilter(category=category, username=username))

    return SummaryResponse(
        period=result.period.value,
        start_date=result.start_date,
        end_date=result.end_date,
        total_amount=result.total_amount,
        expense_count=result.expense_count,
        categories=[TotalItem(name=name, total_amount=total) for name, total in result.sorted_categories()],
        users=[TotalItem(name=name, total_amount=total) for name, total in result.sorted_users()]
    )
