"""
Pydantic schemas for period summaries.
"""
from pydantic import BaseModel
from typing import List
from datetime import datetime
from decimal import Decimal


class TotalItem(BaseModel):
    """Schema for one breakdown line."""
    name: str
    total_amount: Decimal


class SummaryResponse(BaseModel):
    """Schema for a week or month summary. Breakdowns are sorted by total, descending."""
    period: str
    start_date: datetime
    end_date: datetime
    total_amount: Decimal
    expense_count: int
    categories: List[TotalItem] = []
    users: List[TotalItem] = []
