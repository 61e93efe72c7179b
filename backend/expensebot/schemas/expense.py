"""
Pydantic schemas for expense records and splits.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal

from expensebot.schemas.budget import BudgetAlertResponse


class ExpenseBase(BaseModel):
    """Base expense schema."""
    username: str
    amount: Decimal
    category: str
    description: str = ""


class ExpenseCreate(BaseModel):
    """Schema for expense creation."""
    username: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    category: str = Field(min_length=1)
    description: str = ""


class ExpenseResponse(ExpenseBase):
    """Schema for a stored expense row."""
    timestamp: str

    class Config:
        from_attributes = True


class ExpenseCreateResponse(BaseModel):
    """Schema for the result of adding an expense."""
    expense: ExpenseResponse
    alerts: List[BudgetAlertResponse] = []  # Budget overages after this expense


class ExpenseListResponse(BaseModel):
    """Schema for a list of recent expenses."""
    expenses: List[ExpenseResponse]
    total_amount: Decimal  # Sum of the listed expenses


class SplitCreate(BaseModel):
    """Schema for splitting an expense between users."""
    amount: Decimal = Field(gt=0)  # Total amount before splitting
    description: str = Field(min_length=1)
    participants: List[str]  # Usernames; duplicates are ignored
    category: Optional[str] = None  # Defaults to "Split"


class SplitResponse(BaseModel):
    """Schema for split result."""
    total_amount: Decimal
    per_person_amount: Decimal  # Rounded to cents
    participants: List[str]
    expenses: List[ExpenseResponse]
