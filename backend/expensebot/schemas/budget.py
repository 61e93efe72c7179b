"""
Pydantic schemas for Budget entity.
"""
from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Optional
from decimal import Decimal


class BudgetBase(BaseModel):
    """Base budget schema."""
    monthly_budget: Decimal = Field(ge=0)
    categories: Dict[str, Annotated[Decimal, Field(ge=0)]] = {}  # Category -> monthly budget


class BudgetCreate(BudgetBase):
    """Schema for budget creation or replacement."""
    pass


class BudgetResponse(BudgetBase):
    """Schema for budget response."""
    username: str

    class Config:
        from_attributes = True


class BudgetAlertResponse(BaseModel):
    """Schema for a budget overage."""
    category: Optional[str] = None  # None for the overall monthly budget
    limit: Decimal
    spent: Decimal
    message: str

    class Config:
        from_attributes = True


class BudgetStatus(BaseModel):
    """Schema for month-to-date spending against the budget."""
    username: str
    budget: Optional[BudgetResponse] = None
    total_spent: Decimal
    remaining: Optional[Decimal] = None  # None without a budget
    category_totals: Dict[str, Decimal] = {}
    alerts: List[BudgetAlertResponse] = []
