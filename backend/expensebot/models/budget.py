"""
Budget model: one row per user in the budget worksheet.

The per-category budgets are stored as a JSON object inside a single text
cell; `encode_categories` / `decode_categories` are the only places that
serialize it.
"""
import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Sequence

from expensebot.core.exceptions import MalformedBudgetRecord

BUDGET_HEADER = ["Username", "MonthlyBudget", "CategoryBudgets"]


def _json_number(value: Any):
    """json.dumps default hook for Decimal values."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Type {type(value)} not serializable")


def encode_categories(categories: Dict[str, Decimal]) -> str:
    """Encode category budgets for the CategoryBudgets cell."""
    return json.dumps(categories or {}, default=_json_number)


def decode_categories(cell: Any) -> Dict[str, Decimal]:
    """Decode the CategoryBudgets cell. Empty cell means no category budgets."""
    if cell is None or str(cell).strip() == "":
        return {}
    try:
        decoded = json.loads(str(cell), parse_float=Decimal, parse_int=Decimal)
    except ValueError as e:
        raise MalformedBudgetRecord(f"CategoryBudgets is not valid JSON: {e}") from e
    if not isinstance(decoded, dict):
        raise MalformedBudgetRecord("CategoryBudgets must be a JSON object")
    categories = {}
    for category, value in decoded.items():
        if not isinstance(value, Decimal):
            raise MalformedBudgetRecord(f"Budget for category {category!r} is not a number")
        categories[category] = value
    return categories


@dataclass
class Budget:
    """Monthly spending ceiling for one user, optionally per category."""
    username: str
    monthly_budget: Decimal
    categories: Dict[str, Decimal] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Budget":
        raw_total = row[1] if len(row) > 1 else None
        try:
            monthly_budget = Decimal(str(raw_total).strip()) if raw_total not in (None, "") else Decimal(0)
        except InvalidOperation as e:
            raise MalformedBudgetRecord(f"MonthlyBudget {raw_total!r} is not a number") from e
        return cls(
            username=str(row[0]),
            monthly_budget=monthly_budget,
            categories=decode_categories(row[2] if len(row) > 2 else None)
        )

    def to_row(self) -> List[Any]:
        return [self.username, float(self.monthly_budget), encode_categories(self.categories)]
