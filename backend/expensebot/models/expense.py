"""
Expense record mapped to one row of the expense worksheet.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Sequence

from expensebot.core.dates import parse_timestamp

# Fixed column layout of the expense worksheet
EXPENSE_HEADER = ["Timestamp", "Username", "Amount", "Category", "Description"]


def parse_amount(value: Any) -> Decimal:
    """
    Parse an amount cell.

    Raises ValueError for empty, non-numeric, non-finite or negative content
    instead of coercing it.
    """
    if value is None or isinstance(value, bool) or str(value).strip() == "":
        raise ValueError("missing amount")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"amount {value!r} is not a number")
    if not amount.is_finite():
        raise ValueError(f"amount {value!r} is not a number")
    if amount < 0:
        raise ValueError(f"amount {value!r} is negative")
    return amount


def _cell(row: Sequence[Any], index: int) -> str:
    # The Sheets API drops trailing empty cells
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


@dataclass(frozen=True)
class ExpenseRecord:
    """One persisted expense. Identity is the row position in the sheet."""
    timestamp: str
    username: str
    amount: Decimal
    category: str
    description: str = ""

    @property
    def occurred_at(self) -> Optional[datetime]:
        """Parsed timestamp, None when the cell is not a recognised date-time."""
        return parse_timestamp(self.timestamp)

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "ExpenseRecord":
        """Build a record from a worksheet row. Raises ValueError on a bad amount."""
        return cls(
            timestamp=_cell(row, 0),
            username=_cell(row, 1),
            amount=parse_amount(row[2] if len(row) > 2 else None),
            category=_cell(row, 3),
            description=_cell(row, 4)
        )

    def to_row(self) -> List[Any]:
        """Row values in worksheet column order. Amount is sent as a number."""
        return [
            self.timestamp,
            self.username,
            float(self.amount),
            self.category,
            self.description
        ]
