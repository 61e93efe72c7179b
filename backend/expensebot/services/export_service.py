"""
CSV export of expense records.
"""
import csv
import io
from datetime import datetime
from typing import Iterable, Optional

from expensebot.core.dates import parse_period, period_start
from expensebot.models.expense import EXPENSE_HEADER, ExpenseRecord

ALL_TIME = "all"


def export_start(period: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """Lower date bound for an export period; None for all time."""
    if not period or period == ALL_TIME:
        return None
    return period_start(parse_period(period), now)


def export_label(period: Optional[str]) -> str:
    if not period or period == ALL_TIME:
        return "All Time"
    return parse_period(period).label


def export_filename(period: Optional[str], now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"expenses-{period or ALL_TIME}-{int(now.timestamp() * 1000)}.csv"


def expenses_to_csv(records: Iterable[ExpenseRecord]) -> str:
    """Serialize records with the worksheet header; text fields are quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(EXPENSE_HEADER)
    for record in records:
        writer.writerow([
            record.timestamp,
            record.username,
            float(record.amount),
            record.category,
            record.description
        ])
    return buffer.getvalue()
