"""
In-memory table store.

Reference implementation of the table store used by the test suite and for
running the API without a spreadsheet.
"""
import copy
from typing import Any, Dict, List, Sequence

from expensebot.core.exceptions import StoreUnavailable
from expensebot.db.base import Row, TableStore


class InMemoryTableStore(TableStore):
    """Worksheets held as lists of rows. Row 1 is the header."""

    def __init__(self, worksheets: Dict[str, List[Row]] = None):
        self.worksheets: Dict[str, List[Row]] = {
            name: [list(row) for row in rows] for name, rows in (worksheets or {}).items()
        }
        # Set to make every call raise StoreUnavailable
        self.fail_with: str = ""

    def _check(self) -> None:
        if self.fail_with:
            raise StoreUnavailable(self.fail_with)

    async def worksheet_exists(self, worksheet: str) -> bool:
        self._check()
        return worksheet in self.worksheets

    async def create_worksheet(self, worksheet: str, header: Sequence[str]) -> None:
        self._check()
        self.worksheets[worksheet] = [list(header)]

    async def read_rows(self, worksheet: str, width: int) -> List[Row]:
        self._check()
        if worksheet not in self.worksheets:
            raise StoreUnavailable(f"Unable to parse range: {worksheet}")
        return [list(row[:width]) for row in copy.deepcopy(self.worksheets[worksheet])]

    async def append_row(self, worksheet: str, row: Sequence[Any]) -> None:
        self._check()
        self.worksheets.setdefault(worksheet, []).append(list(row))

    async def update_row(self, worksheet: str, row_number: int, row: Sequence[Any]) -> None:
        self._check()
        rows = self.worksheets.setdefault(worksheet, [])
        while len(rows) < row_number:
            rows.append([])
        rows[row_number - 1] = list(row)
