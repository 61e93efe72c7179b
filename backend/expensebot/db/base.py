"""
Table store interface.

The expense data lives in worksheets of a remote spreadsheet. Every read
returns the whole worksheet; filtering and aggregation happen in-process.
"""
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

Row = List[Any]


def column_letter(index: int) -> str:
    """1-based column index to A1 letters (1 -> A, 27 -> AA)."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def a1_range(worksheet: str, width: int, row: Optional[int] = None) -> str:
    """
    Build an A1 range covering `width` columns.

    Without `row` the range spans whole columns (`Sheet!A:E`), with it a
    single row (`Sheet!A3:E3`).
    """
    last = column_letter(width)
    if row is None:
        return f"{worksheet}!A:{last}"
    return f"{worksheet}!A{row}:{last}{row}"


class TableStore(ABC):
    """Key-range read/append/update service over named worksheets."""

    async def connect(self) -> None:
        """Acquire resources. The caller owns the lifecycle."""

    async def close(self) -> None:
        """Release resources."""

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @abstractmethod
    async def worksheet_exists(self, worksheet: str) -> bool:
        ...

    @abstractmethod
    async def create_worksheet(self, worksheet: str, header: Sequence[str]) -> None:
        """Add a worksheet and write its header row."""

    @abstractmethod
    async def read_rows(self, worksheet: str, width: int) -> List[Row]:
        """Return every row of the worksheet, header included."""

    @abstractmethod
    async def append_row(self, worksheet: str, row: Sequence[Any]) -> None:
        ...

    @abstractmethod
    async def update_row(self, worksheet: str, row_number: int, row: Sequence[Any]) -> None:
        """Overwrite the 1-based `row_number` in place."""

    async def ensure_worksheet(self, worksheet: str, header: Sequence[str]) -> bool:
        """Create the worksheet if missing. Returns True when it was created."""
        if await self.worksheet_exists(worksheet):
            return False
        await self.create_worksheet(worksheet, header)
        return True
