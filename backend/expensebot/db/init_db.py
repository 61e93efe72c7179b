"""
Worksheet initialization.

Run directly to create the expense worksheet and its header row:

    python -m expensebot.db.init_db
"""
import asyncio
import logging

from expensebot.core.config import settings
from expensebot.db.base import TableStore
from expensebot.db.session import create_store
from expensebot.models import EXPENSE_HEADER

logger = logging.getLogger(__name__)


async def init_db(store: TableStore) -> None:
    """Ensure the expense worksheet exists with the correct header row."""
    created = await store.ensure_worksheet(settings.EXPENSE_WORKSHEET, EXPENSE_HEADER)
    if created:
        logger.info(f"Created expense worksheet '{settings.EXPENSE_WORKSHEET}'")


async def _main() -> None:
    async with create_store() as store:
        await init_db(store)


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    print("Initializing worksheets...")
    asyncio.run(_main())
    print("Worksheets initialized successfully!")
