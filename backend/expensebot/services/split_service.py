"""
Split service: divide one expense evenly across participants.
"""
import asyncio
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from expensebot.core.dates import format_timestamp
from expensebot.core.exceptions import InsufficientParticipants, InvalidAmount, StoreUnavailable
from expensebot.core.utils import to_cents
from expensebot.models.expense import ExpenseRecord
from expensebot.services.expense_service import ExpenseRepository

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_CATEGORY = "Split"


def unique_participants(participants: Iterable[str]) -> List[str]:
    """Drop duplicate identifiers, keeping first-seen order."""
    return list(dict.fromkeys(p for p in participants if p))


def per_person_amount(total_amount: Decimal, participant_count: int) -> Decimal:
    """Unrounded share of each participant."""
    return Decimal(str(total_amount)) / participant_count


def allocate_split(
    total_amount: Decimal,
    description: str,
    participants: Iterable[str],
    timestamp: str,
    category: Optional[str] = None
) -> List[ExpenseRecord]:
    """
    Build one record per distinct participant.

    Each share is `total / n`, rounded to cents only for the persisted amount.
    """
    total_amount = Decimal(str(total_amount))
    if total_amount <= 0:
        raise InvalidAmount("Amount must be greater than 0.")

    users = unique_participants(participants)
    if len(users) < 2:
        raise InsufficientParticipants("You need at least 2 different users to split an expense.")

    share = to_cents(per_person_amount(total_amount, len(users)))
    split_description = f"{description} (Split {len(users)} ways)"
    return [
        ExpenseRecord(
            timestamp=timestamp,
            username=username,
            amount=share,
            category=category or DEFAULT_SPLIT_CATEGORY,
            description=split_description
        )
        for username in users
    ]


async def split_expense(
    repository: ExpenseRepository,
    total_amount: Decimal,
    description: str,
    participants: Iterable[str],
    category: Optional[str] = None,
    now: Optional[datetime] = None
) -> List[ExpenseRecord]:
    """
    Allocate and persist a split.

    All appends are issued concurrently and every one is awaited. Rows that
    were appended before a failure stay in the sheet.
    """
    timestamp = format_timestamp(now or datetime.now())
    records = allocate_split(total_amount, description, participants, timestamp, category)

    results = await asyncio.gather(
        *(repository.append(record) for record in records),
        return_exceptions=True
    )
    failures = [result for result in results if isinstance(result, BaseException)]
    if failures:
        persisted = len(records) - len(failures)
        logger.error(f"Split of {total_amount} persisted {persisted} of {len(records)} rows: {failures[0]}")
        raise StoreUnavailable(
            f"Split partially failed: {persisted} of {len(records)} rows were written"
        ) from failures[0]

    logger.info(f"Split {total_amount} between {len(records)} users")
    return records
