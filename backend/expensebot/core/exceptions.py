"""
Error kinds raised by the expense core.

None of these are retried or recovered inside the core; they propagate to the
route or interaction handler that invoked the operation.
"""


class ExpenseBotError(Exception):
    """Base class for all expense bot errors."""


class StoreUnavailable(ExpenseBotError):
    """The remote spreadsheet call failed (network, auth, quota)."""


class InvalidAmount(ExpenseBotError, ValueError):
    """An amount that must be positive was zero or negative."""


class InsufficientParticipants(ExpenseBotError, ValueError):
    """A split needs at least two distinct participants."""


class InvalidPeriod(ExpenseBotError, ValueError):
    """Period argument outside {week, month}."""


class MalformedBudgetRecord(ExpenseBotError):
    """A stored budget row could not be decoded."""
