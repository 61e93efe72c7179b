"""
Utility functions for the application.
"""
from typing import Any, Dict, Optional
from decimal import Decimal, ROUND_HALF_UP

from expensebot.core.config import settings

CENT = Decimal("0.01")


def to_cents(amount: Decimal) -> Decimal:
    """Round an amount to 2 decimal places (half-up)."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Any, currency: Optional[str] = None) -> str:
    """Format an amount with the configured currency symbol."""
    symbol = settings.DEFAULT_CURRENCY if currency is None else currency
    return f"{symbol}{to_cents(Decimal(str(amount)))}"


def truncate(text: Optional[str], max_length: int) -> str:
    """Truncate a string to max_length, ending with '...' when cut."""
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response
