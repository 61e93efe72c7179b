"""
Table store construction and request-scoped access.
"""
import logging
from fastapi import Request

from expensebot.core.config import Settings, settings
from expensebot.db.base import TableStore
from expensebot.db.sheets import SheetsTableStore, load_service_account

logger = logging.getLogger(__name__)


def create_store(config: Settings = settings) -> TableStore:
    """
    Build the spreadsheet store from settings. The caller connects and closes it.

    A static SHEETS_ACCESS_TOKEN takes precedence; otherwise the service
    account key file in GOOGLE_APPLICATION_CREDENTIALS is loaded.
    """
    credentials = None
    if not config.SHEETS_ACCESS_TOKEN and config.GOOGLE_APPLICATION_CREDENTIALS:
        credentials = load_service_account(config.GOOGLE_APPLICATION_CREDENTIALS)
        logger.info(f"Using service account {credentials.service_account_email}")

    return SheetsTableStore(
        spreadsheet_id=config.GOOGLE_SHEET_ID,
        access_token=config.SHEETS_ACCESS_TOKEN,
        base_url=config.SHEETS_API_URL,
        timeout=config.SHEETS_TIMEOUT,
        credentials=credentials
    )


def get_store(request: Request) -> TableStore:
    """Dependency for getting the store handle owned by the application lifespan."""
    return request.app.state.store
