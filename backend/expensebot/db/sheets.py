"""
Google Sheets REST (v4) implementation of the table store.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx
from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from expensebot.core.exceptions import StoreUnavailable
from expensebot.db.base import Row, TableStore, a1_range

logger = logging.getLogger(__name__)

SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def load_service_account(path: str) -> Credentials:
    """Load service account credentials scoped to the Sheets API."""
    return service_account.Credentials.from_service_account_file(path, scopes=SHEETS_SCOPES)


class CredentialsAuth(httpx.Auth):
    """
    httpx auth flow that puts a google-auth bearer token on every request.

    The token is refreshed when it has expired, and once more when the API
    answers 401. google-auth refreshes synchronously, so the refresh runs in a
    worker thread.
    """

    def __init__(self, credentials: Credentials, auth_request: Optional[Callable[[], Any]] = None):
        self.credentials = credentials
        self.auth_request = auth_request or GoogleAuthRequest
        self._lock = asyncio.Lock()

    async def _refresh(self, force: bool = False) -> None:
        async with self._lock:
            if force or not self.credentials.valid:
                await asyncio.to_thread(self.credentials.refresh, self.auth_request())
                logger.info("Refreshed Sheets API access token")

    async def async_auth_flow(self, request: httpx.Request):
        if not self.credentials.valid:
            await self._refresh()
        self.credentials.apply(request.headers)
        response = yield request

        if response.status_code == 401:
            await self._refresh(force=True)
            self.credentials.apply(request.headers)
            yield request


class SheetsTableStore(TableStore):
    """
    Table store backed by one Google spreadsheet.

    The store is an explicit handle: call `connect()` (or use it as an async
    context manager) before issuing requests and `close()` when done.
    Requests are authorized with a static `access_token` when one is given,
    otherwise with refreshable google-auth `credentials`. A `transport` may be
    injected for testing.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        access_token: str,
        base_url: str = "https://sheets.googleapis.com/v4/spreadsheets",
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        credentials: Optional[Credentials] = None
    ):
        self.spreadsheet_id = spreadsheet_id
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.credentials = credentials
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        if self._client is not None:
            return
        headers = {}
        auth = None
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        elif self.credentials is not None:
            auth = CredentialsAuth(self.credentials)
        else:
            logger.warning("No Sheets API credentials configured; requests are unauthenticated")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            auth=auth,
            timeout=self.timeout,
            transport=self.transport
        )
        logger.info(f"Connected to spreadsheet {self.spreadsheet_id}")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("SheetsTableStore is not connected")
        return self._client

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Issue one API call, translating every failure to StoreUnavailable."""
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error(f"Sheets API error {e.response.status_code} on {method} {url}: {e.response.text}")
            raise StoreUnavailable(f"Sheets API HTTP error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Sheets API request failed on {method} {url}: {e}")
            raise StoreUnavailable(f"Sheets API network error: {e}") from e
        except GoogleAuthError as e:
            logger.error(f"Sheets API authorization failed on {method} {url}: {e}")
            raise StoreUnavailable(f"Sheets API authorization error: {e}") from e

    def _values_url(self, a1: str, suffix: str = "") -> str:
        return f"/{self.spreadsheet_id}/values/{quote(a1, safe='')}{suffix}"

    async def worksheet_exists(self, worksheet: str) -> bool:
        data = await self._request("GET", f"/{self.spreadsheet_id}", params={"fields": "sheets.properties.title"})
        titles = [sheet.get("properties", {}).get("title") for sheet in data.get("sheets", [])]
        return worksheet in titles

    async def create_worksheet(self, worksheet: str, header: Sequence[str]) -> None:
        await self._request(
            "POST",
            f"/{self.spreadsheet_id}:batchUpdate",
            json={"requests": [{"addSheet": {"properties": {"title": worksheet}}}]}
        )
        await self._request(
            "PUT",
            self._values_url(a1_range(worksheet, len(header), row=1)),
            params={"valueInputOption": "RAW"},
            json={"values": [list(header)]}
        )
        logger.info(f"Created worksheet '{worksheet}' with header {list(header)}")

    async def read_rows(self, worksheet: str, width: int) -> List[Row]:
        data = await self._request(
            "GET",
            self._values_url(a1_range(worksheet, width)),
            params={
                "valueRenderOption": "UNFORMATTED_VALUE",
                "dateTimeRenderOption": "FORMATTED_STRING"
            }
        )
        rows = data.get("values", [])
        logger.debug(f"Read {len(rows)} rows from '{worksheet}'")
        return rows

    async def append_row(self, worksheet: str, row: Sequence[Any]) -> None:
        await self._request(
            "POST",
            self._values_url(a1_range(worksheet, len(row)), ":append"),
            params={"valueInputOption": "USER_ENTERED", "insertDataOption": "INSERT_ROWS"},
            json={"values": [list(row)]}
        )
        logger.info(f"Appended row to '{worksheet}'")

    async def update_row(self, worksheet: str, row_number: int, row: Sequence[Any]) -> None:
        await self._request(
            "PUT",
            self._values_url(a1_range(worksheet, len(row), row=row_number)),
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": [list(row)]}
        )
        logger.info(f"Updated row {row_number} of '{worksheet}'")
