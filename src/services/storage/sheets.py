"""Google Sheets table store.

Appends one review per row through ``spreadsheets.values.append`` using a
service account (email + private key).

A googleapiclient resource wraps one ``httplib2.Http``, which is not
thread-safe, and appends run in worker threads. Only the credentials are
shared; every append builds its own resource.
"""

import asyncio
import logging
import threading
from collections.abc import Callable, Sequence

from google.oauth2 import service_account
from googleapiclient.discovery import build

from src.core.config import get_settings
from src.core.exceptions import PersistenceError
from src.services.storage.base import BaseTableStore

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/devstorage.read_write",
]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsTableStore(BaseTableStore):
    """Append-only review sheet.

    Args:
        spreadsheet_id: Target spreadsheet.
        client_email: Service-account email.
        private_key: Service-account PEM key (real newlines).
        value_range: A1 range the rows are appended to.
        service_factory: Returns a fresh Sheets API resource per append
            (defaults to building one from the service account).
    """

    def __init__(
        self,
        spreadsheet_id: str | None = None,
        client_email: str | None = None,
        private_key: str | None = None,
        value_range: str | None = None,
        service_factory: Callable[[], object] | None = None,
    ) -> None:
        settings = get_settings()
        self._spreadsheet_id = spreadsheet_id or settings.google_sheets_id
        self._client_email = client_email or settings.google_service_account_email
        self._private_key = private_key or settings.service_account_private_key
        self._range = value_range or settings.google_sheets_range
        self._service_factory = service_factory or self._build_service
        self._credentials = None
        self._credentials_lock = threading.Lock()

    def _get_credentials(self):
        with self._credentials_lock:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_info(
                    {
                        "type": "service_account",
                        "client_email": self._client_email,
                        "private_key": self._private_key,
                        "token_uri": TOKEN_URI,
                    },
                    scopes=SCOPES,
                )
            return self._credentials

    def _build_service(self):
        return build("sheets", "v4", credentials=self._get_credentials(), cache_discovery=False)

    def _append_sync(self, values: list) -> None:
        request = (
            self._service_factory()
            .spreadsheets()
            .values()
            .append(
                spreadsheetId=self._spreadsheet_id,
                range=self._range,
                valueInputOption="RAW",
                body={"values": [values]},
            )
        )
        request.execute()

    async def append_row(self, values: Sequence[str | int | float]) -> None:
        """Append ``values`` as one row; any failure becomes ``PersistenceError``."""
        try:
            await asyncio.to_thread(self._append_sync, list(values))
        except Exception as exc:
            logger.error("Failed to append review row to Google Sheets: %s", exc)
            raise PersistenceError(f"Google Sheets append failed: {exc}") from exc
