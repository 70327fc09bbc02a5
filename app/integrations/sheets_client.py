from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx


logger = logging.getLogger(__name__)


class SheetsAPIError(RuntimeError):
    """Raised when the Google Sheets API cannot return the requested values."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)


class SheetsClient:
    """Read-only client for the Google Sheets v4 values endpoint, keyed by API key."""

    BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"

    def __init__(
        self,
        api_key: str,
        spreadsheet_id: str,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key or not isinstance(api_key, str):
            raise ValueError("Google Sheets API key is required")
        if not spreadsheet_id or not isinstance(spreadsheet_id, str):
            raise ValueError("Spreadsheet id is required")
        self._api_key = api_key.strip()
        self._spreadsheet_id = spreadsheet_id.strip()
        self._timeout = timeout
        self._transport = transport

    async def get_values(self, cell_range: str) -> List[List[Any]]:
        """
        Fetch the cell grid for an A1 range.

        Args:
            cell_range: A1 notation, e.g. ``Sheet1`` or ``Debtors!A1:D50``

        Returns:
            Rows in sheet order; trailing empty cells are omitted by the API,
            so rows may be shorter than the header row.
        """
        url = f"{self.BASE_URL}/{quote(self._spreadsheet_id, safe='')}/values/{quote(cell_range, safe='!:')}"
        params = {"key": self._api_key}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise SheetsAPIError(f"Google Sheets request failed: {exc}") from exc

        if response.status_code // 100 != 2:
            logger.error(
                "Google Sheets API error",
                extra={"status": response.status_code, "range": cell_range, "body": response.text},
            )
            raise SheetsAPIError(
                f"Google Sheets request failed ({response.status_code})",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data: Dict[str, Any] = response.json()
        except json.JSONDecodeError as exc:
            raise SheetsAPIError(
                "Failed to parse Google Sheets response as JSON",
                status_code=response.status_code,
                body=response.text,
            ) from exc

        values = data.get("values") if isinstance(data, dict) else None
        if not isinstance(values, list):
            return []
        return [row for row in values if isinstance(row, list)]
