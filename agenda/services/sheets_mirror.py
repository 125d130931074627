import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from google.oauth2 import service_account
from googleapiclient.discovery import build

from agenda.core.exceptions import MirrorFailure

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def _quote_sheet_title(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


class SheetsDocument:
    """
    One worksheet of a tenant's spreadsheet, addressed through the Sheets v4
    values API. Row 1 holds the header; data rows start at row 2.
    """
    def __init__(self, service, spreadsheet_id: str, sheet_title: str):
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self.sheet_title = sheet_title
        self._range_prefix = _quote_sheet_title(sheet_title)

    def _values(self):
        return self.service.spreadsheets().values()

    def read_table(self) -> Tuple[List[str], List[List[Any]]]:
        """Returns (header, data rows) for the whole worksheet."""
        result = self._values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self._range_prefix,
        ).execute()
        values = result.get("values", [])
        if not values:
            return [], []
        return [str(cell) for cell in values[0]], values[1:]

    def read_header(self) -> List[str]:
        result = self._values().get(
            spreadsheetId=self.spreadsheet_id,
            range=f"{self._range_prefix}!1:1",
        ).execute()
        values = result.get("values", [])
        return [str(cell) for cell in values[0]] if values else []

    def write_header(self, header: List[str]) -> None:
        self.write_row(1, header)

    def write_row(self, row_number: int, cells: List[Any]) -> None:
        self._values().update(
            spreadsheetId=self.spreadsheet_id,
            range=f"{self._range_prefix}!A{row_number}",
            valueInputOption="RAW",
            body={"values": [cells]},
        ).execute()

    def append_row(self, cells: List[Any]) -> None:
        self._values().append(
            spreadsheetId=self.spreadsheet_id,
            range=f"{self._range_prefix}!A1",
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": [cells]},
        ).execute()


class SheetsMirrorClient:
    """Opens tenant spreadsheets with service-account credentials."""

    def __init__(self, service_account_json: Optional[str] = None, sheet_title: Optional[str] = None):
        self.service_account_json = service_account_json
        self.sheet_title = sheet_title

    @staticmethod
    def _parse_credentials(raw: str) -> Dict[str, Any]:
        try:
            return json.loads(raw)
        except ValueError as e:
            raise MirrorFailure(f"Service account JSON could not be parsed: {e}")

    def _build_service(self, creds_info: Dict[str, Any]):
        creds = service_account.Credentials.from_service_account_info(creds_info, scopes=SCOPES)
        return build("sheets", "v4", credentials=creds, cache_discovery=False)

    def _first_sheet_title(self, service, spreadsheet_id: str) -> str:
        meta = service.spreadsheets().get(
            spreadsheetId=spreadsheet_id,
            fields="sheets.properties.title",
        ).execute()
        sheets = meta.get("sheets", [])
        if not sheets:
            raise MirrorFailure(f"Spreadsheet {spreadsheet_id} has no worksheets")
        return sheets[0]["properties"]["title"]

    def open(self, spreadsheet_id: str, service_account_json: Optional[str] = None) -> SheetsDocument:
        raw = service_account_json or self.service_account_json
        if not raw:
            raise MirrorFailure("No Google service account configured for the mirror")

        creds_info = self._parse_credentials(raw)
        service = self._build_service(creds_info)
        title = self.sheet_title or self._first_sheet_title(service, spreadsheet_id)
        logger.debug(f"Opened spreadsheet {spreadsheet_id}, worksheet '{title}'")
        return SheetsDocument(service, spreadsheet_id, title)
