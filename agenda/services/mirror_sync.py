"""
Best-effort projection of appointment rows into each tenant's spreadsheet.

The spreadsheet is advisory: it may lag behind or miss writes, and nothing
reads from it. ``MirrorSynchronizer.reflect`` never raises.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from agenda.core.exceptions import MirrorFailure
from agenda.services.appointment_store import TenantStore
from agenda.services.sheets_mirror import SheetsDocument, SheetsMirrorClient

logger = logging.getLogger(__name__)

ID_COLUMN = "id"


def extend_header(current: List[str], keys: Iterable[str]) -> List[str]:
    """Ordered union of ``current`` and ``keys``; columns are never dropped."""
    header = list(current)
    for key in keys:
        if key not in header:
            header.append(key)
    return header


def to_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@dataclass
class MirrorRow:
    values: Dict[str, Any] = field(default_factory=dict)
    row_number: Optional[int] = None

    @classmethod
    def from_cells(cls, header: List[str], cells: List[Any], row_number: int) -> "MirrorRow":
        padded = list(cells) + [""] * (len(header) - len(cells))
        return cls(values=dict(zip(header, padded)), row_number=row_number)

    def to_cells(self, header: List[str]) -> List[Any]:
        return [to_cell(self.values.get(column)) for column in header]

    def merge(self, data: Dict[str, Any], header: List[str]) -> None:
        # Only columns known to the sheet are written; the rest of the row is left as is
        for key, value in data.items():
            if key in header:
                self.values[key] = value


class MirrorSynchronizer:
    def __init__(self, tenants: TenantStore, sheets: SheetsMirrorClient):
        self.tenants = tenants
        self.sheets = sheets

    async def reflect(self, tenant_id: str, appointment_id: str, row_data: Dict[str, Any]) -> None:
        try:
            self._reflect(tenant_id, appointment_id, row_data)
        except Exception as e:
            logger.exception(f"Mirror sync failed for tenant {tenant_id}, appointment {appointment_id}: {e}")

    def _open_document(self, tenant_id: str) -> Optional[SheetsDocument]:
        tenant = self.tenants.get(tenant_id)
        if not tenant:
            raise MirrorFailure(f"Tenant {tenant_id} not found")

        spreadsheet_id = tenant.get("spreadsheet_id")
        if not spreadsheet_id:
            return None
        return self.sheets.open(spreadsheet_id, tenant.get("google_service_account_json"))

    def _reflect(self, tenant_id: str, appointment_id: str, row_data: Dict[str, Any]) -> None:
        document = self._open_document(tenant_id)
        if document is None:
            logger.debug(f"Tenant {tenant_id} has no mirror configured, skipping")
            return

        header, rows = document.read_table()
        keys = list(row_data.keys())

        if not header:
            header = keys
            document.write_header(header)
        else:
            header = self._ensure_header(document, header, keys)

        existing = self._find_row(header, rows, appointment_id)
        if existing:
            existing.merge(row_data, header)
            document.write_row(existing.row_number, existing.to_cells(header))
            logger.info(f"Mirror row {existing.row_number} updated for appointment {appointment_id}")
        else:
            document.append_row(MirrorRow(values=dict(row_data)).to_cells(header))
            logger.info(f"Mirror row appended for appointment {appointment_id}")

    def _ensure_header(self, document: SheetsDocument, header: List[str], keys: List[str]) -> List[str]:
        if extend_header(header, keys) == header:
            return header

        # Re-read so columns added by a concurrent writer since read_table survive
        fresh = extend_header(document.read_header(), header)
        extended = extend_header(fresh, keys)
        if extended != fresh:
            document.write_header(extended)
            logger.info(f"Mirror header extended with {[k for k in extended if k not in fresh]}")
        return extended

    def _find_row(self, header: List[str], rows: List[List[Any]], appointment_id: str) -> Optional[MirrorRow]:
        if ID_COLUMN not in header:
            return None
        id_index = header.index(ID_COLUMN)
        for offset, cells in enumerate(rows):
            if id_index < len(cells) and str(cells[id_index]) == str(appointment_id):
                return MirrorRow.from_cells(header, cells, row_number=offset + 2)
        return None
