"""
Supabase (PostgREST) access for the ``appointments`` and ``tenants`` tables.

Every appointment query is filtered by ``tenant_id``; callers never get a
handle that can reach another tenant's rows.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from agenda.core.exceptions import Conflict
from agenda.models.appointment import AppointmentStatus

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class AppointmentStore:
    def __init__(self, client: Client, table: str = "appointments"):
        self.client = client
        self.table = table

    def _query(self):
        return self.client.table(self.table)

    def list_live(self, tenant_id: str) -> List[Dict[str, Any]]:
        res = self._query()\
            .select("*")\
            .eq("tenant_id", tenant_id)\
            .neq("status", AppointmentStatus.CANCELLED.value)\
            .order("date")\
            .order("time")\
            .execute()
        return res.data or []

    def get(self, tenant_id: str, appointment_id: str) -> Optional[Dict[str, Any]]:
        res = self._query().select("*").eq("id", appointment_id).eq("tenant_id", tenant_id).execute()
        return res.data[0] if res.data else None

    def find_live_in_slot(
        self, tenant_id: str, date: str, time: str, exclude_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = self._query()\
            .select("id")\
            .eq("tenant_id", tenant_id)\
            .eq("date", date)\
            .eq("time", time)\
            .neq("status", AppointmentStatus.CANCELLED.value)
        if exclude_id:
            query = query.neq("id", exclude_id)
        return query.execute().data or []

    def purge_cancelled(self, tenant_id: str, date: str, time: str) -> int:
        """Deletes cancelled rows occupying a slot so it can be booked again."""
        res = self._query()\
            .delete()\
            .eq("tenant_id", tenant_id)\
            .eq("date", date)\
            .eq("time", time)\
            .eq("status", AppointmentStatus.CANCELLED.value)\
            .execute()
        purged = len(res.data or [])
        if purged:
            logger.info(f"Purged {purged} cancelled appointment(s) from slot {date} {time} for tenant {tenant_id}")
        return purged

    def insert(self, row: Dict[str, Any]) -> Dict[str, Any]:
        data = {"id": str(uuid.uuid4()), **row}
        try:
            res = self._query().insert(data).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise Conflict("Slot is not available")
            raise
        if not res.data:
            raise RuntimeError(f"Insert into {self.table} returned no row")
        return res.data[0]

    def update(
        self,
        tenant_id: str,
        appointment_id: str,
        changes: Dict[str, Any],
        expected_status: Optional[str] = None,
        live_only: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Applies ``changes`` to one appointment of the tenant.
        When ``expected_status`` is given the update only matches while the row
        still has that status; ``live_only`` only matches non-cancelled rows.
        Returns the updated row, or None if nothing matched.
        """
        query = self._query().update(changes).eq("id", appointment_id).eq("tenant_id", tenant_id)
        if expected_status:
            query = query.eq("status", expected_status)
        if live_only:
            query = query.neq("status", AppointmentStatus.CANCELLED.value)
        try:
            res = query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise Conflict("Slot is not available")
            raise
        return res.data[0] if res.data else None


class TenantStore:
    def __init__(self, client: Client, table: str = "tenants"):
        self.client = client
        self.table = table

    def get(self, tenant_id: str) -> Optional[Dict[str, Any]]:
        res = self.client.table(self.table).select("*").eq("id", tenant_id).execute()
        return res.data[0] if res.data else None

    def tenant_for_user(self, user_id: str) -> Optional[str]:
        res = self.client.table(self.table).select("id").eq("user_id", user_id).execute()
        return str(res.data[0]["id"]) if res.data else None
