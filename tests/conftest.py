"""Shared fixtures: in-memory stand-ins for Supabase and Google Sheets."""

import copy
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from agenda.main import create_app
from agenda.services.appointment_service import AppointmentService
from agenda.services.appointment_store import AppointmentStore, TenantStore
from agenda.services.authorization import TenantGate
from agenda.services.availability import SlotAvailabilityChecker
from agenda.services.mirror_sync import MirrorSynchronizer


class FakeQuery:
    """Subset of the PostgREST query builder used by the stores."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.orders: List[tuple] = []

    def select(self, *columns):
        self.operation = "select"
        self.columns = ",".join(columns) or "*"
        return self

    def insert(self, data):
        self.operation = "insert"
        self.payload = data
        return self

    def update(self, data):
        self.operation = "update"
        self.payload = data
        return self

    def delete(self):
        self.operation = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def _matches(self, row):
        return all(check(row) for check in self.filters)

    def _project(self, row):
        if self.columns == "*":
            return copy.deepcopy(row)
        return {c.strip(): row.get(c.strip()) for c in self.columns.split(",")}

    def execute(self):
        if self.table in self.db.failing_tables:
            raise ConnectionError(f"{self.table} unavailable")

        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            new_rows = self.payload if isinstance(self.payload, list) else [self.payload]
            candidate = rows + [dict(r) for r in new_rows]
            self.db.check_constraints(self.table, candidate)
            rows.extend(dict(r) for r in new_rows)
            return SimpleNamespace(data=copy.deepcopy(new_rows))

        if self.operation == "update":
            matched = [i for i, row in enumerate(rows) if self._matches(row)]
            candidate = [dict(row, **self.payload) if i in matched else row for i, row in enumerate(rows)]
            self.db.check_constraints(self.table, candidate)
            for i in matched:
                rows[i].update(self.payload)
            return SimpleNamespace(data=[copy.deepcopy(rows[i]) for i in matched])

        if self.operation == "delete":
            deleted = [row for row in rows if self._matches(row)]
            self.db.tables[self.table] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=copy.deepcopy(deleted))

        result = [row for row in rows if self._matches(row)]
        for column, desc in reversed(self.orders):
            result.sort(key=lambda row: row.get(column), reverse=desc)
        return SimpleNamespace(data=[self._project(row) for row in result])


class FakeAuth:
    def __init__(self):
        self.users: Dict[str, SimpleNamespace] = {}

    def get_user(self, token):
        if token not in self.users:
            raise ValueError("invalid JWT")
        return SimpleNamespace(user=self.users[token])


class FakeSupabase:
    """In-memory Supabase client enforcing the live-slot unique index."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {"appointments": [], "tenants": []}
        self.auth = FakeAuth()
        self.failing_tables: set = set()

    def table(self, name):
        return FakeQuery(self, name)

    def check_constraints(self, table, rows):
        if table != "appointments":
            return
        seen = set()
        for row in rows:
            if row.get("status") == "cancelled":
                continue
            key = (row.get("tenant_id"), row.get("date"), row.get("time"))
            if key in seen:
                raise APIError({
                    "message": 'duplicate key value violates unique constraint "uq_appointments_live_slot"',
                    "code": "23505",
                    "hint": None,
                    "details": f"Key (tenant_id, date, time)=({key[0]}, {key[1]}, {key[2]}) already exists.",
                })
            seen.add(key)

    def add_user(self, token, user_id, tenant_claim=None, app_claim=None, email=None):
        self.auth.users[token] = SimpleNamespace(
            id=user_id,
            email=email or f"{user_id}@example.com",
            user_metadata={"tenant_id": tenant_claim} if tenant_claim else {},
            app_metadata={"tenant_id": app_claim} if app_claim else {},
        )


class FakeSheetsDocument:
    def __init__(self, header: Optional[List[str]] = None, rows: Optional[List[List[Any]]] = None):
        self.header = list(header or [])
        self.rows = [list(r) for r in rows or []]
        self.header_writes = 0

    def read_table(self):
        return list(self.header), [list(r) for r in self.rows]

    def read_header(self):
        return list(self.header)

    def write_header(self, header):
        self.header_writes += 1
        self.header = list(header)

    def write_row(self, row_number, cells):
        if row_number == 1:
            self.write_header(cells)
            return
        self.rows[row_number - 2] = list(cells)

    def append_row(self, cells):
        self.rows.append(list(cells))

    def records(self):
        """Rows as dicts keyed by header, for assertions."""
        return [dict(zip(self.header, r + [""] * (len(self.header) - len(r)))) for r in self.rows]


class FakeSheetsClient:
    def __init__(self):
        self.documents: Dict[str, FakeSheetsDocument] = {}
        self.unreachable = False
        self.opened: List[tuple] = []

    def open(self, spreadsheet_id, service_account_json=None):
        self.opened.append((spreadsheet_id, service_account_json))
        if self.unreachable:
            raise ConnectionError("sheets.googleapis.com unreachable")
        return self.documents.setdefault(spreadsheet_id, FakeSheetsDocument())


@pytest.fixture
def supabase() -> FakeSupabase:
    db = FakeSupabase()
    db.tables["tenants"] = [
        {"id": "t1", "user_id": "user-t1", "name": "Clinic One", "spreadsheet_id": "sheet-t1",
         "google_service_account_json": '{"type": "service_account"}'},
        {"id": "t2", "user_id": "user-bound", "name": "Clinic Two", "spreadsheet_id": None,
         "google_service_account_json": None},
        {"id": "admin", "user_id": "user-admin", "name": "Operators", "spreadsheet_id": None,
         "google_service_account_json": None},
    ]
    db.add_user("token-t1", "user-t1", tenant_claim="t1")
    db.add_user("token-t2", "user-t2", tenant_claim="t2")
    db.add_user("token-admin", "user-admin", app_claim="admin")
    db.add_user("token-bound", "user-bound")
    db.add_user("token-unbound", "user-unbound")
    return db


@pytest.fixture
def sheets() -> FakeSheetsClient:
    return FakeSheetsClient()


@pytest.fixture
def store(supabase) -> AppointmentStore:
    return AppointmentStore(supabase)


@pytest.fixture
def tenants(supabase) -> TenantStore:
    return TenantStore(supabase)


@pytest.fixture
def mirror(tenants, sheets) -> MirrorSynchronizer:
    return MirrorSynchronizer(tenants, sheets)


@pytest.fixture
def service(store, mirror) -> AppointmentService:
    return AppointmentService(store, SlotAvailabilityChecker(store), mirror)


@pytest.fixture
def gate(supabase, tenants) -> TenantGate:
    return TenantGate(supabase, tenants, admin_tenant_id="admin")


@pytest.fixture
def client(supabase, sheets):
    app = create_app(supabase_client=supabase, sheets_client=sheets)
    return TestClient(app)


@pytest.fixture
def booking() -> Dict[str, str]:
    return {
        "name": "Ana",
        "email": "ANA@X.com",
        "phone": "123",
        "date": "2024-05-01",
        "time": "09:00",
    }


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    """Factory for bearer auth headers."""
    return auth
