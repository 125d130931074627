"""
Creates the schema (including the live-slot unique index) and optionally
provisions a tenant, which the API itself never does.

    python init_db.py
    python init_db.py --tenant clinic-1 --user <supabase user id> --spreadsheet <sheet id>
"""
import argparse
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from agenda.db.base_class import Base
from agenda.models.tenant import Tenant
from agenda.models.appointment import Appointment

def init_db(engine: Engine):
    print("Initializing database...")
    Base.metadata.create_all(bind=engine)
    print("Database initialized successfully.")

def provision_tenant(
    engine: Engine,
    tenant_id: str,
    user_id: Optional[str] = None,
    name: Optional[str] = None,
    spreadsheet_id: Optional[str] = None,
) -> Tenant:
    """Creates the tenant or updates its binding and mirror settings."""
    with Session(engine, expire_on_commit=False) as session:
        tenant = session.get(Tenant, tenant_id) or Tenant(id=tenant_id)
        if user_id is not None:
            tenant.user_id = user_id
        if name is not None:
            tenant.name = name
        if spreadsheet_id is not None:
            tenant.spreadsheet_id = spreadsheet_id
        session.add(tenant)
        session.commit()
        print(f"Tenant {tenant_id} provisioned.")
        return tenant

def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--tenant", help="Tenant id to create or update")
    parser.add_argument("--user", help="Supabase user id bound to the tenant")
    parser.add_argument("--name", help="Display name")
    parser.add_argument("--spreadsheet", help="Google Sheets id used as the tenant's mirror")
    args = parser.parse_args(argv)

    from agenda.db.session import engine

    init_db(engine)
    if args.tenant:
        provision_tenant(engine, args.tenant, args.user, args.name, args.spreadsheet)

if __name__ == "__main__":
    main()
