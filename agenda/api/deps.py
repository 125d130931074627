from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from agenda.services.appointment_service import AppointmentService
from agenda.services.appointment_store import TenantStore
from agenda.services.authorization import TenantGate, TenantScope

# Missing tokens are rejected by the gate with 401
security = HTTPBearer(auto_error=False)

def get_tenant_gate(request: Request) -> TenantGate:
    return request.app.state.tenant_gate

def get_appointment_service(request: Request) -> AppointmentService:
    return request.app.state.appointment_service

def get_tenant_store(request: Request) -> TenantStore:
    return request.app.state.tenant_store

async def get_tenant_scope(
    tenant: str,
    auth: Optional[HTTPAuthorizationCredentials] = Depends(security),
    gate: TenantGate = Depends(get_tenant_gate),
) -> TenantScope:
    """
    Verifies the Supabase JWT and checks it may act on the tenant in the path.
    """
    token = auth.credentials if auth else None
    return await gate.authorize(token, tenant)
