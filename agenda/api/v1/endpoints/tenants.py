from fastapi import APIRouter, Depends
from agenda.api.deps import get_tenant_scope, get_tenant_store
from agenda.core.exceptions import NotFound
from agenda.schemas.tenant import TenantEnvelope
from agenda.services.appointment_store import TenantStore
from agenda.services.authorization import TenantScope

router = APIRouter()

@router.get("/{tenant}", response_model=TenantEnvelope)
async def get_tenant_config(
    scope: TenantScope = Depends(get_tenant_scope),
    tenants: TenantStore = Depends(get_tenant_store),
):
    """
    Get the configuration of the tenant in the path.
    """
    tenant = tenants.get(scope.tenant_id)
    if not tenant:
        raise NotFound("Tenant not found")
    return {"msg": "OK", "cliente": tenant}
