from fastapi import APIRouter
from agenda.api.v1.endpoints import appointments, tenants

api_router = APIRouter()
api_router.include_router(appointments.router, tags=["appointments"])
api_router.include_router(tenants.router, prefix="/clientes", tags=["tenants"])
