import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from supabase import Client

from agenda.api.v1.api import api_router
from agenda.core.config import settings
from agenda.core.exceptions import AgendaError
from agenda.core.logging import setup_logging
from agenda.core.supabase_client import get_supabase_client
from agenda.services.appointment_service import AppointmentService
from agenda.services.appointment_store import AppointmentStore, TenantStore
from agenda.services.authorization import TenantGate
from agenda.services.availability import SlotAvailabilityChecker
from agenda.services.mirror_sync import MirrorSynchronizer
from agenda.services.sheets_mirror import SheetsMirrorClient

logger = logging.getLogger(__name__)

def wire_services(app: FastAPI, supabase_client: Client, sheets_client: SheetsMirrorClient) -> None:
    """Builds the service graph once and keeps it on app.state."""
    store = AppointmentStore(supabase_client, settings.appointments_table)
    tenants = TenantStore(supabase_client, settings.tenants_table)
    mirror = MirrorSynchronizer(tenants, sheets_client)

    app.state.tenant_store = tenants
    app.state.tenant_gate = TenantGate(
        supabase_client,
        tenants,
        admin_tenant_id=settings.admin_tenant_id,
        fallback_tenant_id=settings.fallback_tenant_id,
    )
    app.state.appointment_service = AppointmentService(
        store,
        SlotAvailabilityChecker(store),
        mirror,
        timezone=settings.timezone,
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    if not hasattr(app.state, "appointment_service"):
        wire_services(
            app,
            get_supabase_client(),
            SheetsMirrorClient(settings.google_service_account_json, settings.mirror_sheet_title),
        )
    yield

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AgendaError)
    async def agenda_error_handler(request: Request, exc: AgendaError):
        return JSONResponse(status_code=exc.status_code, content={"msg": exc.message, **exc.extra})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods on known paths are both "no such route"
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"msg": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"msg": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"msg": "Invalid request payload"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"msg": "Internal server error"})

def create_app(
    supabase_client: Optional[Client] = None,
    sheets_client: Optional[SheetsMirrorClient] = None,
) -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    if supabase_client is not None:
        wire_services(
            app,
            supabase_client,
            sheets_client or SheetsMirrorClient(settings.google_service_account_json, settings.mirror_sheet_title),
        )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/")
    async def root():
        return {"msg": "Tenant Appointments backend is running"}

    return app

setup_logging()
app = create_app()
