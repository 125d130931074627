from fastapi import APIRouter, Body, Depends
from typing import Optional
from agenda.api.deps import get_appointment_service, get_tenant_scope
from agenda.schemas.appointment import (
    AppointmentEnvelope,
    AppointmentListEnvelope,
    BookingRequest,
    RescheduleRequest,
)
from agenda.services.appointment_service import AppointmentService
from agenda.services.authorization import TenantScope

router = APIRouter()

@router.get("/agendamentos/{tenant}", response_model=AppointmentListEnvelope)
async def list_appointments(
    scope: TenantScope = Depends(get_tenant_scope),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    List live appointments of the tenant, ordered by date and time.
    """
    appointments = await service.list_appointments(scope.tenant_id)
    return {"msg": "OK", "agendamentos": appointments}

@router.post("/agendar/{tenant}", response_model=AppointmentEnvelope)
async def book_appointment(
    payload: BookingRequest,
    scope: TenantScope = Depends(get_tenant_scope),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Book a slot for a customer. The appointment starts as pending.
    """
    appointment = await service.book(scope.tenant_id, **payload.model_dump())
    return {"msg": "Appointment booked successfully", "agendamento": appointment}

@router.post("/agendamentos/{tenant}/confirmar/{appointment_id}", response_model=AppointmentEnvelope)
async def confirm_appointment(
    appointment_id: str,
    scope: TenantScope = Depends(get_tenant_scope),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = await service.confirm(scope.tenant_id, appointment_id)
    return {"msg": "Appointment confirmed", "agendamento": appointment}

@router.post("/agendamentos/{tenant}/cancelar/{appointment_id}", response_model=AppointmentEnvelope)
async def cancel_appointment(
    appointment_id: str,
    scope: TenantScope = Depends(get_tenant_scope),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = await service.cancel(scope.tenant_id, appointment_id)
    return {"msg": "Appointment cancelled", "agendamento": appointment}

@router.post("/agendamentos/{tenant}/reagendar/{appointment_id}", response_model=AppointmentEnvelope)
async def reschedule_appointment(
    appointment_id: str,
    payload: Optional[RescheduleRequest] = Body(None),
    scope: TenantScope = Depends(get_tenant_scope),
    service: AppointmentService = Depends(get_appointment_service),
):
    """
    Move an appointment to another slot. Status is left unchanged.
    """
    payload = payload or RescheduleRequest()
    appointment = await service.reschedule(
        scope.tenant_id, appointment_id, payload.new_date, payload.new_time
    )
    return {"msg": "Appointment rescheduled successfully", "agendamento": appointment}
