from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

class BookingRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Presence is validated by the service so missing fields produce a single 400
    name: Optional[str] = Field(None, validation_alias=AliasChoices("name", "Nome"))
    email: Optional[str] = Field(None, validation_alias=AliasChoices("email", "Email"))
    phone: Optional[str] = Field(None, validation_alias=AliasChoices("phone", "Telefone"))
    date: Optional[str] = Field(None, validation_alias=AliasChoices("date", "Data"))
    time: Optional[str] = Field(None, validation_alias=AliasChoices("time", "Horario"))

class RescheduleRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    new_date: Optional[str] = Field(None, validation_alias=AliasChoices("newDate", "novaData", "new_date"))
    new_time: Optional[str] = Field(None, validation_alias=AliasChoices("newTime", "novoHorario", "new_time"))

class AppointmentResponse(BaseModel):
    id: str
    tenant_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    date: str
    time: str
    status: str
    confirmed: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AppointmentEnvelope(BaseModel):
    msg: str
    agendamento: AppointmentResponse

class AppointmentListEnvelope(BaseModel):
    msg: str
    agendamentos: List[AppointmentResponse]
