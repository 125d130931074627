from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, func, text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from agenda.db.base_class import Base
import enum

class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

# At most one live (non-cancelled) appointment per (tenant, date, time)
LIVE_SLOT_PREDICATE = text("status <> 'cancelled'")

class Appointment(Base):
    id = Column(String(36), primary_key=True)
    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    date = Column(String(10), nullable=False)
    time = Column(String, nullable=False)
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )
    confirmed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tenant = relationship("Tenant", back_populates="appointments")

    __table_args__ = (
        Index(
            "uq_appointments_live_slot",
            "tenant_id",
            "date",
            "time",
            unique=True,
            postgresql_where=LIVE_SLOT_PREDICATE,
            sqlite_where=LIVE_SLOT_PREDICATE,
        ),
    )
