from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship
from agenda.db.base_class import Base

class Tenant(Base):
    id = Column(String, primary_key=True)
    user_id = Column(String, index=True, nullable=True)
    name = Column(String, nullable=True)
    spreadsheet_id = Column(String, nullable=True)
    google_service_account_json = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    appointments = relationship("Appointment", back_populates="tenant", cascade="all, delete-orphan")
