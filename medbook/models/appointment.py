from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Time, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, validates
import enum

from ..core.database import Base
from .principal import new_id

class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

# pending is the only state with outgoing transitions
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(32), primary_key=True, default=new_id)

    # Relationships
    doctor_id = Column(String(32), ForeignKey("doctors.id"), nullable=False, index=True)
    patient_id = Column(String(32), ForeignKey("patients.id"), nullable=False, index=True)

    # Booking details, fixed at checkout
    ticket_price = Column(Integer, nullable=False)
    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)

    # Mutable after checkout
    session_id = Column(String(255), nullable=True)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.PENDING)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctor = relationship("Doctor", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")

    @validates("doctor_id", "patient_id", "ticket_price", "appointment_date", "appointment_time")
    def validate_immutable(self, key, value):
        current = getattr(self, key)
        if current is not None and current != value:
            raise ValueError(f"Appointment.{key} cannot change after booking")
        return value

    @validates("status")
    def validate_status(self, key, value):
        return AppointmentStatus(value)

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id}, status='{self.status}')>"
