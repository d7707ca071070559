from datetime import date, time, datetime
from pydantic import BaseModel, ConfigDict
from typing import Any, List, Optional

from ..models.appointment import AppointmentStatus

class CheckoutRequest(BaseModel):
    # Left unvalidated so that missing or malformed values surface as an invalid schedule
    date: Optional[Any] = None
    time: Optional[Any] = None

class DoctorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    photo: Optional[str] = None
    specialization: Optional[str] = None
    bio: Optional[str] = None
    ticket_price: int

class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    doctor_id: str
    patient_id: str
    ticket_price: int
    session_id: Optional[str] = None
    appointment_date: date
    appointment_time: time
    status: AppointmentStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class AppointmentWithDoctor(AppointmentResponse):
    doctor: DoctorSummary

class CheckoutSessionResponse(BaseModel):
    id: str
    url: Optional[str] = None

class CheckoutResponse(BaseModel):
    success: bool = True
    message: str
    session: CheckoutSessionResponse
    booking: AppointmentResponse

class AppointmentEnvelope(BaseModel):
    success: bool = True
    message: str
    booking: AppointmentResponse

class AppointmentListResponse(BaseModel):
    success: bool = True
    message: str
    data: List[AppointmentWithDoctor]
