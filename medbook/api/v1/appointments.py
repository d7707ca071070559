from fastapi import APIRouter, Depends, Request

from ...api.deps import get_current_principal, get_doctor, get_ledger, get_patient
from ...core.security import TokenPayload
from ...services.booking_service import AppointmentLedger
from ...schemas.appointment import (
    AppointmentEnvelope, AppointmentListResponse, AppointmentResponse,
    AppointmentWithDoctor, CheckoutRequest, CheckoutResponse,
    CheckoutSessionResponse
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.post("/checkout/{doctor_id}", response_model=CheckoutResponse)
def create_checkout_session(
    doctor_id: str,
    checkout_data: CheckoutRequest,
    request: Request,
    token_payload: TokenPayload = Depends(get_patient),
    ledger: AppointmentLedger = Depends(get_ledger)
):
    """Open a payment session and book a pending appointment."""
    result = ledger.checkout(
        doctor_id=doctor_id,
        patient_id=token_payload.id,
        date_text=checkout_data.date,
        time_text=checkout_data.time,
        cancel_base_url=str(request.base_url),
    )
    return CheckoutResponse(
        message="Successfully created checkout session",
        session=CheckoutSessionResponse(
            id=result.session.session_id,
            url=result.session.redirect_url,
        ),
        booking=AppointmentResponse.model_validate(result.appointment),
    )

@router.patch("/complete/{booking_id}", response_model=AppointmentEnvelope)
def complete_appointment(
    booking_id: str,
    token_payload: TokenPayload = Depends(get_current_principal),
    ledger: AppointmentLedger = Depends(get_ledger)
):
    """Mark a pending appointment as completed."""
    booking = ledger.complete(booking_id, token_payload.id, token_payload.role)
    return AppointmentEnvelope(
        message="Appointment completed successfully",
        booking=AppointmentResponse.model_validate(booking),
    )

@router.patch("/cancel/{booking_id}", response_model=AppointmentEnvelope)
def cancel_appointment(
    booking_id: str,
    token_payload: TokenPayload = Depends(get_current_principal),
    ledger: AppointmentLedger = Depends(get_ledger)
):
    """Cancel a pending appointment."""
    booking = ledger.cancel(booking_id, token_payload.id, token_payload.role)
    return AppointmentEnvelope(
        message="Appointment cancelled successfully",
        booking=AppointmentResponse.model_validate(booking),
    )

@router.get("", response_model=AppointmentListResponse)
def list_my_appointments(
    token_payload: TokenPayload = Depends(get_patient),
    ledger: AppointmentLedger = Depends(get_ledger)
):
    """List the current patient's appointments with doctor details."""
    bookings = ledger.list_for_patient(token_payload.id)
    return AppointmentListResponse(
        message="Appointments fetched successfully",
        data=[AppointmentWithDoctor.model_validate(booking) for booking in bookings],
    )

@router.get("/doctor", response_model=AppointmentListResponse)
def list_doctor_appointments(
    token_payload: TokenPayload = Depends(get_doctor),
    ledger: AppointmentLedger = Depends(get_ledger)
):
    """List appointments booked with the current doctor."""
    bookings = ledger.list_for_doctor(token_payload.id)
    return AppointmentListResponse(
        message="Appointments fetched successfully",
        data=[AppointmentWithDoctor.model_validate(booking) for booking in bookings],
    )
