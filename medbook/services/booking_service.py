from datetime import datetime
from sqlalchemy.orm import Session, joinedload
from typing import Any, Callable, List, NamedTuple
import logging

from ..core.config import settings
from ..core.exceptions import (
    Forbidden, InvalidSchedule, InvalidTransition, NotFound,
    SlotUnavailable, Unauthorized, store_guard
)
from ..core.security import UserRole
from ..models import Appointment, AppointmentStatus, ALLOWED_TRANSITIONS
from .credential_store import CredentialStore
from .payment import CheckoutIntent, CheckoutSession, PaymentInitiator

logger = logging.getLogger(__name__)

SCHEDULE_FORMAT = "%Y-%m-%d %H:%M"

TRANSITION_FAILURE_MESSAGES = {
    AppointmentStatus.COMPLETED: "Error completing the appointment",
    AppointmentStatus.CANCELLED: "Error cancelling the appointment",
}

class CheckoutResult(NamedTuple):
    appointment: Appointment
    session: CheckoutSession

def parse_schedule(date_text: Any, time_text: Any, now: datetime) -> datetime:
    """Combine ``YYYY-MM-DD`` and ``HH:MM`` into an instant strictly after ``now``."""
    try:
        scheduled = datetime.strptime(f"{date_text.strip()} {time_text.strip()}", SCHEDULE_FORMAT)
    except (AttributeError, ValueError):
        raise InvalidSchedule("Invalid appointment date or time")
    if scheduled <= now:
        raise InvalidSchedule()
    return scheduled

class AppointmentLedger:
    """Owns appointment records and their status transitions.

    A booking is only ever created by :meth:`checkout`, after the payment
    provider has opened a session for it. From ``pending`` it may move once to
    ``completed`` or ``cancelled``; both are terminal.
    """

    def __init__(
        self,
        db: Session,
        payments: PaymentInitiator,
        clock: Callable[[], datetime] = datetime.now,
        currency: str = settings.PAYMENT_CURRENCY,
        client_site_url: str = settings.CLIENT_SITE_URL,
    ):
        self.db = db
        self.payments = payments
        self.clock = clock
        self.currency = currency
        self.client_site_url = client_site_url.rstrip("/")
        self.store = CredentialStore(db)

    def checkout(
        self,
        doctor_id: str,
        patient_id: str,
        date_text: Any,
        time_text: Any,
        cancel_base_url: str,
    ) -> CheckoutResult:
        with store_guard(self.db, "Error creating checkout session"):
            doctor = self.store.doctors.find_by_id(doctor_id)
            if not doctor:
                raise NotFound("Doctor not found")

            patient = self.store.patients.find_by_id(patient_id)
            if not patient:
                raise Unauthorized("Not authorized user")

            scheduled = parse_schedule(date_text, time_text, self.clock())
            self._ensure_slot_free(doctor.id, scheduled)

            # Snapshot so later price edits never touch this booking
            ticket_price = doctor.ticket_price

        session = self.payments.create_checkout(CheckoutIntent(
            amount_minor_units=ticket_price,
            currency=self.currency,
            product_name=doctor.name,
            description=doctor.bio or f"Appointment with {doctor.name}",
            image_url=doctor.photo,
            success_redirect=f"{self.client_site_url}/checkout-success",
            cancel_redirect=f"{cancel_base_url.rstrip('/')}/doctors/{doctor.id}",
            reference_id=doctor.id,
            customer_email=patient.email,
        ))

        with store_guard(self.db, "Error creating checkout session"):
            appointment = Appointment(
                doctor_id=doctor.id,
                patient_id=patient.id,
                ticket_price=ticket_price,
                session_id=session.session_id,
                appointment_date=scheduled.date(),
                appointment_time=scheduled.time(),
                status=AppointmentStatus.PENDING,
            )
            self.db.add(appointment)
            self.db.commit()
            self.db.refresh(appointment)

        logger.info(
            f"Created appointment {appointment.id} for patient {patient.id} "
            f"with doctor {doctor.id} at {scheduled:%Y-%m-%d %H:%M} (session {session.session_id})"
        )
        return CheckoutResult(appointment, session)

    def _ensure_slot_free(self, doctor_id: str, scheduled: datetime):
        taken = self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == scheduled.date(),
            Appointment.appointment_time == scheduled.time(),
            Appointment.status != AppointmentStatus.CANCELLED,
        ).first()
        if taken:
            raise SlotUnavailable()

    def complete(self, booking_id: str, actor_id: str, actor_role: UserRole) -> Appointment:
        return self.transition(booking_id, AppointmentStatus.COMPLETED, actor_id, actor_role)

    def cancel(self, booking_id: str, actor_id: str, actor_role: UserRole) -> Appointment:
        return self.transition(booking_id, AppointmentStatus.CANCELLED, actor_id, actor_role)

    def transition(
        self,
        booking_id: str,
        target: AppointmentStatus,
        actor_id: str,
        actor_role: UserRole,
    ) -> Appointment:
        with store_guard(self.db, TRANSITION_FAILURE_MESSAGES[target]):
            appointment = self.db.get(Appointment, booking_id)
            if not appointment:
                logger.info(f"Booking not found for bookingId: {booking_id}")
                raise NotFound("Booking not found")

            self._ensure_owner(appointment, actor_id, actor_role)

            current = appointment.status
            if target not in ALLOWED_TRANSITIONS[current]:
                raise InvalidTransition(
                    f"Appointment is already {current.value} and cannot become {target.value}"
                )

            # Compare-and-set so two racing transitions cannot both win
            updated = self.db.query(Appointment).filter(
                Appointment.id == booking_id,
                Appointment.status == current,
            ).update({"status": target}, synchronize_session=False)
            if not updated:
                self.db.rollback()
                raise InvalidTransition("Appointment status changed concurrently")

            self.db.commit()
            self.db.refresh(appointment)

        logger.info(f"Appointment {booking_id}: {current.value} -> {target.value} by {actor_role.value} {actor_id}")
        return appointment

    def _ensure_owner(self, appointment: Appointment, actor_id: str, actor_role: UserRole):
        if actor_role == UserRole.ADMIN:
            return
        if actor_role == UserRole.PATIENT and appointment.patient_id == actor_id:
            return
        if actor_role == UserRole.DOCTOR and appointment.doctor_id == actor_id:
            return
        raise Forbidden("You cannot change this appointment")

    def list_for_patient(self, patient_id: str) -> List[Appointment]:
        with store_guard(self.db, "Failed to fetch appointments"):
            return self.db.query(Appointment).options(
                joinedload(Appointment.doctor)
            ).filter(Appointment.patient_id == patient_id).all()

    def list_for_doctor(self, doctor_id: str) -> List[Appointment]:
        with store_guard(self.db, "Failed to fetch appointments"):
            return self.db.query(Appointment).options(
                joinedload(Appointment.doctor)
            ).filter(Appointment.doctor_id == doctor_id).all()
