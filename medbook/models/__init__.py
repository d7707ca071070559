from .admin import Admin
from .appointment import Appointment, AppointmentStatus, ALLOWED_TRANSITIONS
from .doctor import Doctor, ApprovalStatus
from .patient import Patient

__all__ = [
    "Admin",
    "Appointment",
    "AppointmentStatus",
    "ALLOWED_TRANSITIONS",
    "ApprovalStatus",
    "Doctor",
    "Patient",
]
