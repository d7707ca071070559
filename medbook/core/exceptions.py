from contextlib import contextmanager
from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

logger = logging.getLogger(__name__)

class ServiceError(HTTPException):
    """Base for every failure reported to API clients.

    Subclasses fix the status code; ``detail`` is the human-readable message
    rendered into the ``{"success": false, "message": ...}`` envelope.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )

class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"

class AlreadyExists(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "User already exists"

class InvalidCredentials(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid credentials"

class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"

    def __init__(self, detail: str = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})

class InvalidToken(Unauthorized):
    default_detail = "Invalid or expired token"

class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You're not authorized"

class InvalidSchedule(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cannot select date and time in the past"

class SlotUnavailable(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This time slot is already booked"

class InvalidTransition(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Appointment can no longer change status"

class PaymentInitiationFailed(ServiceError):
    default_detail = "Error creating checkout session"

class InternalFailure(ServiceError):
    default_detail = "Internal server error, Try again"

@contextmanager
def store_guard(db: Session, message: str = None):
    """Map store faults to ``InternalFailure`` after rolling back the session."""
    try:
        yield
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Store failure: %s", message or InternalFailure.default_detail)
        raise InternalFailure(message)
