from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from functools import lru_cache
from sqlalchemy.orm import Session
from typing import Optional, List

from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import Unauthorized
from ..core.security import (
    security, create_token_issuer, TokenIssuer, TokenPayload, UserRole
)
from ..services.auth_service import AuthService
from ..services.booking_service import AppointmentLedger
from ..services.payment import PaymentInitiator, create_payment_initiator

@lru_cache()
def get_token_issuer() -> TokenIssuer:
    """Single issuer built from settings at first use."""
    return create_token_issuer()

@lru_cache()
def get_payment_initiator() -> PaymentInitiator:
    return create_payment_initiator(settings)

def get_auth_service(
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer)
) -> AuthService:
    return AuthService(db, issuer)

def get_ledger(
    db: Session = Depends(get_db),
    payments: PaymentInitiator = Depends(get_payment_initiator)
) -> AppointmentLedger:
    return AppointmentLedger(db, payments)

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """Extract the bearer token from the Authorization header."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No token, authorization denied")
    return credentials.credentials

# Role-based access control dependencies
def require_role(allowed_roles: List[UserRole]):
    """Create a dependency that requires one of ``allowed_roles``."""
    def role_checker(
        token: str = Depends(get_bearer_token),
        issuer: TokenIssuer = Depends(get_token_issuer)
    ) -> TokenPayload:
        return issuer.authorize(token, allowed_roles)

    return role_checker

get_current_principal = require_role(list(UserRole))
get_patient = require_role([UserRole.PATIENT])
get_doctor = require_role([UserRole.DOCTOR])
