from fastapi import APIRouter, Depends

from ...api.deps import get_auth_service, get_current_principal
from ...core.security import TokenPayload
from ...services.auth_service import AuthService
from ...schemas.auth import (
    PatientRegister, UserLogin, TokenByIdRequest, ChangePassword,
    MessageResponse, PrincipalEnvelope, PrincipalResponse, SignupResponse,
    TokenResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/signup", response_model=SignupResponse)
def signup(
    user_data: PatientRegister,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register a new patient."""
    patient = auth_service.register_patient(user_data)
    return SignupResponse(
        message="User registered successfully",
        data=PrincipalResponse.model_validate(patient),
    )

@router.post("/login", response_model=TokenResponse)
def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Authenticate a patient, doctor or admin and return a signed token."""
    token, resolved = auth_service.authenticate(login_data)
    return TokenResponse(
        message="Successfully logged in",
        token=token,
        role=resolved.role,
        data=PrincipalResponse.model_validate(resolved.principal),
    )

@router.post("/token-by-id", response_model=TokenResponse)
def token_by_id(
    request_data: TokenByIdRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Mint a token for a known principal id (service-to-service)."""
    token, resolved = auth_service.token_by_id(request_data.id)
    return TokenResponse(
        message="Token generated successfully",
        token=token,
        role=resolved.role,
    )

@router.get("/me", response_model=PrincipalEnvelope)
def get_current_user_info(
    token_payload: TokenPayload = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Get current principal information."""
    resolved = auth_service.current_principal(token_payload.id, token_payload.role)
    return PrincipalEnvelope(
        message="Profile fetched successfully",
        data=PrincipalResponse.model_validate(resolved.principal),
    )

@router.post("/change-password", response_model=MessageResponse)
def change_password(
    password_data: ChangePassword,
    token_payload: TokenPayload = Depends(get_current_principal),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Change the current principal's password."""
    auth_service.change_password(token_payload.id, token_payload.role, password_data)
    return MessageResponse(message="Password changed successfully")
