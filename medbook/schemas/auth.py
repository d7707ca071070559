from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

from ..core.security import UserRole

class PatientRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    photo: Optional[str] = None
    gender: Optional[str] = None
    phone: Optional[str] = None

class UserLogin(BaseModel):
    # Any string is looked up; unknown ones are reported as not found
    email: str
    password: str

class TokenByIdRequest(BaseModel):
    id: str

class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=1)

class PrincipalResponse(BaseModel):
    """Public view of a principal; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    photo: Optional[str] = None

class MessageResponse(BaseModel):
    success: bool = True
    message: str

class SignupResponse(MessageResponse):
    data: PrincipalResponse

class TokenResponse(MessageResponse):
    token: str
    role: UserRole
    data: Optional[PrincipalResponse] = None

class PrincipalEnvelope(MessageResponse):
    data: PrincipalResponse
