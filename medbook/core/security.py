from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import MissingBackendError
from fastapi.security import HTTPBearer
from pydantic import BaseModel, ValidationError
from enum import Enum

from .config import settings
from .exceptions import Forbidden, InternalFailure, InvalidToken

# Bearer credentials are checked by the gate itself so a missing header is a 401
security = HTTPBearer(auto_error=False)

class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    PATIENT = "patient"

class TokenPayload(BaseModel):
    id: str
    role: UserRole
    exp: Optional[int] = None

# Password utilities
class PasswordHasher:
    """bcrypt hashing with a fixed work factor and a fresh salt per call."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        try:
            return self._context.hash(plaintext)
        except MissingBackendError as exc:
            raise InternalFailure() from exc

    def verify(self, plaintext: str, digest: Optional[str]) -> bool:
        """Check ``plaintext`` against ``digest``; unusable digests never match."""
        if not digest:
            return False
        try:
            return self._context.verify(plaintext, digest)
        except MissingBackendError as exc:
            raise InternalFailure() from exc
        except (ValueError, TypeError):
            return False

pwd_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)

# JWT utilities
class TokenIssuer:
    """Mints and verifies signed tokens asserting ``(principal id, role)``.

    The signing secret is handed in by the caller; the application builds a
    single issuer from settings at startup.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(days=15),
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(self, principal_id: str, role: UserRole, now: datetime = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "id": principal_id,
            "role": UserRole(role).value,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenPayload:
        """Decode ``token``; expired, malformed or badly signed tokens raise ``InvalidToken``."""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )
            return TokenPayload(**payload)
        except (JWTError, ValidationError):
            raise InvalidToken()

    def authorize(self, token: str, allowed_roles: Iterable[UserRole]) -> TokenPayload:
        token_payload = self.verify(token)
        if token_payload.role not in set(allowed_roles):
            raise Forbidden()
        return token_payload

def create_token_issuer() -> TokenIssuer:
    return TokenIssuer(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_delta=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )
