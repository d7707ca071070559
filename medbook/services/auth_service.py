from sqlalchemy.orm import Session
import logging

from ..core.exceptions import AlreadyExists, InvalidCredentials, store_guard
from ..core.security import PasswordHasher, TokenIssuer, UserRole, pwd_hasher
from ..models import Patient
from ..schemas.auth import PatientRegister, UserLogin, ChangePassword
from .credential_store import CredentialStore
from .identity import IdentityResolver, ResolvedPrincipal

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session, issuer: TokenIssuer, hasher: PasswordHasher = pwd_hasher):
        self.db = db
        self.issuer = issuer
        self.hasher = hasher
        self.store = CredentialStore(db)
        self.resolver = IdentityResolver(self.store)

    def register_patient(self, user_data: PatientRegister) -> Patient:
        """Register a new patient; only the patient collection is checked for the email."""
        with store_guard(self.db):
            if self.store.patients.find_by_email(user_data.email):
                raise AlreadyExists()

            patient = self.store.patients.insert(
                email=user_data.email,
                password_hash=self.hasher.hash(user_data.password),
                name=user_data.name,
                photo=user_data.photo,
                gender=user_data.gender,
                phone=user_data.phone,
                role=UserRole.PATIENT,
            )

        logger.info(f"Registered patient {patient.id}")
        return patient

    def authenticate(self, login_data: UserLogin) -> tuple:
        """Return ``(token, resolved)`` for a valid email/password pair."""
        with store_guard(self.db, "Failed to login"):
            resolved = self.resolver.resolve_by_email(login_data.email)

        if not self.hasher.verify(login_data.password, resolved.principal.password_hash):
            raise InvalidCredentials()

        return self.issuer.issue(resolved.principal.id, resolved.role), resolved

    def token_by_id(self, principal_id: str) -> tuple:
        with store_guard(self.db):
            resolved = self.resolver.resolve_any_by_id(principal_id)
        return self.issuer.issue(resolved.principal.id, resolved.role), resolved

    def current_principal(self, principal_id: str, role: UserRole) -> ResolvedPrincipal:
        with store_guard(self.db):
            return self.resolver.resolve_by_id(principal_id, role)

    def change_password(self, principal_id: str, role: UserRole, password_data: ChangePassword):
        resolved = self.current_principal(principal_id, role)

        if not self.hasher.verify(password_data.current_password, resolved.principal.password_hash):
            raise InvalidCredentials("Current password is incorrect")

        with store_guard(self.db, "Failed to update password"):
            self.store.for_role(resolved.role).update_fields(
                resolved.principal.id,
                password_hash=self.hasher.hash(password_data.new_password),
            )

        logger.info(f"Password changed for {resolved.role.value} {resolved.principal.id}")
