from sqlalchemy.orm import Session
from typing import Generic, Optional, Type, TypeVar

from ..core.security import UserRole
from ..models import Admin, Doctor, Patient

P = TypeVar("P", Patient, Doctor, Admin)

class PrincipalStore(Generic[P]):
    """Keyed collection of one identity class."""

    def __init__(self, db: Session, model: Type[P]):
        self.db = db
        self.model = model

    def find_by_email(self, email: str) -> Optional[P]:
        return self.db.query(self.model).filter(self.model.email == email).first()

    def find_by_id(self, principal_id: str) -> Optional[P]:
        return self.db.get(self.model, principal_id)

    def insert(self, **fields) -> P:
        principal = self.model(**fields)
        self.db.add(principal)
        self.db.commit()
        self.db.refresh(principal)
        return principal

    def update_fields(self, principal_id: str, **fields) -> Optional[P]:
        principal = self.find_by_id(principal_id)
        if principal is None:
            return None
        # Identity columns are never rewritten through this path
        fields.pop("id", None)
        fields.pop("email", None)
        fields.pop("role", None)
        for key, value in fields.items():
            setattr(principal, key, value)
        self.db.commit()
        self.db.refresh(principal)
        return principal

class CredentialStore:
    """The three identity collections behind one session."""

    def __init__(self, db: Session):
        self.db = db
        self.patients = PrincipalStore(db, Patient)
        self.doctors = PrincipalStore(db, Doctor)
        self.admins = PrincipalStore(db, Admin)

    def for_role(self, role: UserRole) -> PrincipalStore:
        return {
            UserRole.PATIENT: self.patients,
            UserRole.DOCTOR: self.doctors,
            UserRole.ADMIN: self.admins,
        }[UserRole(role)]
