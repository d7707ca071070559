from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..core.security import UserRole
from .principal import PrincipalMixin, role_column

class Patient(PrincipalMixin, Base):
    __tablename__ = "patients"

    role = role_column(UserRole.PATIENT)

    # Contact information
    gender = Column(String(20), nullable=True)
    phone = Column(String(20), nullable=True)

    # Relationships
    appointments = relationship("Appointment", back_populates="patient")
