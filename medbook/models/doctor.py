from sqlalchemy import Column, Integer, String, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base
from ..core.security import UserRole
from .principal import PrincipalMixin, role_column

class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"

class Doctor(PrincipalMixin, Base):
    __tablename__ = "doctors"

    role = role_column(UserRole.DOCTOR)

    # Professional information
    specialization = Column(String(100), nullable=True)
    bio = Column(Text, nullable=True)

    # Price per appointment in minor currency units (cents)
    ticket_price = Column(Integer, nullable=False, default=0)
    is_approved = Column(SQLEnum(ApprovalStatus), default=ApprovalStatus.PENDING)

    # Relationships
    appointments = relationship("Appointment", back_populates="doctor")
