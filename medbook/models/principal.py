from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid

from ..core.security import UserRole

def new_id() -> str:
    return uuid.uuid4().hex

class PrincipalMixin:
    """Columns shared by every identity class.

    Each class lives in its own table, so an email is only unique within that
    class; the identity resolver decides which class wins on a collision.
    """

    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    photo = Column(String(512), nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<{type(self).__name__}(id={self.id}, email='{self.email}', role='{self.role}')>"

def role_column(role: UserRole) -> Column:
    return Column(SQLEnum(UserRole), nullable=False, default=role)
