from ..core.database import Base
from ..core.security import UserRole
from .principal import PrincipalMixin, role_column

class Admin(PrincipalMixin, Base):
    __tablename__ = "admins"

    role = role_column(UserRole.ADMIN)
