from sqlalchemy import Column, String, Enum as SQLEnum
from ..core.database import Base, new_id
from ..core.security import UserRole

class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)  # Never serialized outward
    role = Column(
        SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles], native_enum=False),
        nullable=False,
        default=UserRole.CLIENT,
    )
    phone = Column(String(32), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
