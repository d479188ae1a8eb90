from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from datetime import datetime
import enum

from app.core.database import Base


def enum_values(enum_cls):
    """Persist enum values ("student") rather than member names ("STUDENT")"""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    """User roles"""
    ADMIN = "admin"
    LECTURER = "lecturer"
    STUDENT = "student"


class User(Base):
    """University member identified by the institution-issued computer number"""
    __tablename__ = "users"

    computer_number = Column(String(10), primary_key=True)
    role = Column(
        SQLEnum(UserRole, name="user_role", values_callable=enum_values),
        default=UserRole.STUDENT,
        nullable=False,
        index=True
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User {self.computer_number} ({self.role.value})>"
