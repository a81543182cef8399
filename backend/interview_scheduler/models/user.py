import enum

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.sql import func

from ..database import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    HR = "HR"
    INTERVIEW_PANELIST = "INTERVIEW_PANELIST"
    FACULTY = "FACULTY"


class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


INTERVIEWER_ROLES = frozenset({UserRole.INTERVIEW_PANELIST, UserRole.FACULTY})
HR_ROLES = frozenset({UserRole.HR, UserRole.ADMIN})


class User(Base):
    """Identity record owned by the account service; read-only here."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(Enum(UserRole, native_enum=False, length=32), nullable=False)
    status = Column(Enum(UserStatus, native_enum=False, length=16), nullable=False, default=UserStatus.ACTIVE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
