import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Uuid, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..core.security import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column("user_id", Uuid, primary_key=True, default=uuid.uuid4)
    citizen_id = Column(String(20), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    roles = relationship("UserRoleAssignment", back_populates="user", cascade="all, delete-orphan")
    patient = relationship("PatientProfile", back_populates="user", uselist=False)
    doctor = relationship("DoctorProfile", back_populates="user", uselist=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.full_name}')>"


class UserRoleAssignment(Base):
    __tablename__ = "user_roles"

    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    role = Column(SQLEnum(UserRole, name="role_type"), primary_key=True)

    user = relationship("User", back_populates="roles")

    def __repr__(self):
        return f"<UserRoleAssignment(user_id={self.user_id}, role='{self.role.value}')>"
