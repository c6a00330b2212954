from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class DoctorProfile(Base):
    __tablename__ = "doctor_profile"

    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)

    # Medical license number, used with the citizen id to log in
    mln = Column(String(50), unique=True, nullable=False)

    # Professional information
    department = Column(String(100), nullable=True)
    position = Column(String(100), nullable=True)

    user = relationship("User", back_populates="doctor")
    time_slots = relationship("TimeSlot", back_populates="doctor_profile")

    def __repr__(self):
        return f"<DoctorProfile(user_id={self.user_id}, mln='{self.mln}', department='{self.department}')>"
