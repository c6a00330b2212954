from sqlalchemy import Column, Integer, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class PatientProfile(Base):
    __tablename__ = "patient_profile"

    user_id = Column(Uuid, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)

    # Hospital number, used with the citizen id to log in
    hn = Column(Integer, unique=True, nullable=False)

    user = relationship("User", back_populates="patient")

    def __repr__(self):
        return f"<PatientProfile(user_id={self.user_id}, hn={self.hn})>"
