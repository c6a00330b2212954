from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.sql import func

from ..core.database import Base


class Diagnosis(Base):
    __tablename__ = "diagnoses"

    id = Column("diagnosis_id", Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.appointment_id", ondelete="CASCADE"), nullable=False)
    patient_id = Column(Uuid, ForeignKey("users.user_id"), nullable=False, index=True)
    doctor_id = Column(Uuid, ForeignKey("users.user_id"), nullable=False)
    symptom = Column(Text, nullable=False)
    recorded_at = Column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Diagnosis(id={self.id}, appointment_id={self.appointment_id}, patient_id={self.patient_id})>"
