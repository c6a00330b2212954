from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Index, Uuid, Enum as SQLEnum, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELED = "CANCELED"


# Statuses that hold a (time slot, date) pair
ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.ACCEPTED)

_ACTIVE_PREDICATE = text("status IN ('PENDING', 'ACCEPTED')")


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # At most one live booking per slot and date
        Index(
            "uq_appointments_slot_date_active",
            "timeslot_id",
            "date",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
    )

    id = Column("appointment_id", Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Uuid, ForeignKey("users.user_id"), nullable=False, index=True)
    timeslot_id = Column(Integer, ForeignKey("time_slots.timeslot_id", ondelete="RESTRICT"), nullable=False)

    # Appointment details
    date = Column(Date, nullable=False, index=True)
    status = Column(
        SQLEnum(AppointmentStatus, name="appointment_status"),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )

    # Tracking
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    patient = relationship("User")
    time_slot = relationship("TimeSlot", back_populates="appointments")

    def __repr__(self):
        return f"<Appointment(id={self.id}, patient_id={self.patient_id}, timeslot_id={self.timeslot_id}, date='{self.date}', status='{self.status}')>"
