from sqlalchemy import Column, Integer, String, Time, ForeignKey, Uuid, CheckConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base


class TimeSlot(Base):
    """A doctor's recurring weekly availability window."""

    __tablename__ = "time_slots"
    __table_args__ = (
        CheckConstraint("day_of_weeks BETWEEN 0 AND 6", name="ck_time_slots_day_of_weeks"),
        CheckConstraint("start_time < end_time", name="ck_time_slots_range"),
    )

    id = Column("timeslot_id", Integer, primary_key=True, index=True)
    doctor_id = Column(Uuid, ForeignKey("doctor_profile.user_id", ondelete="CASCADE"), nullable=False, index=True)

    # 0 = Sunday ... 6 = Saturday
    day_of_weeks = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    place_name = Column(String(255), nullable=False)

    doctor_profile = relationship("DoctorProfile", back_populates="time_slots")
    appointments = relationship("Appointment", back_populates="time_slot", passive_deletes="all")

    def __repr__(self):
        return f"<TimeSlot(id={self.id}, doctor_id={self.doctor_id}, day={self.day_of_weeks}, {self.start_time}-{self.end_time})>"
