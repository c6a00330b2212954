from datetime import date, time
from typing import List
from uuid import UUID
import logging

from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from ..core.errors import ConflictError
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from ..models.doctor import DoctorProfile
from ..models.timeslot import TimeSlot
from ..models.user import User, UserRoleAssignment

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """Read-side appointment queries and doctors' time-slot maintenance."""

    def __init__(self, db: Session):
        self.db = db

    # Patient views

    def _patient_overview_query(self, patient_id: UUID):
        doctor = aliased(User)
        return (
            self.db.query(
                Appointment.id,
                doctor.first_name,
                doctor.last_name,
                DoctorProfile.department,
                TimeSlot.place_name,
                Appointment.date,
                TimeSlot.start_time,
                TimeSlot.end_time,
                Appointment.status,
            )
            .join(TimeSlot, TimeSlot.id == Appointment.timeslot_id)
            .join(doctor, doctor.id == TimeSlot.doctor_id)
            .outerjoin(DoctorProfile, DoctorProfile.user_id == TimeSlot.doctor_id)
            .filter(Appointment.patient_id == patient_id)
        )

    def patient_upcoming(self, patient_id: UUID, today: date) -> list:
        return (
            self._patient_overview_query(patient_id)
            .filter(Appointment.status.in_(ACTIVE_STATUSES), Appointment.date >= today)
            .order_by(Appointment.date, TimeSlot.start_time)
            .all()
        )

    def patient_others(self, patient_id: UUID, today: date) -> list:
        return (
            self._patient_overview_query(patient_id)
            .filter(
                or_(
                    Appointment.status.in_([AppointmentStatus.CANCELED, AppointmentStatus.REJECTED]),
                    and_(Appointment.status == AppointmentStatus.ACCEPTED, Appointment.date < today),
                )
            )
            .order_by(Appointment.date.desc(), TimeSlot.start_time)
            .all()
        )

    def patient_on_date(self, patient_id: UUID, on_date: date) -> list:
        return (
            self._patient_overview_query(patient_id)
            .filter(Appointment.status == AppointmentStatus.ACCEPTED, Appointment.date == on_date)
            .order_by(TimeSlot.start_time)
            .all()
        )

    # Doctor views

    def _doctor_view_query(self, doctor_id: UUID):
        patient = aliased(User)
        return (
            self.db.query(
                Appointment.id,
                Appointment.patient_id,
                patient.first_name,
                patient.last_name,
                Appointment.date,
                TimeSlot.start_time,
                TimeSlot.end_time,
                Appointment.status,
            )
            .join(TimeSlot, TimeSlot.id == Appointment.timeslot_id)
            .join(patient, patient.id == Appointment.patient_id)
            .filter(TimeSlot.doctor_id == doctor_id)
        )

    def doctor_on_date(self, doctor_id: UUID, on_date: date) -> list:
        return (
            self._doctor_view_query(doctor_id)
            .filter(Appointment.date == on_date)
            .order_by(TimeSlot.start_time)
            .all()
        )

    def doctor_pending(self, doctor_id: UUID) -> list:
        return (
            self._doctor_view_query(doctor_id)
            .filter(Appointment.status == AppointmentStatus.PENDING)
            .order_by(Appointment.date, TimeSlot.start_time)
            .all()
        )

    def doctor_assessed(self, doctor_id: UUID) -> list:
        return (
            self._doctor_view_query(doctor_id)
            .filter(Appointment.status != AppointmentStatus.PENDING)
            .order_by(Appointment.date.desc(), TimeSlot.start_time)
            .all()
        )

    # Doctors and time slots

    def list_doctors(self) -> list:
        return (
            self.db.query(User.id, User.first_name, User.last_name, DoctorProfile.department)
            .join(
                UserRoleAssignment,
                and_(UserRoleAssignment.user_id == User.id, UserRoleAssignment.role == UserRole.DOCTOR),
            )
            .outerjoin(DoctorProfile, DoctorProfile.user_id == User.id)
            .order_by(User.first_name, User.last_name)
            .all()
        )

    def list_timeslots(self, doctor_id: UUID) -> List[TimeSlot]:
        return (
            self.db.query(TimeSlot)
            .filter(TimeSlot.doctor_id == doctor_id)
            .order_by(TimeSlot.day_of_weeks, TimeSlot.start_time)
            .all()
        )

    def create_timeslot(
        self, doctor_id: UUID, day_of_weeks: int, place_name: str, start_time: time, end_time: time
    ) -> TimeSlot:
        slot = TimeSlot(
            doctor_id=doctor_id,
            day_of_weeks=day_of_weeks,
            place_name=place_name,
            start_time=start_time,
            end_time=end_time,
        )
        self.db.add(slot)
        self._commit("create time slot")
        self.db.refresh(slot)
        return slot

    def update_timeslot(
        self,
        timeslot_id: int,
        doctor_id: UUID,
        day_of_weeks: int,
        place_name: str,
        start_time: time,
        end_time: time,
    ) -> int:
        query = self.db.query(TimeSlot).filter(TimeSlot.id == timeslot_id, TimeSlot.doctor_id == doctor_id)
        return self._write(
            "update time slot",
            lambda: query.update(
                {
                    TimeSlot.day_of_weeks: day_of_weeks,
                    TimeSlot.place_name: place_name,
                    TimeSlot.start_time: start_time,
                    TimeSlot.end_time: end_time,
                },
                synchronize_session=False,
            ),
        )

    def delete_timeslot(self, timeslot_id: int, doctor_id: UUID) -> int:
        query = self.db.query(TimeSlot).filter(TimeSlot.id == timeslot_id, TimeSlot.doctor_id == doctor_id)
        return self._write("delete time slot", lambda: query.delete(synchronize_session=False))

    def _write(self, action: str, statement) -> int:
        """Run a bulk statement and commit; store constraint failures become 409."""
        try:
            rows = statement()
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Could not {action}: {e.orig}")
            raise ConflictError(f"Could not {action}")
        return rows

    def _commit(self, action: str):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Could not {action}: {e.orig}")
            raise ConflictError(f"Could not {action}")
