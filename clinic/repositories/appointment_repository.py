from abc import ABC, abstractmethod
from datetime import date, time
from typing import Iterable, NamedTuple, Optional
from uuid import UUID
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..models.appointment import Appointment, AppointmentStatus
from ..models.timeslot import TimeSlot

logger = logging.getLogger(__name__)


class AppointmentAccess(NamedTuple):
    """Who may see an appointment: its patient and the doctor owning its slot."""

    patient_id: UUID
    doctor_id: UUID


class AppointmentRepository(ABC):
    """Store access behind the appointment state machine.

    Status updates take the set of statuses the row may currently be in and
    return the number of rows changed; zero means the row is missing, is
    not the actor's, or is not in an allowed source status.
    """

    @abstractmethod
    def find_timeslot_id(
        self, doctor_id: UUID, day_of_week: int, start_time: time, end_time: time
    ) -> Optional[int]:
        ...

    @abstractmethod
    def create(self, patient_id: UUID, timeslot_id: int, on_date: date) -> Appointment:
        """Insert a Pending appointment; ConflictError if the slot is taken."""

    @abstractmethod
    def by_id(self, appointment_id: int) -> Optional[Appointment]:
        ...

    @abstractmethod
    def access_of(self, appointment_id: int) -> Optional[AppointmentAccess]:
        ...

    @abstractmethod
    def update_status_for_doctor(
        self,
        appointment_id: int,
        doctor_id: UUID,
        status: AppointmentStatus,
        from_statuses: Iterable[AppointmentStatus],
    ) -> int:
        ...

    @abstractmethod
    def update_status_for_patient(
        self,
        appointment_id: int,
        patient_id: UUID,
        status: AppointmentStatus,
        from_statuses: Iterable[AppointmentStatus],
    ) -> int:
        ...

    @abstractmethod
    def delete_for_patient(self, appointment_id: int, patient_id: UUID) -> int:
        ...


class SqlAlchemyAppointmentRepository(AppointmentRepository):
    def __init__(self, db: Session):
        self.db = db

    def find_timeslot_id(self, doctor_id, day_of_week, start_time, end_time):
        row = (
            self.db.query(TimeSlot.id)
            .filter(
                TimeSlot.doctor_id == doctor_id,
                TimeSlot.day_of_weeks == day_of_week,
                TimeSlot.start_time == start_time,
                TimeSlot.end_time == end_time,
            )
            .first()
        )
        return row[0] if row else None

    def create(self, patient_id, timeslot_id, on_date):
        appointment = Appointment(
            patient_id=patient_id,
            timeslot_id=timeslot_id,
            date=on_date,
            status=AppointmentStatus.PENDING,
        )
        self.db.add(appointment)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Booking of slot {timeslot_id} on {on_date} rejected: {e.orig}")
            raise ConflictError("Time slot is already booked for this date")
        self.db.refresh(appointment)
        return appointment

    def by_id(self, appointment_id):
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def access_of(self, appointment_id):
        row = (
            self.db.query(Appointment.patient_id, TimeSlot.doctor_id)
            .join(TimeSlot, TimeSlot.id == Appointment.timeslot_id)
            .filter(Appointment.id == appointment_id)
            .first()
        )
        return AppointmentAccess(*row) if row else None

    def update_status_for_doctor(self, appointment_id, doctor_id, status, from_statuses):
        owned_slots = select(TimeSlot.id).where(TimeSlot.doctor_id == doctor_id)
        query = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.timeslot_id.in_(owned_slots),
            Appointment.status.in_(list(from_statuses)),
        )
        return self._update_status(query, status)

    def update_status_for_patient(self, appointment_id, patient_id, status, from_statuses):
        query = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.patient_id == patient_id,
            Appointment.status.in_(list(from_statuses)),
        )
        return self._update_status(query, status)

    def delete_for_patient(self, appointment_id, patient_id):
        rows = (
            self.db.query(Appointment)
            .filter(Appointment.id == appointment_id, Appointment.patient_id == patient_id)
            .delete(synchronize_session=False)
        )
        self._commit_if(rows)
        return rows

    def _update_status(self, query, status: AppointmentStatus) -> int:
        rows = query.update({Appointment.status: status}, synchronize_session=False)
        self._commit_if(rows)
        return rows

    def _commit_if(self, rows: int):
        if rows:
            self.db.commit()
        else:
            self.db.rollback()
