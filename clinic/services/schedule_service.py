from datetime import date, datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID
import logging

from ..core.errors import BadRequestError, NotFoundError
from ..core.security import UserRole
from ..repositories.schedule_repository import ScheduleRepository
from ..schemas.appointment import (
    AppointmentOverview, DoctorAppointmentView, DoctorListItem,
    TimeSlotRequest, TimeSlotView
)
from .appointment_service import STATUS_CODES, format_date, format_time, parse_date, parse_time_range
from .role_guard import RoleGuard

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class ScheduleService:
    """Appointment listings for patients and doctors, and time-slot upkeep."""

    def __init__(
        self,
        repo: ScheduleRepository,
        guard: RoleGuard,
        today: Optional[Callable[[], date]] = None,
    ):
        self.repo = repo
        self.guard = guard
        self.today = today or utc_today

    # Patient views

    def patient_upcoming(self, patient_id: UUID) -> List[AppointmentOverview]:
        self.guard.require_role(patient_id, UserRole.PATIENT)
        return [self._overview(row) for row in self.repo.patient_upcoming(patient_id, self.today())]

    def patient_others(self, patient_id: UUID) -> List[AppointmentOverview]:
        """Canceled, rejected, and accepted-but-past appointments."""
        self.guard.require_role(patient_id, UserRole.PATIENT)
        return [self._overview(row) for row in self.repo.patient_others(patient_id, self.today())]

    def patient_on_date(self, patient_id: UUID, on_date: str) -> List[AppointmentOverview]:
        self.guard.require_role(patient_id, UserRole.PATIENT)
        rows = self.repo.patient_on_date(patient_id, parse_date(on_date))
        return [self._overview(row) for row in rows]

    # Doctor views

    def doctor_on_date(self, doctor_id: UUID, on_date: str) -> List[DoctorAppointmentView]:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        rows = self.repo.doctor_on_date(doctor_id, parse_date(on_date))
        return [self._doctor_view(row) for row in rows]

    def doctor_pending(self, doctor_id: UUID) -> List[DoctorAppointmentView]:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        return [self._doctor_view(row) for row in self.repo.doctor_pending(doctor_id)]

    def doctor_assessed(self, doctor_id: UUID) -> List[DoctorAppointmentView]:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        return [self._doctor_view(row) for row in self.repo.doctor_assessed(doctor_id)]

    # Doctors and time slots

    def list_doctors(self) -> List[DoctorListItem]:
        return [
            DoctorListItem(
                doctor_id=user_id,
                doctor_name=f"{first_name} {last_name}",
                department=department,
            )
            for user_id, first_name, last_name, department in self.repo.list_doctors()
        ]

    def doctor_timeslots(self, doctor_id: UUID) -> List[TimeSlotView]:
        """Public listing of a doctor's weekly slots."""
        return [self._slot_view(slot) for slot in self.repo.list_timeslots(doctor_id)]

    def my_timeslots(self, doctor_id: UUID) -> List[TimeSlotView]:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        return self.doctor_timeslots(doctor_id)

    def create_timeslot(self, doctor_id: UUID, request: TimeSlotRequest) -> TimeSlotView:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        start_time, end_time = self._validate_slot(request)
        slot = self.repo.create_timeslot(
            doctor_id, request.day_of_weeks, request.place_name, start_time, end_time
        )
        logger.info(f"Time slot {slot.id} created by {doctor_id}")
        return self._slot_view(slot)

    def update_timeslot(self, doctor_id: UUID, timeslot_id: int, request: TimeSlotRequest) -> None:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        start_time, end_time = self._validate_slot(request)
        rows = self.repo.update_timeslot(
            timeslot_id, doctor_id, request.day_of_weeks, request.place_name, start_time, end_time
        )
        if rows == 0:
            raise NotFoundError("Time slot not found")

    def delete_timeslot(self, doctor_id: UUID, timeslot_id: int) -> None:
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        if self.repo.delete_timeslot(timeslot_id, doctor_id) == 0:
            raise NotFoundError("Time slot not found")
        logger.info(f"Time slot {timeslot_id} removed by {doctor_id}")

    @staticmethod
    def _validate_slot(request: TimeSlotRequest):
        if not 0 <= request.day_of_weeks <= 6:
            raise BadRequestError("day_of_weeks must be between 0 and 6")
        return parse_time_range(request.start_time, request.end_time)

    @staticmethod
    def _overview(row) -> AppointmentOverview:
        appointment_id, first_name, last_name, department, place_name, on_date, start, end, status = row
        return AppointmentOverview(
            appointment_id=appointment_id,
            doctor_name=f"{first_name} {last_name}",
            department=department,
            place_name=place_name,
            date=format_date(on_date),
            start_time=format_time(start),
            end_time=format_time(end),
            status=status,
        )

    @staticmethod
    def _doctor_view(row) -> DoctorAppointmentView:
        appointment_id, patient_id, first_name, last_name, on_date, start, end, status = row
        return DoctorAppointmentView(
            appointment_id=appointment_id,
            patient_id=patient_id,
            patient_name=f"{first_name} {last_name}",
            date=format_date(on_date),
            start_time=format_time(start),
            end_time=format_time(end),
            status=status,
            status_code=STATUS_CODES[status],
        )

    @staticmethod
    def _slot_view(slot) -> TimeSlotView:
        return TimeSlotView(
            timeslot_id=slot.id,
            day_of_weeks=slot.day_of_weeks,
            place_name=slot.place_name,
            start_time=format_time(slot.start_time),
            end_time=format_time(slot.end_time),
        )
