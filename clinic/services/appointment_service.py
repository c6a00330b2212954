from datetime import date, datetime, time
from uuid import UUID
import logging

from ..core.errors import BadRequestError, NotFoundError
from ..core.security import UserRole
from ..models.appointment import AppointmentStatus
from ..repositories.appointment_repository import AppointmentRepository
from ..schemas.appointment import AppointmentResponse, CreateAppointmentRequest
from .role_guard import RoleGuard

logger = logging.getLogger(__name__)

# Target status -> (role allowed to cause it, statuses it may be reached from).
# Rejected and Canceled never appear as a source, so they are terminal.
TRANSITIONS = {
    AppointmentStatus.ACCEPTED: (UserRole.DOCTOR, (AppointmentStatus.PENDING,)),
    AppointmentStatus.REJECTED: (UserRole.DOCTOR, (AppointmentStatus.PENDING,)),
    AppointmentStatus.CANCELED: (
        UserRole.PATIENT,
        (AppointmentStatus.PENDING, AppointmentStatus.ACCEPTED),
    ),
}

DOCTOR_ACTIONS = {
    "accept": AppointmentStatus.ACCEPTED,
    "ACCEPT": AppointmentStatus.ACCEPTED,
    "reject": AppointmentStatus.REJECTED,
    "REJECT": AppointmentStatus.REJECTED,
}

# Numeric codes shown to doctors
STATUS_CODES = {
    AppointmentStatus.ACCEPTED: 1,
    AppointmentStatus.PENDING: 2,
    AppointmentStatus.REJECTED: 3,
    AppointmentStatus.CANCELED: 4,
}


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise BadRequestError("date must be in YYYY-MM-DD format")


def parse_time(value: str) -> time:
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(value, fmt).time()
        except (TypeError, ValueError):
            continue
    raise BadRequestError("time must be in HH:MM or HH:MM:SS format")


def parse_time_range(start: str, end: str):
    start_time, end_time = parse_time(start), parse_time(end)
    if start_time >= end_time:
        raise BadRequestError("start_time must be before end_time")
    return start_time, end_time


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def format_time(value: time) -> str:
    return value.strftime("%H:%M")


def day_of_week(value: date) -> int:
    """Weekday index with Sunday = 0 through Saturday = 6."""
    return (value.weekday() + 1) % 7


class AppointmentService:
    """Booking and the appointment status state machine.

    Pending -> Accepted / Rejected (owning doctor), Pending or Accepted ->
    Canceled (owning patient). A transition that matches no row, because
    the appointment is missing, belongs to someone else, or is not in an
    allowed source status, is reported as NotFound.
    """

    def __init__(self, repo: AppointmentRepository, guard: RoleGuard):
        self.repo = repo
        self.guard = guard

    def book(self, patient_id: UUID, request: CreateAppointmentRequest) -> AppointmentResponse:
        """Book the doctor's weekly slot matching the requested date and times."""
        on_date = parse_date(request.date)
        start_time, end_time = parse_time_range(request.start_time, request.end_time)

        self.guard.require_role(patient_id, UserRole.PATIENT)

        timeslot_id = self.repo.find_timeslot_id(
            request.doctor_id, day_of_week(on_date), start_time, end_time
        )
        if timeslot_id is None:
            raise NotFoundError("No matching time slot for this doctor")

        # Double booking is rejected by the store's unique index, not checked here
        appointment = self.repo.create(patient_id, timeslot_id, on_date)
        logger.info(f"Appointment {appointment.id} booked by {patient_id} on slot {timeslot_id} for {on_date}")
        return AppointmentResponse.model_validate(appointment)

    def set_status(self, appointment_id: int, actor_id: UUID, target: AppointmentStatus) -> None:
        if target not in TRANSITIONS:
            raise BadRequestError(f"Cannot move an appointment to {target.value}")

        self.guard.require_role(actor_id, TRANSITIONS[target][0])
        self._transition(appointment_id, actor_id, target)

    def _transition(self, appointment_id: int, actor_id: UUID, target: AppointmentStatus) -> None:
        role, sources = TRANSITIONS[target]
        if role == UserRole.DOCTOR:
            rows = self.repo.update_status_for_doctor(appointment_id, actor_id, target, sources)
        else:
            rows = self.repo.update_status_for_patient(appointment_id, actor_id, target, sources)

        if rows == 0:
            raise NotFoundError("Appointment not found")

        logger.info(f"Appointment {appointment_id} -> {target.value} by {actor_id}")

    def update_status_by_action(self, appointment_id: int, doctor_id: UUID, action: str) -> None:
        """Doctor accept/reject, addressed by action token."""
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        target = DOCTOR_ACTIONS.get(action)
        if target is None:
            raise BadRequestError("action must be accept or reject")
        self._transition(appointment_id, doctor_id, target)

    def cancel(self, appointment_id: int, patient_id: UUID) -> None:
        self.set_status(appointment_id, patient_id, AppointmentStatus.CANCELED)

    def delete(self, appointment_id: int, patient_id: UUID) -> None:
        """Remove the patient's own appointment outright."""
        self.guard.require_role(patient_id, UserRole.PATIENT)
        if self.repo.delete_for_patient(appointment_id, patient_id) == 0:
            raise NotFoundError("Appointment not found")
        logger.info(f"Appointment {appointment_id} deleted by {patient_id}")

    def get(self, appointment_id: int, user_id: UUID) -> AppointmentResponse:
        """Visible to its patient, the doctor owning its slot, and admins."""
        access = self.repo.access_of(appointment_id)
        if access is None:
            raise NotFoundError("Appointment not found")

        allowed = access.patient_id == user_id
        if not allowed and access.doctor_id == user_id:
            allowed = self.guard.has_role(user_id, UserRole.DOCTOR)
        if not allowed:
            allowed = self.guard.has_role(user_id, UserRole.ADMIN)
        if not allowed:
            raise NotFoundError("Appointment not found")

        appointment = self.repo.by_id(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment not found")
        return AppointmentResponse.model_validate(appointment)
