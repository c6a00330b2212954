from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ...api.deps import get_appointment_service, get_current_user_id, get_schedule_service
from ...schemas.appointment import (
    AppointmentOverview, AppointmentResponse, CreateAppointmentRequest,
    DoctorAppointmentView, DoctorListItem, TimeSlotRequest, TimeSlotView
)
from ...services.appointment_service import AppointmentService
from ...services.schedule_service import ScheduleService

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book(
    request: CreateAppointmentRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Book a doctor's time slot on a date (patients only)."""
    return service.book(user_id, request)


# Patient listings

@router.get("/status", response_model=List[AppointmentOverview])
def patient_upcoming(
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Upcoming pending and accepted appointments."""
    return service.patient_upcoming(user_id)


@router.get("/status/others", response_model=List[AppointmentOverview])
def patient_others(
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Past or canceled appointments."""
    return service.patient_others(user_id)


@router.get("/by-date/{date}", response_model=List[AppointmentOverview])
def patient_by_date(
    date: str,
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Accepted appointments on a date (YYYY-MM-DD)."""
    return service.patient_on_date(user_id, date)


# Public doctor directory

@router.get("/doctor", response_model=List[DoctorListItem])
def list_doctors(service: ScheduleService = Depends(get_schedule_service)):
    return service.list_doctors()


@router.get("/doctor/{doctor_id}", response_model=List[TimeSlotView])
def list_doctor_timeslots(
    doctor_id: UUID,
    service: ScheduleService = Depends(get_schedule_service)
):
    return service.doctor_timeslots(doctor_id)


# Doctor listings

@router.get("/request", response_model=List[DoctorAppointmentView])
def doctor_pending_requests(
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Pending appointment requests on the doctor's slots."""
    return service.doctor_pending(user_id)


@router.get("/assessed", response_model=List[DoctorAppointmentView])
def doctor_assessed_requests(
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    """Appointments the doctor has already decided on, or that were canceled."""
    return service.doctor_assessed(user_id)


@router.get("/by-doctor/{date}", response_model=List[DoctorAppointmentView])
def doctor_schedule_by_date(
    date: str,
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    return service.doctor_on_date(user_id, date)


# Time slots

@router.get("/timeslots", response_model=List[TimeSlotView])
def list_my_timeslots(
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    return service.my_timeslots(user_id)


@router.post("/timeslots", response_model=TimeSlotView, status_code=status.HTTP_201_CREATED)
def create_timeslot(
    request: TimeSlotRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    return service.create_timeslot(user_id, request)


@router.patch("/timeslots/{timeslot_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_timeslot(
    timeslot_id: int,
    request: TimeSlotRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    service.update_timeslot(user_id, timeslot_id, request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/timeslots/{timeslot_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_timeslot(
    timeslot_id: int,
    user_id: UUID = Depends(get_current_user_id),
    service: ScheduleService = Depends(get_schedule_service)
):
    service.delete_timeslot(user_id, timeslot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Single appointment

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    user_id: UUID = Depends(get_current_user_id),
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.get(appointment_id, user_id)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: int,
    user_id: UUID = Depends(get_current_user_id),
    service: AppointmentService = Depends(get_appointment_service)
):
    service.delete(appointment_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{appointment_id}/canceled", status_code=status.HTTP_204_NO_CONTENT)
def cancel_appointment(
    appointment_id: int,
    user_id: UUID = Depends(get_current_user_id),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Cancel the caller's pending or accepted appointment."""
    service.cancel(appointment_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{appointment_id}/status/{action}", status_code=status.HTTP_204_NO_CONTENT)
def update_appointment_status(
    appointment_id: int,
    action: str,
    user_id: UUID = Depends(get_current_user_id),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Accept or reject a pending appointment on one of the doctor's slots."""
    service.update_status_by_action(appointment_id, user_id, action)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
