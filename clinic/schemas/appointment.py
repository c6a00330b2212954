from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models.appointment import AppointmentStatus


class CreateAppointmentRequest(BaseModel):
    doctor_id: UUID
    date: str = Field(..., description="Date (YYYY-MM-DD)", examples=["2025-10-13"])
    start_time: str = Field(..., description="HH:MM or HH:MM:SS", examples=["09:00"])
    end_time: str = Field(..., description="HH:MM or HH:MM:SS", examples=["12:00"])


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    appointment_id: int = Field(validation_alias="id")
    patient_id: UUID
    timeslot_id: int
    date: date
    status: AppointmentStatus
    created_at: Optional[datetime] = None


class AppointmentOverview(BaseModel):
    """Patient-facing row: who, where and when."""

    appointment_id: int
    doctor_name: str
    department: Optional[str] = None
    place_name: str
    date: str
    start_time: str
    end_time: str
    status: AppointmentStatus


class DoctorAppointmentView(BaseModel):
    """Doctor-facing row of the schedule and request lists."""

    appointment_id: int
    patient_id: UUID
    patient_name: str
    date: str
    start_time: str
    end_time: str
    status: AppointmentStatus
    status_code: int


class DoctorListItem(BaseModel):
    doctor_id: UUID
    doctor_name: str
    department: Optional[str] = None


class TimeSlotRequest(BaseModel):
    day_of_weeks: int
    place_name: str = Field(..., min_length=1, max_length=255)
    start_time: str
    end_time: str


class TimeSlotView(BaseModel):
    timeslot_id: int
    day_of_weeks: int
    place_name: str
    start_time: str
    end_time: str
