from typing import List
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from ..core.errors import NotFoundError
from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.diagnosis import Diagnosis
from ..models.timeslot import TimeSlot
from ..schemas.diagnosis import DiagnosisCreate, DiagnosisResponse, DiagnosisUpdate
from .role_guard import RoleGuard

logger = logging.getLogger(__name__)


class DiagnosisService:
    def __init__(self, db: Session, guard: RoleGuard):
        self.db = db
        self.guard = guard

    def history(self, doctor_id: UUID, patient_id: UUID) -> List[DiagnosisResponse]:
        """All diagnoses recorded for a patient, oldest first."""
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        rows = (
            self.db.query(Diagnosis)
            .filter(Diagnosis.patient_id == patient_id)
            .order_by(Diagnosis.recorded_at, Diagnosis.id)
            .all()
        )
        if not rows:
            raise NotFoundError("No diagnoses for this patient")
        return [DiagnosisResponse.model_validate(row) for row in rows]

    def create(self, doctor_id: UUID, patient_id: UUID, data: DiagnosisCreate) -> DiagnosisResponse:
        """Record a diagnosis against one of the doctor's appointments with the patient."""
        self.guard.require_role(doctor_id, UserRole.DOCTOR)

        appointment = (
            self.db.query(Appointment.id)
            .join(TimeSlot, TimeSlot.id == Appointment.timeslot_id)
            .filter(
                Appointment.id == data.appointment_id,
                Appointment.patient_id == patient_id,
                TimeSlot.doctor_id == doctor_id,
            )
            .first()
        )
        if not appointment:
            raise NotFoundError("Appointment not found")

        diagnosis = Diagnosis(
            appointment_id=data.appointment_id,
            patient_id=patient_id,
            doctor_id=doctor_id,
            symptom=data.symptom,
        )
        self.db.add(diagnosis)
        self.db.commit()
        self.db.refresh(diagnosis)

        logger.info(f"Diagnosis {diagnosis.id} recorded for appointment {data.appointment_id}")
        return DiagnosisResponse.model_validate(diagnosis)

    def update(self, doctor_id: UUID, diagnosis_id: int, data: DiagnosisUpdate) -> None:
        """Only the doctor who recorded a diagnosis may change it."""
        self.guard.require_role(doctor_id, UserRole.DOCTOR)
        rows = (
            self.db.query(Diagnosis)
            .filter(Diagnosis.id == diagnosis_id, Diagnosis.doctor_id == doctor_id)
            .update({Diagnosis.symptom: data.symptom}, synchronize_session=False)
        )
        if rows == 0:
            self.db.rollback()
            raise NotFoundError("Diagnosis not found")
        self.db.commit()
