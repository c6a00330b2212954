from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from ...api.deps import get_current_user_id, get_diagnosis_service
from ...schemas.diagnosis import DiagnosisCreate, DiagnosisResponse, DiagnosisUpdate
from ...services.diagnosis_service import DiagnosisService

router = APIRouter(tags=["Diagnoses"])


@router.get("/diagnoses/{patient_id}", response_model=List[DiagnosisResponse])
def history_by_patient(
    patient_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    service: DiagnosisService = Depends(get_diagnosis_service)
):
    """Diagnosis history of a patient (doctors only)."""
    return service.history(user_id, patient_id)


@router.post("/diagnoses/{patient_id}", response_model=DiagnosisResponse, status_code=status.HTTP_201_CREATED)
def create_diagnosis(
    patient_id: UUID,
    data: DiagnosisCreate,
    user_id: UUID = Depends(get_current_user_id),
    service: DiagnosisService = Depends(get_diagnosis_service)
):
    return service.create(user_id, patient_id, data)


@router.patch("/diagnosis/{diagnosis_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_diagnosis(
    diagnosis_id: int,
    data: DiagnosisUpdate,
    user_id: UUID = Depends(get_current_user_id),
    service: DiagnosisService = Depends(get_diagnosis_service)
):
    service.update(user_id, diagnosis_id, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
