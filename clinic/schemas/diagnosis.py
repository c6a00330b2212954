from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DiagnosisCreate(BaseModel):
    appointment_id: int
    symptom: str = Field(..., min_length=1)


class DiagnosisUpdate(BaseModel):
    symptom: str = Field(..., min_length=1)


class DiagnosisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    diagnosis_id: int = Field(validation_alias="id")
    symptom: str
    recorded_at: datetime
