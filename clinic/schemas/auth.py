from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from ..core.security import UserRole


class PatientSignup(BaseModel):
    hn: int = Field(..., gt=0)
    citizen_id: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=8)


class DoctorSignup(BaseModel):
    mln: str = Field(..., min_length=1, max_length=50)
    citizen_id: str = Field(..., min_length=1, max_length=20)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=8)
    department: Optional[str] = None
    position: Optional[str] = None


class PatientLogin(BaseModel):
    hn: int
    citizen_id: str
    password: str


class DoctorLogin(BaseModel):
    mln: str
    citizen_id: str
    password: str


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserResponse(BaseModel):
    user_id: UUID
    first_name: str
    last_name: str
    email: str
    phone: str
    roles: List[UserRole] = []
