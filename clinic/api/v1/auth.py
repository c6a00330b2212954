from uuid import UUID

from fastapi import APIRouter, Depends, status

from ...api.deps import get_auth_service, get_current_user_id, rate_limit_check
from ...schemas.auth import (
    AccessTokenResponse, DoctorLogin, DoctorSignup,
    PatientLogin, PatientSignup, UserResponse
)
from ...services.auth_service import AuthService

router = APIRouter(prefix="/users", tags=["Authentication"])


@router.post("/patients", response_model=AccessTokenResponse, status_code=status.HTTP_201_CREATED)
def register_patient(
    data: PatientSignup,
    auth_service: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient and return an access token."""
    return auth_service.register_patient(data)


@router.post("/doctors", response_model=AccessTokenResponse, status_code=status.HTTP_201_CREATED)
def register_doctor(
    data: DoctorSignup,
    auth_service: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit_check)
):
    """Register a new doctor and return an access token."""
    return auth_service.register_doctor(data)


@router.post("/login/patients", response_model=AccessTokenResponse)
def login_patient(
    data: PatientLogin,
    auth_service: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a patient by hospital number, citizen id and password."""
    return auth_service.login_patient(data)


@router.post("/login/doctors", response_model=AccessTokenResponse)
def login_doctor(
    data: DoctorLogin,
    auth_service: AuthService = Depends(get_auth_service),
    _: None = Depends(rate_limit_check)
):
    """Authenticate a doctor by license number, citizen id and password."""
    return auth_service.login_doctor(data)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh_token(
    user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Issue a new access token for the caller."""
    return auth_service.refresh(user_id)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Get current user information and roles."""
    return auth_service.current_user(user_id)
