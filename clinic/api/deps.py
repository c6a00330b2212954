from datetime import timedelta
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..core.config import Settings, get_settings
from ..core.database import get_db, get_redis
from ..core.errors import AuthenticationError
from ..core.security import TokenAuthority, security
from ..repositories.appointment_repository import SqlAlchemyAppointmentRepository
from ..repositories.auth_repository import AuthRepository, SqlAlchemyAuthRepository
from ..repositories.schedule_repository import ScheduleRepository
from ..services.appointment_service import AppointmentService
from ..services.auth_service import AuthService
from ..services.diagnosis_service import DiagnosisService
from ..services.role_guard import RoleGuard
from ..services.schedule_service import ScheduleService


def get_token_authority(settings: Settings = Depends(get_settings)) -> TokenAuthority:
    return TokenAuthority.from_settings(settings)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenAuthority = Depends(get_token_authority),
) -> UUID:
    """Extract and verify the bearer token from the Authorization header."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Not authenticated")

    return tokens.verify(credentials.credentials)


def get_auth_repository(db: Session = Depends(get_db)) -> AuthRepository:
    return SqlAlchemyAuthRepository(db)


def get_role_guard(repo: AuthRepository = Depends(get_auth_repository)) -> RoleGuard:
    return RoleGuard(repo)


def get_auth_service(
    repo: AuthRepository = Depends(get_auth_repository),
    tokens: TokenAuthority = Depends(get_token_authority),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(repo, tokens, timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))


def get_appointment_service(
    db: Session = Depends(get_db),
    guard: RoleGuard = Depends(get_role_guard),
) -> AppointmentService:
    return AppointmentService(SqlAlchemyAppointmentRepository(db), guard)


def get_schedule_service(
    db: Session = Depends(get_db),
    guard: RoleGuard = Depends(get_role_guard),
) -> ScheduleService:
    return ScheduleService(ScheduleRepository(db), guard)


def get_diagnosis_service(
    db: Session = Depends(get_db),
    guard: RoleGuard = Depends(get_role_guard),
) -> DiagnosisService:
    return DiagnosisService(db, guard)


# Rate limiting dependency
def rate_limit_check(
    request: Request,
    redis_client=Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> None:
    """Basic rate limiting for signup and login endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, 3600, 1)  # one-hour window
    else:
        if int(current_requests) >= settings.RATE_LIMIT_PER_HOUR:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
